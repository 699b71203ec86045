from unittest import TestCase
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.backend.main import build_default_registry, create_app
from app.backend.pipeline import RoutePipeline
from app.backend.settings import Settings
from app.backend.validation.stage import ContentValidationStage


def _settings(**overrides) -> Settings:
	values = {
		"content_validation": {
			"create_contact": "contacts.input_filter",
			"replace_contact": "contacts.input_filter",
			"update_contact": "contacts.input_filter",
		},
	}
	values.update(overrides)
	return Settings(**values)


class ApiContractsTests(TestCase):
	def setUp(self) -> None:
		self.registry = build_default_registry()
		self.app = create_app(settings=_settings(), registry=self.registry)
		self.client = TestClient(self.app)

	def _create(self, **body) -> dict:
		response = self.client.post("/api/contacts", json=body)
		self.assertEqual(response.status_code, 201, response.text)
		return response.json()["data"]["contact"]

	def test_valid_post_reaches_handler(self) -> None:
		response = self.client.post("/api/contacts", json={"name": "Alice", "age": "30"})
		self.assertEqual(response.status_code, 201)
		payload = response.json()
		self.assertTrue(payload["ok"])
		self.assertEqual(payload["data"]["contact"]["name"], "Alice")
		self.assertEqual(payload["data"]["contact"]["age"], 30)
		self.assertIn("request_id", payload)

	def test_failed_validation_returns_422_with_field_messages(self) -> None:
		response = self.client.post(
			"/api/contacts",
			headers={"X-Request-ID": "req-422"},
			json={"name": ""},
		)
		self.assertEqual(response.status_code, 422)
		payload = response.json()
		self.assertFalse(payload["ok"])
		self.assertEqual(payload["request_id"], "req-422")
		error = payload["error"]
		self.assertEqual(error["code"], "validation_failed")
		self.assertEqual(error["status"], 422)
		self.assertEqual(error["message"], "Failed Validation")
		self.assertIn("name", error["validation_messages"])
		self.assertGreaterEqual(len(error["validation_messages"]["name"]), 1)
		self.assertEqual(self.client.get("/api/contacts").json()["data"]["contacts"], [])

	def test_patch_with_unknown_field_returns_400(self) -> None:
		contact = self._create(name="Alice", age=30)
		response = self.client.patch(f"/api/contacts/{contact['contact_id']}", json={"ghost": 1})
		self.assertEqual(response.status_code, 400)
		error = response.json()["error"]
		self.assertEqual(error["code"], "invalid_patch_fields")
		self.assertNotIn("validation_messages", error)

	def test_patch_only_validates_submitted_fields(self) -> None:
		contact = self._create(name="Alice", age=30)
		response = self.client.patch(f"/api/contacts/{contact['contact_id']}", json={"name": "Alicia"})
		self.assertEqual(response.status_code, 200, response.text)
		updated = response.json()["data"]["contact"]
		self.assertEqual(updated["name"], "Alicia")
		self.assertEqual(updated["age"], 30)

	def test_put_requires_full_body(self) -> None:
		contact = self._create(name="Alice", age=30)
		response = self.client.put(f"/api/contacts/{contact['contact_id']}", json={"name": "Alicia"})
		self.assertEqual(response.status_code, 422)
		self.assertIn("age", response.json()["error"]["validation_messages"])

	def test_put_unknown_contact_returns_404_after_validation(self) -> None:
		response = self.client.put("/api/contacts/missing", json={"name": "Bob", "age": 4})
		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.json()["error"]["code"], "http_404")

	def test_bodiless_methods_are_not_validated(self) -> None:
		contact = self._create(name="Alice", age=30)
		self.assertEqual(self.client.get(f"/api/contacts/{contact['contact_id']}").status_code, 200)
		self.assertEqual(self.client.delete(f"/api/contacts/{contact['contact_id']}").status_code, 200)
		self.assertEqual(self.client.get(f"/api/contacts/{contact['contact_id']}").status_code, 404)

	def test_form_encoded_body_is_validated(self) -> None:
		response = self.client.post(
			"/api/contacts",
			content="name=Carol&age=52",
			headers={"Content-Type": "application/x-www-form-urlencoded"},
		)
		self.assertEqual(response.status_code, 201, response.text)
		self.assertEqual(response.json()["data"]["contact"]["age"], 52)

	def test_malformed_json_is_rejected_by_negotiation(self) -> None:
		response = self.client.post(
			"/api/contacts",
			content="{not json",
			headers={"Content-Type": "application/json"},
		)
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()["error"]["code"], "invalid_request_body")

	def test_non_object_json_is_rejected_by_negotiation(self) -> None:
		response = self.client.post("/api/contacts", json=["Alice", 30])
		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.json()["error"]["code"], "invalid_request_body")

	def test_registry_fetch_runs_once_across_requests(self) -> None:
		with patch.object(self.registry, "fetch", wraps=self.registry.fetch) as fetch:
			for _ in range(3):
				self.client.post("/api/contacts", json={"name": "Alice", "age": 30})
			self.client.post("/api/contacts", json={"name": ""})
		self.assertEqual(fetch.call_count, 1)

	def test_health_summary_reports_configuration(self) -> None:
		self._create(name="Alice", age=30)
		response = self.client.get("/api/health/summary")
		self.assertEqual(response.status_code, 200)
		summary = response.json()["data"]["content_validation"]
		self.assertEqual(summary["status"], "pass")
		self.assertEqual(summary["cached_input_filters"], ["contacts.input_filter"])
		self.assertEqual(len(summary["endpoints"]), 3)


class MisconfiguredApiTests(TestCase):
	def test_unknown_input_filter_returns_500(self) -> None:
		app = create_app(
			settings=_settings(content_validation={"create_contact": "contacts.missing"}),
			registry=build_default_registry(),
		)
		client = TestClient(app)
		response = client.post("/api/contacts", json={"name": "Alice", "age": 30})
		self.assertEqual(response.status_code, 500)
		error = response.json()["error"]
		self.assertEqual(error["code"], "misconfigured_input_filter")
		self.assertIn("contacts.missing", error["message"])

		summary = client.get("/api/health/summary").json()["data"]["content_validation"]
		self.assertEqual(summary["status"], "fail")
		self.assertEqual(summary["misconfigured_endpoints"], ["create_contact"])

	def test_missing_negotiation_stage_returns_500(self) -> None:
		app = create_app(settings=_settings(), registry=build_default_registry())
		pipeline = RoutePipeline()
		pipeline.attach(ContentValidationStage(app.state.content_validation_gate))
		app.state.route_pipeline = pipeline
		client = TestClient(app)
		response = client.post("/api/contacts", json={"name": "Alice", "age": 30})
		self.assertEqual(response.status_code, 500)
		self.assertEqual(response.json()["error"]["code"], "missing_parameter_data")

	def test_unmapped_endpoint_skips_validation(self) -> None:
		app = create_app(settings=_settings(content_validation={}), registry=build_default_registry())
		client = TestClient(app)
		response = client.post("/api/contacts", json={"name": ""})
		self.assertEqual(response.status_code, 422)
		error = response.json()["error"]
		self.assertEqual(error["code"], "validation_error")
		self.assertNotIn("validation_messages", error)
		self.assertTrue(any(item.startswith("name") for item in error["evidence"]))

	def test_query_string_is_not_merged_into_body(self) -> None:
		app = create_app(settings=_settings(), registry=build_default_registry())
		client = TestClient(app)
		response = client.post("/api/contacts?age=30", json={"name": "Alice"})
		self.assertEqual(response.status_code, 422)
		self.assertIn("age", response.json()["error"]["validation_messages"])
