from __future__ import annotations

from unittest import TestCase

from app.backend.main import build_default_registry
from app.backend.validation.input_filters import PydanticInputFilter
from app.backend.validation.registry import InputFilterRegistry


class InputFilterRegistryTests(TestCase):
	def test_fetch_builds_new_instance_each_time(self) -> None:
		registry = InputFilterRegistry()
		registry.register("things", object)
		self.assertTrue(registry.exists("things"))
		self.assertIsNot(registry.fetch("things"), registry.fetch("things"))

	def test_unknown_name(self) -> None:
		registry = InputFilterRegistry()
		self.assertFalse(registry.exists("missing"))
		with self.assertRaises(KeyError):
			registry.fetch("missing")

	def test_register_rejects_bad_input(self) -> None:
		registry = InputFilterRegistry()
		with self.assertRaises(ValueError):
			registry.register("  ", object)
		with self.assertRaises(TypeError):
			registry.register("things", "not callable")  # type: ignore[arg-type]

	def test_default_registry_provides_contact_filter(self) -> None:
		registry = build_default_registry()
		self.assertEqual(registry.names(), ["contacts.input_filter"])
		self.assertIsInstance(registry.fetch("contacts.input_filter"), PydanticInputFilter)
