from __future__ import annotations

from typing import Dict, List

from app.backend.validation.gate import ContentValidationGate
from app.backend.validation.registry import InputFilterRegistry


def get_summary(gate: ContentValidationGate, registry: InputFilterRegistry) -> Dict[str, object]:
	registered = set(registry.names())
	endpoints: List[Dict[str, object]] = []
	for endpoint, filter_name in sorted(gate.config.items()):
		endpoints.append(
			{
				"endpoint": endpoint,
				"input_filter": filter_name,
				"registered": filter_name in registered,
			}
		)
	misconfigured = [item["endpoint"] for item in endpoints if not item["registered"]]
	return {
		"content_validation": {
			"endpoints": endpoints,
			"registered_input_filters": sorted(registered),
			"cached_input_filters": gate.cached_input_filters(),
			"status": "pass" if not misconfigured else "fail",
			"misconfigured_endpoints": misconfigured,
		},
	}
