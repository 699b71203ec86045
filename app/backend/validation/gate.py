from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from app.backend import constants
from app.backend.logging_config import get_logger

from .types import (
	InputFilter,
	InputFilterCapabilityError,
	InputFilterNotFoundError,
	InputFilterResolutionError,
	InvalidValidationGroupError,
	RequestContext,
	ValidationOutcome,
)


logger = get_logger(__name__)


class ContentValidationGate:
	"""Decides whether a routed request may reach its handler.

	``config`` maps endpoint names to input filter names. Input filters are
	fetched from ``registry`` on first use and cached for the life of the gate.
	Cached filters are stateful, so evaluation against one filter is serialized.
	"""

	def __init__(self, config: Optional[Mapping[str, str]] = None, registry: Any = None) -> None:
		self.config: Mapping[str, str] = MappingProxyType(dict(config or {}))
		self.registry = registry
		self._input_filters: Dict[str, InputFilter] = {}
		self._filter_locks: Dict[str, threading.Lock] = {}
		self._cache_lock = threading.Lock()

	def evaluate(self, context: RequestContext) -> ValidationOutcome:
		method = context.method.upper()
		if method in constants.METHODS_WITHOUT_BODIES:
			return ValidationOutcome.ok()

		endpoint_id = context.endpoint_id
		if not endpoint_id:
			return ValidationOutcome.ok()

		if endpoint_id not in self.config:
			return ValidationOutcome.ok()

		filter_name = self.config[endpoint_id]
		try:
			input_filter = self.resolve_input_filter(filter_name)
		except InputFilterResolutionError as exc:
			logger.error("Cannot validate %s %s: %s", method, endpoint_id, exc)
			return ValidationOutcome.fail(
				"misconfigured_input_filter",
				f'Listed input filter "{filter_name}" does not exist; cannot validate request',
			)

		body_params = None
		if context.parameter_data is not None:
			body_params = context.parameter_data.get_body_params()
		if body_params is None:
			logger.error("No parameter data for %s %s; content negotiation did not run", method, endpoint_id)
			return ValidationOutcome.fail(
				"missing_parameter_data",
				"Content negotiation stage did not run; cannot validate request",
			)
		data = dict(body_params)

		with self._filter_lock(filter_name):
			if method == "PATCH":
				try:
					input_filter.set_validation_group(list(data))
				except InvalidValidationGroupError as exc:
					logger.info("Rejected PATCH fields for %s: %s", endpoint_id, exc)
					return ValidationOutcome.fail(
						"invalid_patch_fields",
						"Invalid data specified in request",
					)
			else:
				input_filter.set_validation_group(None)

			input_filter.set_data(data)
			if input_filter.is_valid():
				return ValidationOutcome.ok()
			messages = input_filter.get_messages()

		logger.info("Validation failed for %s %s: %s", method, endpoint_id, sorted(messages))
		return ValidationOutcome.fail(
			"validation_failed",
			"Failed Validation",
			validation_messages=messages,
		)

	def resolve_input_filter(self, name: str) -> InputFilter:
		cached = self._input_filters.get(name)
		if cached is not None:
			return cached

		if self.registry is None or not self.registry.exists(name):
			raise InputFilterNotFoundError(name)

		logger.debug("Fetching input filter %s", name)
		instance = self.registry.fetch(name)
		if not isinstance(instance, InputFilter):
			raise InputFilterCapabilityError(name, instance)

		with self._cache_lock:
			cached = self._input_filters.setdefault(name, instance)
			self._filter_locks.setdefault(name, threading.Lock())
		if cached is instance:
			logger.info("Cached input filter %s", name)
		return cached

	def cached_input_filters(self) -> List[str]:
		with self._cache_lock:
			return sorted(self._input_filters)

	def _filter_lock(self, name: str) -> threading.Lock:
		with self._cache_lock:
			return self._filter_locks.setdefault(name, threading.Lock())
