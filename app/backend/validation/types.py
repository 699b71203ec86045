from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Protocol, Sequence, runtime_checkable


FailureKind = Literal[
	"misconfigured_input_filter",
	"missing_parameter_data",
	"invalid_patch_fields",
	"validation_failed",
]

FAILURE_STATUS: Dict[str, int] = {
	"misconfigured_input_filter": 500,
	"missing_parameter_data": 500,
	"invalid_patch_fields": 400,
	"validation_failed": 422,
}


class InvalidValidationGroupError(ValueError):
	"""Raised by an input filter when a validation group names unknown fields."""


class InputFilterResolutionError(LookupError):
	def __init__(self, name: str, message: str) -> None:
		super().__init__(message)
		self.name = name


class InputFilterNotFoundError(InputFilterResolutionError):
	def __init__(self, name: str) -> None:
		super().__init__(name, f'Input filter "{name}" is not registered.')


class InputFilterCapabilityError(InputFilterResolutionError):
	def __init__(self, name: str, instance: object) -> None:
		super().__init__(
			name,
			f'Input filter "{name}" resolved to {type(instance).__name__}, which does not implement InputFilter.',
		)


@runtime_checkable
class InputFilter(Protocol):
	"""Named rule set evaluated against a request body.

	``set_validation_group(None)`` restores validation of every field.
	"""

	def set_data(self, data: Mapping[str, Any]) -> None:
		...

	def is_valid(self) -> bool:
		...

	def get_messages(self) -> Dict[str, List[str]]:
		...

	def set_validation_group(self, fields: Optional[Sequence[str]]) -> None:
		...


@runtime_checkable
class ParameterSource(Protocol):
	def get_body_params(self) -> Optional[Mapping[str, Any]]:
		...


@dataclass(frozen=True)
class RequestContext:
	method: str
	endpoint_id: Optional[str] = None
	parameter_data: Optional[ParameterSource] = None


@dataclass(frozen=True)
class ValidationOutcome:
	passed: bool
	kind: Optional[FailureKind] = None
	status: Optional[int] = None
	detail: Optional[str] = None
	validation_messages: Dict[str, List[str]] = field(default_factory=dict)

	@classmethod
	def ok(cls) -> "ValidationOutcome":
		return cls(passed=True)

	@classmethod
	def fail(
		cls,
		kind: FailureKind,
		detail: str,
		validation_messages: Optional[Dict[str, List[str]]] = None,
	) -> "ValidationOutcome":
		return cls(
			passed=False,
			kind=kind,
			status=FAILURE_STATUS[kind],
			detail=detail,
			validation_messages=dict(validation_messages or {}),
		)

	def as_dict(self) -> Dict[str, Any]:
		payload: Dict[str, Any] = {"passed": self.passed}
		if not self.passed:
			payload.update(
				{
					"kind": self.kind,
					"status": self.status,
					"detail": self.detail,
				}
			)
			if self.kind == "validation_failed":
				payload["validation_messages"] = self.validation_messages
		return payload
