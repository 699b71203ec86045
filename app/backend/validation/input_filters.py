from __future__ import annotations

from typing import Annotated, Any, Dict, List, Mapping, Optional, Sequence, Set, Type

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from .types import InvalidValidationGroupError


MODEL_MESSAGE_KEY = "__model__"


class PydanticInputFilter:
	"""Input filter backed by a pydantic model.

	The whole model is validated on every run. When a validation group is set,
	errors for fields outside the group are discarded, so fields the caller did
	not send are not required. Group names must be keys the model reads: the
	alias of an aliased field, or its Python name as well when the model sets
	``populate_by_name``.

	Model-level errors (reported under ``__model__``) are kept under a group only
	when no field error was discarded, i.e. when the model had every field it
	needed to run its cross-field checks.

	Under a group, ``get_values`` coerces each submitted field on its own with the
	field's type and constraints; field validators are not re-run for it.
	"""

	def __init__(self, model: Type[BaseModel]) -> None:
		self.model = model
		self._inputs = _input_keys(model)
		self._adapters: Dict[str, TypeAdapter] = {}
		self._validation_group: Optional[Set[str]] = None
		self._data: Dict[str, Any] = {}
		self._messages: Dict[str, List[str]] = {}
		self._values: Dict[str, Any] = {}

	@property
	def validation_group(self) -> Optional[Set[str]]:
		if self._validation_group is None:
			return None
		return set(self._validation_group)

	def set_validation_group(self, fields: Optional[Sequence[str]]) -> None:
		if fields is None:
			self._validation_group = None
			return
		requested = {str(name) for name in fields}
		unknown = sorted(requested - set(self._inputs))
		if unknown:
			raise InvalidValidationGroupError(
				f"Unknown fields for {self.model.__name__}: {', '.join(unknown)}"
			)
		# An empty group validates everything.
		self._validation_group = requested or None

	def set_data(self, data: Mapping[str, Any]) -> None:
		self._data = dict(data)
		self._messages = {}
		self._values = {}

	def is_valid(self) -> bool:
		self._messages = {}
		self._values = {}
		try:
			instance = self.model.model_validate(self._data)
		except ValidationError as exc:
			self._messages = self._collect_messages(exc)
			if self._messages:
				return False
			return self._coerce_group()
		values = instance.model_dump()
		group_fields = self._group_fields()
		if group_fields is not None:
			values = {key: value for key, value in values.items() if key in group_fields}
		self._values = values
		return True

	def get_messages(self) -> Dict[str, List[str]]:
		return {key: list(messages) for key, messages in self._messages.items()}

	def get_values(self) -> Dict[str, Any]:
		return dict(self._values)

	def _group_fields(self) -> Optional[Set[str]]:
		if self._validation_group is None:
			return None
		return {self._inputs[key] for key in self._validation_group}

	def _collect_messages(self, exc: ValidationError) -> Dict[str, List[str]]:
		group_fields = self._group_fields()
		messages: Dict[str, List[str]] = {}
		model_messages: List[str] = []
		dropped = False
		for issue in exc.errors():
			loc = issue.get("loc") or ()
			message = str(issue.get("msg", "Invalid value."))
			if not loc:
				model_messages.append(message)
				continue
			key = str(loc[0])
			if group_fields is not None and self._inputs.get(key, key) not in group_fields:
				dropped = True
				continue
			messages.setdefault(key, []).append(message)
		if model_messages and not dropped:
			messages[MODEL_MESSAGE_KEY] = model_messages
		return messages

	def _coerce_group(self) -> bool:
		# Every remaining error was outside the group.
		values: Dict[str, Any] = {}
		for key in sorted(self._validation_group or ()):
			if key not in self._data:
				continue
			field_name = self._inputs[key]
			try:
				values[field_name] = self._adapter(field_name).validate_python(self._data[key])
			except ValidationError as exc:
				for issue in exc.errors():
					self._messages.setdefault(key, []).append(str(issue.get("msg", "Invalid value.")))
		if self._messages:
			return False
		self._values = values
		return True

	def _adapter(self, field_name: str) -> TypeAdapter:
		adapter = self._adapters.get(field_name)
		if adapter is None:
			info = self.model.model_fields[field_name]
			annotation = info.annotation
			if info.metadata:
				annotation = Annotated[(annotation, *info.metadata)]
			config = {key: value for key, value in self.model.model_config.items() if key.startswith("str_")}
			if config and not (isinstance(info.annotation, type) and issubclass(info.annotation, BaseModel)):
				adapter = TypeAdapter(annotation, config=ConfigDict(**config))
			else:
				adapter = TypeAdapter(annotation)
			self._adapters[field_name] = adapter
		return adapter


def _input_keys(model: Type[BaseModel]) -> Dict[str, str]:
	"""Map every key the model reads from input to its field name."""
	by_name = bool(model.model_config.get("populate_by_name") or model.model_config.get("validate_by_name"))
	keys: Dict[str, str] = {}
	for name, info in model.model_fields.items():
		alias = info.validation_alias if isinstance(info.validation_alias, str) else info.alias
		if alias:
			keys[alias] = name
			if by_name:
				keys[name] = name
		else:
			keys[name] = name
	return keys
