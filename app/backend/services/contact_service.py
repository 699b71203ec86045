from __future__ import annotations

import threading
import uuid
from typing import Any, Dict, List, Mapping, Optional

from app.backend.schemas import ContactInput


class ContactStore:
	def __init__(self) -> None:
		self._contacts: Dict[str, Dict[str, Any]] = {}
		self._lock = threading.Lock()

	def list_contacts(self) -> List[Dict[str, Any]]:
		with self._lock:
			return [dict(contact) for contact in self._contacts.values()]

	def get_contact(self, contact_id: str) -> Optional[Dict[str, Any]]:
		with self._lock:
			contact = self._contacts.get(contact_id)
			return dict(contact) if contact else None

	def create_contact(self, data: Mapping[str, Any]) -> Dict[str, Any]:
		contact = _normalize(data)
		contact["contact_id"] = uuid.uuid4().hex
		with self._lock:
			self._contacts[contact["contact_id"]] = contact
		return dict(contact)

	def replace_contact(self, contact_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
		contact = _normalize(data)
		contact["contact_id"] = contact_id
		with self._lock:
			if contact_id not in self._contacts:
				raise LookupError(f"Contact not found: {contact_id}")
			self._contacts[contact_id] = contact
		return dict(contact)

	def update_contact(self, contact_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
		with self._lock:
			current = self._contacts.get(contact_id)
			if current is None:
				raise LookupError(f"Contact not found: {contact_id}")
			merged = {key: value for key, value in current.items() if key != "contact_id"}
			merged.update(changes)
			contact = _normalize(merged)
			contact["contact_id"] = contact_id
			self._contacts[contact_id] = contact
		return dict(contact)

	def delete_contact(self, contact_id: str) -> bool:
		with self._lock:
			return self._contacts.pop(contact_id, None) is not None


def _normalize(data: Mapping[str, Any]) -> Dict[str, Any]:
	return ContactInput.model_validate(dict(data)).model_dump()
