from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from app.backend.negotiation import get_parameter_data
from app.backend.pipeline import PipelineRoute
from app.backend.response import success_response
from app.backend.schemas import ApiEnvelope
from app.backend.services.contact_service import ContactStore


router = APIRouter(prefix="/api/contacts", tags=["contacts"], route_class=PipelineRoute)


def _store(request: Request) -> ContactStore:
	return request.app.state.contacts


def _body(request: Request) -> Dict[str, Any]:
	container = get_parameter_data(request)
	if container is None:
		return {}
	return container.get_body_params()


def _rejected(exc: ValidationError) -> HTTPException:
	evidence = []
	for issue in exc.errors():
		loc = ".".join(str(part) for part in issue.get("loc", []))
		evidence.append(f"{loc}: {issue.get('msg')}" if loc else str(issue.get("msg")))
	return HTTPException(
		status_code=422,
		detail={"code": "validation_error", "message": "Contact data is invalid.", "evidence": evidence},
	)


@router.get("", response_model=ApiEnvelope)
def list_contacts(request: Request):
	return success_response(
		request=request,
		data={"contacts": _store(request).list_contacts()},
	)


@router.get("/{contact_id}", response_model=ApiEnvelope)
def get_contact(request: Request, contact_id: str):
	contact = _store(request).get_contact(contact_id)
	if contact is None:
		raise HTTPException(status_code=404, detail="Contact not found.")
	return success_response(
		request=request,
		data={"contact": contact},
	)


@router.post("", response_model=ApiEnvelope, status_code=201)
def create_contact(request: Request):
	try:
		contact = _store(request).create_contact(_body(request))
	except ValidationError as exc:
		raise _rejected(exc) from exc
	return success_response(
		request=request,
		data={"contact": contact},
	)


@router.put("/{contact_id}", response_model=ApiEnvelope)
def replace_contact(request: Request, contact_id: str):
	try:
		contact = _store(request).replace_contact(contact_id, _body(request))
	except LookupError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	except ValidationError as exc:
		raise _rejected(exc) from exc
	return success_response(
		request=request,
		data={"contact": contact},
	)


@router.patch("/{contact_id}", response_model=ApiEnvelope)
def update_contact(request: Request, contact_id: str):
	try:
		contact = _store(request).update_contact(contact_id, _body(request))
	except LookupError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	except ValidationError as exc:
		raise _rejected(exc) from exc
	return success_response(
		request=request,
		data={"contact": contact},
	)


@router.delete("/{contact_id}", response_model=ApiEnvelope)
def delete_contact(request: Request, contact_id: str):
	if not _store(request).delete_contact(contact_id):
		raise HTTPException(status_code=404, detail="Contact not found.")
	return success_response(
		request=request,
		data={"deleted": contact_id},
	)
