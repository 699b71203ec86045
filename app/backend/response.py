from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from app.backend.validation.types import ValidationOutcome


def now_iso() -> str:
	return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _request_id(request: Optional[Request]) -> Optional[str]:
	if request is None:
		return None
	return getattr(request.state, "request_id", None)


def success_response(
	*,
	request: Optional[Request] = None,
	data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
	payload: Dict[str, Any] = {
		"ok": True,
		"generated_at": now_iso(),
	}
	request_id = _request_id(request)
	if request_id:
		payload["request_id"] = request_id
	if data is not None:
		payload["data"] = data
	return payload


def error_response(
	*,
	code: str,
	message: str,
	request: Optional[Request] = None,
	status: Optional[int] = None,
	evidence: Optional[List[str]] = None,
	validation_messages: Optional[Dict[str, List[str]]] = None,
) -> Dict[str, Any]:
	error: Dict[str, Any] = {
		"code": code,
		"message": message,
		"evidence": evidence or [],
	}
	if status is not None:
		error["status"] = status
	if validation_messages is not None:
		error["validation_messages"] = validation_messages
	payload: Dict[str, Any] = {
		"ok": False,
		"generated_at": now_iso(),
		"error": error,
	}
	request_id = _request_id(request)
	if request_id:
		payload["request_id"] = request_id
	return payload


def outcome_response(outcome: ValidationOutcome, request: Optional[Request] = None) -> JSONResponse:
	if outcome.passed or outcome.kind is None or outcome.status is None:
		raise ValueError("Only failed outcomes can be rendered as error responses.")
	messages = outcome.validation_messages if outcome.kind == "validation_failed" else None
	payload = error_response(
		code=outcome.kind,
		message=outcome.detail or "Request rejected.",
		request=request,
		status=outcome.status,
		validation_messages=messages,
	)
	return JSONResponse(status_code=outcome.status, content=payload)
