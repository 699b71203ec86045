from __future__ import annotations

import json
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.responses import Response

from app.backend import constants
from app.backend.logging_config import get_logger
from app.backend.response import error_response


logger = get_logger(__name__)

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class ParameterDataContainer:
	def __init__(self, body_params: Optional[Dict[str, Any]] = None) -> None:
		self.body_params: Dict[str, Any] = dict(body_params or {})

	def get_body_params(self) -> Dict[str, Any]:
		return dict(self.body_params)


def get_parameter_data(request: Request) -> Optional[ParameterDataContainer]:
	return getattr(request.state, "parameter_data", None)


class ContentNegotiationStage:
	name = "content_negotiation"
	priority = constants.CONTENT_NEGOTIATION_PRIORITY

	async def __call__(self, request: Request, route: APIRoute) -> Optional[Response]:
		body_params: Dict[str, Any] = {}
		if request.method.upper() not in constants.METHODS_WITHOUT_BODIES:
			raw = await request.body()
			try:
				body_params = _parse_body(raw, request.headers.get("content-type", ""))
			except ValueError as exc:
				logger.info("Rejected body for %s %s: %s", request.method, route.name, exc)
				payload = error_response(
					code="invalid_request_body",
					message=str(exc),
					request=request,
					status=400,
				)
				return JSONResponse(status_code=400, content=payload)

		request.state.parameter_data = ParameterDataContainer(body_params=body_params)
		return None


def _parse_body(raw: bytes, content_type: str) -> Dict[str, Any]:
	if not raw.strip():
		return {}
	if content_type.split(";", 1)[0].strip().lower() == _FORM_CONTENT_TYPE:
		return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
	try:
		parsed = json.loads(raw)
	except (UnicodeDecodeError, json.JSONDecodeError) as exc:
		raise ValueError("Request body is not valid JSON.") from exc
	if not isinstance(parsed, dict):
		raise ValueError("Request body must be a JSON object.")
	return parsed
