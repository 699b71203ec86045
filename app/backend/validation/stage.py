from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.routing import APIRoute
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from app.backend import constants
from app.backend.response import outcome_response

from .gate import ContentValidationGate
from .types import RequestContext


class ContentValidationStage:
	"""Runs the gate after content negotiation has stored the request parameters."""

	name = "content_validation"
	priority = constants.CONTENT_VALIDATION_PRIORITY

	def __init__(self, gate: ContentValidationGate) -> None:
		self.gate = gate

	async def __call__(self, request: Request, route: APIRoute) -> Optional[Response]:
		context = RequestContext(
			method=request.method,
			endpoint_id=route.name,
			parameter_data=getattr(request.state, "parameter_data", None),
		)
		outcome = await run_in_threadpool(self.gate.evaluate, context)
		if outcome.passed:
			return None
		return outcome_response(outcome, request)
