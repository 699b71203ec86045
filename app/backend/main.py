from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware

from app.backend import constants
from app.backend.logging_config import configure_logging, get_logger, resolve_level
from app.backend.middleware import RequestContextMiddleware
from app.backend.negotiation import ContentNegotiationStage
from app.backend.pipeline import RoutePipeline
from app.backend.response import error_response
from app.backend.routers import contacts, health
from app.backend.schemas import ContactInput
from app.backend.services.contact_service import ContactStore
from app.backend.settings import Settings, get_settings
from app.backend.validation.gate import ContentValidationGate
from app.backend.validation.input_filters import PydanticInputFilter
from app.backend.validation.registry import InputFilterRegistry
from app.backend.validation.stage import ContentValidationStage


logger = get_logger(__name__)


def create_app(
	settings: Optional[Settings] = None,
	registry: Optional[InputFilterRegistry] = None,
) -> FastAPI:
	settings = settings or get_settings()
	app = FastAPI(
		title=constants.APP_NAME,
		version=constants.APP_VERSION,
	)
	if registry is None:
		registry = build_default_registry()
	gate = ContentValidationGate(settings.content_validation, registry)

	app.state.settings = settings
	app.state.input_filter_registry = registry
	app.state.content_validation_gate = gate
	app.state.contacts = ContactStore()
	app.state.route_pipeline = _build_pipeline(gate)

	_register_middleware(app, settings)
	_register_handlers(app)
	_register_routers(app)
	logger.info(
		"Content validation configured for %d endpoint(s): %s",
		len(gate.config),
		", ".join(sorted(gate.config)) or "none",
	)
	return app


def build_default_registry() -> InputFilterRegistry:
	registry = InputFilterRegistry()
	registry.register(constants.CONTACT_INPUT_FILTER, lambda: PydanticInputFilter(ContactInput))
	return registry


def _build_pipeline(gate: ContentValidationGate) -> RoutePipeline:
	pipeline = RoutePipeline()
	pipeline.attach(ContentNegotiationStage())
	pipeline.attach(ContentValidationStage(gate))
	return pipeline


def _register_middleware(app: FastAPI, settings: Settings) -> None:
	app.add_middleware(RequestContextMiddleware)
	app.add_middleware(GZipMiddleware, minimum_size=1024)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_allow_origins,
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.add_middleware(
		TrustedHostMiddleware,
		allowed_hosts=settings.trusted_hosts,
	)


def _register_routers(app: FastAPI) -> None:
	app.include_router(contacts.router)
	app.include_router(health.router)


def _register_handlers(app: FastAPI) -> None:
	@app.exception_handler(HTTPException)
	async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
		code = f"http_{exc.status_code}"
		message = _exc_message(exc.detail)
		evidence = None
		if isinstance(exc.detail, dict):
			detail_code = exc.detail.get("code")
			detail_message = exc.detail.get("message")
			detail_evidence = exc.detail.get("evidence")
			if isinstance(detail_code, str) and detail_code.strip():
				code = detail_code.strip()
			if isinstance(detail_message, str) and detail_message.strip():
				message = detail_message.strip()
			if isinstance(detail_evidence, list):
				evidence = [str(item) for item in detail_evidence]
		payload = error_response(
			code=code,
			message=message,
			request=request,
			status=exc.status_code,
			evidence=evidence,
		)
		return JSONResponse(status_code=exc.status_code, content=payload)

	@app.exception_handler(StarletteHTTPException)
	async def handle_starlette_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
		payload = error_response(
			code=f"http_{exc.status_code}",
			message=_exc_message(exc.detail),
			request=request,
			status=exc.status_code,
		)
		return JSONResponse(status_code=exc.status_code, content=payload)

	@app.exception_handler(RequestValidationError)
	async def handle_request_validation_error(
		request: Request,
		exc: RequestValidationError,
	) -> JSONResponse:
		evidence = []
		for issue in exc.errors():
			loc = ".".join(str(part) for part in issue.get("loc", []))
			msg = issue.get("msg", "Invalid request.")
			evidence.append(f"{loc}: {msg}" if loc else msg)
		payload = error_response(
			code="validation_error",
			message="Request validation failed.",
			request=request,
			status=422,
			evidence=evidence,
		)
		return JSONResponse(status_code=422, content=payload)

	@app.exception_handler(Exception)
	async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
		logger.exception("Unhandled error for %s %s", request.method, request.url.path)
		payload = error_response(
			code="internal_error",
			message="Internal server error.",
			request=request,
			status=500,
		)
		return JSONResponse(status_code=500, content=payload)


def _exc_message(detail: Any) -> str:
	if isinstance(detail, str):
		return detail
	if detail is None:
		return "Request failed."
	return str(detail)


configure_logging(source="api", level=resolve_level(get_settings().log_level))
app = create_app()
