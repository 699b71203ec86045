"""Ordered stages run between route matching and the endpoint.

Every router uses ``PipelineRoute``. Once Starlette has matched the route, the
stages registered on ``app.state.route_pipeline`` run by descending priority;
the first stage that returns a response short-circuits the request.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Tuple

from fastapi import Request
from fastapi.routing import APIRoute
from starlette.responses import Response

from app.backend.logging_config import get_logger


logger = get_logger(__name__)


class RouteStage(Protocol):
	name: str
	priority: int

	async def __call__(self, request: Request, route: APIRoute) -> Optional[Response]:
		...


class RoutePipeline:
	def __init__(self) -> None:
		self._stages: List[Tuple[int, int, RouteStage]] = []

	def attach(self, stage: RouteStage) -> None:
		self._stages.append((-stage.priority, len(self._stages), stage))
		self._stages.sort(key=lambda item: (item[0], item[1]))

	@property
	def stages(self) -> List[RouteStage]:
		return [stage for _, _, stage in self._stages]

	async def run(self, request: Request, route: APIRoute) -> Optional[Response]:
		for stage in self.stages:
			response = await stage(request, route)
			if response is not None:
				logger.debug("Stage %s short-circuited %s %s", stage.name, request.method, route.name)
				return response
		return None


class PipelineRoute(APIRoute):
	def get_route_handler(self) -> Callable:
		handler = super().get_route_handler()
		route = self

		async def pipeline_handler(request: Request) -> Response:
			pipeline = getattr(request.app.state, "route_pipeline", None)
			if pipeline is not None:
				response = await pipeline.run(request, route)
				if response is not None:
					return response
			return await handler(request)

		return pipeline_handler
