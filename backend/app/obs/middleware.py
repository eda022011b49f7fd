"""Per-request metrics and access logging."""

from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.obs import logging as obs_logging
from app.obs import metrics
from app.settings import settings

_access_log = obs_logging.get_logger("evift.http")


def _route_template(request: Request) -> str:
	route = request.scope.get("route")
	return getattr(route, "path", None) or request.url.path


def _claimed_user(request: Request) -> str | None:
	# Only the dev header is visible before auth runs; bearer identities are not logged here.
	if not settings.is_dev():
		return None
	return request.headers.get("X-User-Id")


class ObservabilityMiddleware(BaseHTTPMiddleware):
	"""Times each request, records it in Prometheus and writes one ``http_request`` log line."""

	def __init__(self, app, *, enabled: bool = True) -> None:
		super().__init__(app)
		self._enabled = enabled

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		if not (self._enabled and settings.obs_enabled):
			return await call_next(request)

		request_id = getattr(request.state, "request_id", None)
		if request_id is None:
			request_id = request.headers.get("X-Request-Id") or str(uuid4())
			request.state.request_id = request_id
		client_ip = request.client.host if request.client else None
		tokens = obs_logging.bind_context(
			request_id=request_id,
			route=_route_template(request),
			user_id=_claimed_user(request),
			client_ip=client_ip,
		)
		started = time.perf_counter()
		status_code = 500
		try:
			response = await call_next(request)
			status_code = response.status_code
		except Exception:
			_access_log.exception("http_request_error", extra={"method": request.method, "path": request.url.path})
			raise
		finally:
			elapsed = time.perf_counter() - started
			route = _route_template(request)
			metrics.observe_request(route, request.method, status_code, elapsed)
			_access_log.info(
				"http_request",
				extra={
					"method": request.method,
					"route": route,
					"status": status_code,
					"latency_ms": round(elapsed * 1000, 3),
				},
			)
			obs_logging.reset_context(tokens)
			obs_logging.clear_context()

		response.headers.setdefault("X-Request-Id", request_id)
		return response


def install(app, *, enabled: bool = True) -> None:
	app.add_middleware(ObservabilityMiddleware, enabled=enabled)
