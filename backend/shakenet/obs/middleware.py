"""Request middleware: metrics, one structured log line per request, trace headers."""

from __future__ import annotations

import time
from uuid import uuid4

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from shakenet.obs import logging as obs_logging
from shakenet.obs import metrics
from shakenet.settings import settings

try:  # pragma: no cover - optional dependency
	from opentelemetry import trace
except ImportError:  # pragma: no cover - otel optional
	trace = None  # type: ignore

# Probe and scrape traffic is counted but not logged.
_QUIET_PREFIXES = ("/health/", "/metrics")


def _route_template(request: Request) -> str:
	# The router writes the matched route into the shared scope, so this is only
	# meaningful once the request has been dispatched.
	route = request.scope.get("route")
	path = getattr(route, "path", None)
	return path if path else "unmatched"


def _traceparent() -> str | None:
	if trace is None:
		return None
	context = trace.get_current_span().get_span_context()
	if not getattr(context, "is_valid", False):
		return None
	return f"00-{context.trace_id:032x}-{context.span_id:016x}-01"


class ObservabilityMiddleware(BaseHTTPMiddleware):
	def __init__(self, app, *, enabled: bool = True) -> None:
		super().__init__(app)
		self._enabled = enabled
		self._logger = obs_logging.get_logger("shakenet.http")

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		if not (self._enabled and settings.obs_enabled):
			return await call_next(request)

		request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-Id") or str(uuid4())
		request.state.request_id = request_id
		tokens = obs_logging.bind_context(
			request_id=request_id,
			client_ip=request.client.host if request.client else None,
		)
		start = time.perf_counter()
		status_code = 500
		try:
			response = await call_next(request)
			status_code = response.status_code
		except Exception:
			self._logger.exception("http_request_error", extra={"method": request.method, "path": request.url.path})
			raise
		finally:
			elapsed = time.perf_counter() - start
			route = _route_template(request)
			metrics.observe_request(route, request.method, status_code, elapsed)
			if not request.url.path.startswith(_QUIET_PREFIXES):
				self._logger.info(
					"http_request",
					extra={
						"method": request.method,
						"route": route,
						"status": status_code,
						"latency_ms": round(elapsed * 1000, 3),
					},
				)
			obs_logging.reset_context(tokens)

		response.headers.setdefault("X-Request-Id", request_id)
		traceparent = _traceparent()
		if traceparent:
			response.headers.setdefault("traceparent", traceparent)
		return response


def install(app: FastAPI, *, enabled: bool = True) -> None:
	app.add_middleware(ObservabilityMiddleware, enabled=enabled)
