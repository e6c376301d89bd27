"""JSON error bodies carrying the request id."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shakenet.api.request_id import get_request_id
from shakenet.domain.network.exceptions import NetworkError

logger = logging.getLogger(__name__)


def _error_body(request: Request, detail: object, **extra: object) -> dict:
	return {"detail": detail, **extra, "request_id": get_request_id(request)}


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		return JSONResponse(
			status_code=exc.status_code,
			content=_error_body(request, exc.detail),
			headers=getattr(exc, "headers", None),
		)

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		return JSONResponse(
			status_code=422,
			content=_error_body(request, "validation_error", errors=jsonable_encoder(exc.errors())),
		)

	@app.exception_handler(NetworkError)
	async def network_exc_handler(request: Request, exc: NetworkError):  # type: ignore[override]
		# Routers map the errors they expect; anything reaching here escaped that mapping.
		logger.warning("unmapped network error", extra={"reason": exc.reason, "path": request.url.path})
		if exc.retryable:
			return JSONResponse(
				status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
				content=_error_body(request, exc.reason),
				headers={"Retry-After": "1"},
			)
		return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(request, exc.reason))
