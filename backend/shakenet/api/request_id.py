"""Request ID helpers shared by the middleware and the error handlers."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from shakenet.obs import logging as obs_logging

REQUEST_ID_ATTR = "request_id"


def get_request_id(request: Optional[Request] = None, default: str = "unknown") -> str:
	"""Return the request id from request.state, the logging context, or a default."""
	if request is not None:
		rid = getattr(request.state, REQUEST_ID_ATTR, None)
		if rid:
			return str(rid)
	return obs_logging.current_request_id() or default
