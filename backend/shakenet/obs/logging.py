"""JSON logging with request-scoped context.

Each record becomes one JSON object. Request id, user id and client ip bound by
the HTTP middleware ride along through contextvars; fields passed via `extra`
are copied in after redaction and truncation.
"""

from __future__ import annotations

import json
import logging
import random
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from shakenet.settings import settings

try:  # pragma: no cover - otel optional
	from opentelemetry import trace as otel_trace
except ImportError:  # pragma: no cover - optional dependency
	otel_trace = None  # type: ignore

_LOGGER_NAME = "shakenet"

_CONTEXT: Dict[str, ContextVar[Optional[str]]] = {
	name: ContextVar(f"obs_{name}", default=None) for name in ("request_id", "route", "user_id", "client_ip")
}
# Output key per context field.
_CONTEXT_KEYS = {"request_id": "request_id", "route": "route", "user_id": "user_id", "client_ip": "ip"}

# Meet messages are user content and never reach the logs.
_REDACT = ("token", "secret", "authorization", "password", "message", "payload", "body")

_MAX_STRING = 256
_MAX_ITEMS = 10

# Attributes every LogRecord carries; anything else came in through `extra`.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def bind_context(**values: Optional[str]) -> Dict[str, Token]:
	"""Bind request fields (request_id, route, user_id, client_ip); returns reset tokens."""
	return {key: _CONTEXT[key].set(value) for key, value in values.items() if value is not None}


def reset_context(tokens: Dict[str, Token]) -> None:
	for key, token in tokens.items():
		_CONTEXT[key].reset(token)


def current_request_id() -> Optional[str]:
	return _CONTEXT["request_id"].get()


def _clip(value: Any) -> Any:
	if isinstance(value, str):
		return value if len(value) <= _MAX_STRING else value[:_MAX_STRING] + "…"
	if isinstance(value, dict):
		clipped = {str(key): _scrub(str(key), item) for key, item in list(value.items())[:_MAX_ITEMS]}
		if len(value) > _MAX_ITEMS:
			clipped["…"] = f"+{len(value) - _MAX_ITEMS} keys"
		return clipped
	if isinstance(value, (list, tuple, set)):
		items = [_clip(item) for item in list(value)[:_MAX_ITEMS]]
		if len(value) > _MAX_ITEMS:
			items.append("…")
		return items
	return value


def _scrub(key: str, value: Any) -> Any:
	lowered = key.lower()
	if any(word in lowered for word in _REDACT):
		return "[redacted]"
	return _clip(value)


class JSONLogFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"logger": record.name,
			"msg": record.getMessage(),
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		for name, var in _CONTEXT.items():
			value = var.get()
			if value:
				payload[_CONTEXT_KEYS[name]] = value
		if otel_trace is not None:
			context = otel_trace.get_current_span().get_span_context()
			if getattr(context, "is_valid", False):
				payload["trace_id"] = f"{context.trace_id:032x}"
				payload["span_id"] = f"{context.span_id:016x}"
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		payload.update(
			(key, _scrub(key, value)) for key, value in vars(record).items() if key not in _RECORD_ATTRS
		)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Keep a random share of INFO records; other levels always pass."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = min(1.0, max(0.0, settings.obs_log_sampling_rate_info))
		return rate >= 1.0 or random.random() < rate


def configure_logging() -> logging.Logger:
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers[:] = [handler]
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
