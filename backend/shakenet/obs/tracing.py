"""Distributed tracing setup (OpenTelemetry) for the backend."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from fastapi import FastAPI

from shakenet.settings import settings

try:  # pragma: no cover - imported conditionally
	from opentelemetry import trace
	from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
	from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
	from opentelemetry.sdk.resources import Resource
	from opentelemetry.sdk.trace import TracerProvider
	from opentelemetry.sdk.trace.export import BatchSpanProcessor
	export_available = True
except ImportError:  # pragma: no cover - tracing extra not installed
	export_available = False
	trace = None  # type: ignore

LOGGER = logging.getLogger(__name__)
_instrumented = False


@contextmanager
def span(name: str, **attributes: Any) -> Iterator[Optional[Any]]:
	"""Open a span named `name` when tracing is installed; attributes are prefixed `shakenet.`."""
	if trace is None:
		yield None
		return
	with trace.get_tracer("shakenet").start_as_current_span(name) as current:
		for key, value in attributes.items():
			if value is not None:
				current.set_attribute(f"shakenet.{key}", value)
		yield current


def _instrument_clients() -> None:
	"""Instrument the asyncpg, httpx and redis clients when their instrumentors are installed."""
	for module_name, class_name in (
		("opentelemetry.instrumentation.asyncpg", "AsyncPGInstrumentor"),
		("opentelemetry.instrumentation.httpx", "HTTPXClientInstrumentor"),
		("opentelemetry.instrumentation.redis", "RedisInstrumentor"),
	):
		try:
			module = __import__(module_name, fromlist=[class_name])
		except ImportError:  # pragma: no cover
			LOGGER.debug("%s not available", class_name)
			continue
		getattr(module, class_name)().instrument()


def init_tracing(app: FastAPI) -> Optional[Any]:
	"""Initialise OpenTelemetry tracing if enabled and dependencies present."""
	global _instrumented
	if not settings.obs_tracing_enabled:
		LOGGER.info("Tracing disabled via configuration")
		return None
	if not export_available or trace is None:
		LOGGER.warning("Tracing requested but OpenTelemetry dependencies missing")
		return None
	if settings.otel_exporter_otlp_endpoint is None:
		LOGGER.warning("Tracing requested but OTLP endpoint not configured")
		return None
	if _instrumented:
		return trace.get_tracer_provider()

	resource = Resource.create(
		{
			"service.name": settings.service_name,
			"service.version": settings.git_commit,
			"deployment.environment": settings.environment,
		}
	)
	provider = TracerProvider(resource=resource)
	exporter = OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint, insecure=True)
	provider.add_span_processor(BatchSpanProcessor(exporter))
	trace.set_tracer_provider(provider)

	FastAPIInstrumentor.instrument_app(app)
	_instrument_clients()

	_instrumented = True
	LOGGER.info("OpenTelemetry tracing initialised", extra={"endpoint": settings.otel_exporter_otlp_endpoint})
	return provider


def shutdown_tracing() -> None:
	if not export_available or trace is None:
		return
	provider = trace.get_tracer_provider()
	if hasattr(provider, "shutdown"):
		provider.shutdown()  # type: ignore[call-arg]
