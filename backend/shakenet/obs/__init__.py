"""Observability wiring: JSON logs, request metrics and optional tracing."""

from __future__ import annotations

from fastapi import FastAPI

from shakenet.obs import logging as obs_logging
from shakenet.obs import middleware, tracing
from shakenet.settings import settings


def init(app: FastAPI) -> None:
	"""Install observability on `app` once; a no-op when OBS_ENABLED is off."""
	if not settings.obs_enabled or getattr(app.state, "obs_installed", False):
		return
	obs_logging.configure_logging()
	middleware.install(app)
	tracing.init_tracing(app)
	app.state.obs_installed = True


def shutdown() -> None:
	tracing.shutdown_tracing()


__all__ = ["init", "shutdown"]
