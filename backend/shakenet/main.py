"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shakenet.api import network, ops
from shakenet.api.errors import install_error_handlers
from shakenet.api.middleware_request_id import RequestIdMiddleware
from shakenet.domain.network.sockets import NetworkNamespace, set_namespace
from shakenet.infra import postgres
from shakenet.infra.redis import redis_client
from shakenet.obs import init as obs_init
from shakenet.obs import shutdown as obs_shutdown
from shakenet.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	try:
		yield
	finally:
		obs_shutdown()
		await redis_client.close()
		await postgres.close_pool()


app = FastAPI(title="Shakenet Network Graph", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins or ())
if not allow_origins:
	allow_origins = ["http://localhost:3000"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=allow_origins)
network_namespace = NetworkNamespace()
sio.register_namespace(network_namespace)
set_namespace(network_namespace)
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)
obs_init(app)

app.add_middleware(RequestIdMiddleware)

app.include_router(network.router, tags=["network"])
app.include_router(ops.router, tags=["ops"])
