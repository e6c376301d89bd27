from unittest.mock import AsyncMock

import pytest
import socketio

from shakenet.domain.network import sockets
from shakenet.domain.network.sockets import NetworkNamespace
from shakenet.infra.jwt import encode_access
from shakenet.settings import settings


def _scope_with_user(user_id: str) -> dict:
	return {"headers": [(b"x-user-id", user_id.encode())]}


def _namespace() -> NetworkNamespace:
	server = socketio.AsyncServer(async_mode="asgi")
	namespace = NetworkNamespace()
	server.register_namespace(namespace)
	namespace.emit = AsyncMock()
	return namespace


@pytest.mark.asyncio
async def test_connect_requires_user():
	namespace = _namespace()

	with pytest.raises(ConnectionRefusedError):
		await namespace.trigger_event("connect", "sid-1", {"asgi.scope": {"headers": []}})


@pytest.mark.asyncio
async def test_connect_joins_personal_room_and_acks():
	namespace = _namespace()
	namespace.enter_room = AsyncMock()

	await namespace.trigger_event("connect", "sid-1", {"asgi.scope": _scope_with_user("U1")})

	namespace.enter_room.assert_awaited_once_with("sid-1", "user:U1")
	events = [call.args[0] for call in namespace.emit.await_args_list]
	assert events == ["network:ack"]


@pytest.mark.asyncio
async def test_connect_accepts_auth_payload():
	namespace = _namespace()
	namespace.enter_room = AsyncMock()

	await namespace.trigger_event("connect", "sid-2", {"asgi.scope": {"headers": []}}, {"userId": "U9"})

	namespace.enter_room.assert_awaited_once_with("sid-2", "user:U9")


@pytest.mark.asyncio
async def test_emit_meet_new_targets_user_room():
	namespace = _namespace()
	original = sockets._namespace
	sockets.set_namespace(namespace)
	try:
		await sockets.emit_meet_new("U4", {"fromUserId": "U1"})
	finally:
		sockets.set_namespace(original)

	namespace.emit.assert_awaited_once_with("meet:new", {"fromUserId": "U1"}, room="user:U4")


@pytest.mark.asyncio
async def test_emit_meet_new_without_namespace_is_noop():
	original = sockets._namespace
	sockets.set_namespace(None)
	try:
		await sockets.emit_meet_new("U4", {"fromUserId": "U1"})
	finally:
		sockets.set_namespace(original)


@pytest.mark.asyncio
async def test_connect_with_access_token():
	namespace = _namespace()
	namespace.enter_room = AsyncMock()
	token = encode_access({"sub": "U7"})

	await namespace.trigger_event("connect", "sid-3", {"asgi.scope": {"headers": []}}, {"token": token})

	namespace.enter_room.assert_awaited_once_with("sid-3", "user:U7")
	payload = namespace.emit.await_args_list[0].args[1]
	assert payload == {"ok": True, "userId": "U7"}


@pytest.mark.asyncio
async def test_connect_rejects_bad_token_and_ignores_header_outside_dev():
	namespace = _namespace()
	namespace.enter_room = AsyncMock()

	with pytest.raises(ConnectionRefusedError):
		await namespace.trigger_event("connect", "sid-4", {"asgi.scope": {"headers": [(b"authorization", b"Bearer nope")]}})

	settings.environment = "production"
	with pytest.raises(ConnectionRefusedError):
		await namespace.trigger_event("connect", "sid-5", {"asgi.scope": _scope_with_user("U1")})
	namespace.enter_room.assert_not_awaited()
