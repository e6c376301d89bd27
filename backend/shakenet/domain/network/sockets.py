"""Socket.IO namespace for network graph notifications (meet requests)."""

from __future__ import annotations

import logging
from typing import Optional

import socketio
from jwt import InvalidTokenError

from shakenet.infra.auth import resolve_user
from shakenet.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

_namespace: Optional["NetworkNamespace"] = None


def _header(scope: dict, name: str) -> Optional[str]:
	target = name.encode().lower()
	for key, value in scope.get("headers", []):
		if key.lower() == target:
			return value.decode()
	return None


def _bearer(value: Optional[str]) -> Optional[str]:
	if value and value.lower().startswith("bearer "):
		return value.split(" ", 1)[1].strip() or None
	return None


class NetworkNamespace(socketio.AsyncNamespace):
	"""Namespace that keeps each client in their personal room."""

	def __init__(self) -> None:
		super().__init__("/network")
		self._sessions: dict[str, str] = {}

	async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
		scope = environ.get("asgi.scope", environ)
		auth_payload = auth or {}
		token = auth_payload.get("token") or _bearer(_header(scope, "authorization"))
		try:
			user = resolve_user(token, auth_payload.get("userId") or _header(scope, "x-user-id"))
		except InvalidTokenError:
			logger.info("socket rejected invalid token", extra={"sid": sid})
			raise ConnectionRefusedError("invalid_token")
		if user is None:
			raise ConnectionRefusedError("missing_credentials")
		obs_metrics.socket_connected(self.namespace)
		self._sessions[sid] = user.id
		await self.enter_room(sid, self.user_room(user.id))
		await self.emit("network:ack", {"ok": True, "userId": user.id}, room=sid)

	async def on_disconnect(self, sid: str) -> None:
		user_id = self._sessions.pop(sid, None)
		if user_id is None:
			return
		obs_metrics.socket_disconnected(self.namespace)
		await self.leave_room(sid, self.user_room(user_id))

	@staticmethod
	def user_room(user_id: str) -> str:
		return f"user:{user_id}"


def set_namespace(ns: Optional[NetworkNamespace]) -> None:
	global _namespace
	_namespace = ns


async def emit_meet_new(user_id: str, payload: dict) -> None:
	if _namespace is None:
		return
	obs_metrics.socket_event(_namespace.namespace, "meet:new")
	await _namespace.emit("meet:new", payload, room=NetworkNamespace.user_room(user_id))
