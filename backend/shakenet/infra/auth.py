"""Resolving the caller of an HTTP request or socket connection.

Outside development only a bearer JWT identifies the caller. In development the
X-User-Id header (or a `userId` socket auth field) is also accepted so local
tools can act as any user.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import InvalidTokenError

from shakenet.infra import jwt as jwt_helper
from shakenet.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	display_name: Optional[str] = None
	session_id: Optional[str] = None


_bearer_scheme = HTTPBearer(auto_error=False)


def user_from_claims(claims: Mapping[str, object]) -> AuthenticatedUser:
	sub = str(claims.get("sub") or "").strip()
	if not sub:
		raise InvalidTokenError("missing_claim:sub")
	display_name = claims.get("name") or claims.get("display_name")
	session_id = claims.get("sid")
	return AuthenticatedUser(
		id=sub,
		display_name=str(display_name) if display_name else None,
		session_id=str(session_id) if session_id else None,
	)


def user_from_token(token: str) -> AuthenticatedUser:
	"""Raises jwt.InvalidTokenError when the token does not check out."""
	return user_from_claims(jwt_helper.decode_access(token))


def resolve_user(token: Optional[str], dev_user_id: Optional[str]) -> Optional[AuthenticatedUser]:
	if token:
		return user_from_token(token)
	if dev_user_id and settings.is_dev():
		return AuthenticatedUser(id=dev_user_id.strip())
	return None


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	token = credentials.credentials if credentials else None
	try:
		user = resolve_user(token, x_user_id)
	except InvalidTokenError:
		user = None
	if user is None or not user.id:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	return user
