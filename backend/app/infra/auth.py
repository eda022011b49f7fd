"""Authentication helpers for FastAPI endpoints.

The engine never checks credentials itself: it only needs a caller identity.
- Bearer JWTs (HS256, settings.secret_key) are accepted in every environment.
- Dev headers (X-User-Id) are only respected in development.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.infra import jwt as jwt_helper
from app.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	email: Optional[str] = None
	firstname: Optional[str] = None
	lastname: Optional[str] = None

	@property
	def uuid(self) -> UUID:
		return UUID(self.id)


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")

	sub = str(payload.get("sub") or "").strip()
	if not _is_uuid(sub):
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")

	email = payload.get("email")
	firstname = payload.get("firstname")
	lastname = payload.get("lastname")
	return AuthenticatedUser(
		id=sub,
		email=str(email) if email is not None else None,
		firstname=str(firstname) if firstname is not None else None,
		lastname=str(lastname) if lastname is not None else None,
	)


def _is_uuid(value: str) -> bool:
	try:
		UUID(value)
	except (TypeError, ValueError):
		return False
	return True


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user.

	In development we allow a simple header. In all other environments, headers are
	ignored and a valid Bearer JWT is required.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		return verify_access_jwt(credentials.credentials)

	if settings.is_dev() and x_user_id and _is_uuid(x_user_id):
		return AuthenticatedUser(id=x_user_id)

	raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
