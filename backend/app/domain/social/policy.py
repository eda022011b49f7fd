"""Policy helpers and guard checks for friend requests."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import asyncpg

from app.domain.common.errors import ForbiddenError, InvalidRequestError, NotFoundError, RateLimitedError
from app.domain.social.exceptions import AlreadyFriendsError, DuplicateRequestError
from app.domain.social.models import Invitation, UserProfile
from app.infra import rate_limit
from app.settings import settings

Pair = tuple[UUID, UUID]


def canonical_pair(user_a: UUID | str, user_b: UUID | str) -> Pair:
	"""Order a user pair deterministically so (a, b) and (b, a) map to the same key."""
	first, second = UUID(str(user_a)), UUID(str(user_b))
	return (first, second) if first < second else (second, first)


async def enforce_invite_limits(user_id: str) -> None:
	now = datetime.now(timezone.utc).timestamp()
	if not await rate_limit.allow("invite:send", user_id, limit=settings.invite_per_minute, window_seconds=60, now=now):
		raise RateLimitedError("per_minute")
	if not await rate_limit.allow("invite:daily", user_id, limit=settings.invite_per_day, window_seconds=86_400, now=now):
		raise RateLimitedError("per_day")


def guard_not_self(user_id: UUID | str, target_id: UUID | str) -> None:
	if str(user_id) == str(target_id):
		raise InvalidRequestError("self_invite")


async def ensure_user_exists(repo, conn: asyncpg.Connection, user_id: UUID) -> UserProfile:
	profile = await repo.get_user(user_id, conn=conn)
	if profile is None:
		raise NotFoundError("user_not_found")
	return profile


async def ensure_not_already_friends(repo, conn: asyncpg.Connection, user_a: UUID, user_b: UUID) -> None:
	if await repo.friendship_exists(canonical_pair(user_a, user_b), conn=conn):
		raise AlreadyFriendsError()


async def ensure_no_open_request(repo, conn: asyncpg.Connection, sender_id: UUID, target_id: UUID) -> None:
	if await repo.get_invitation(sender_id, target_id, conn=conn) is not None:
		raise DuplicateRequestError()


def ensure_recipient(invitation: Invitation | None, caller_id: UUID) -> Invitation:
	if invitation is None:
		raise NotFoundError("invitation_not_found")
	if invitation.request_id != caller_id:
		raise ForbiddenError("not_invitation_recipient")
	return invitation
