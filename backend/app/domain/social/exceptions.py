"""Domain-level exceptions for friend requests."""

from __future__ import annotations

from app.domain.common.errors import BadRequestError


class AlreadyFriendsError(BadRequestError):
	detail = "already_friends"


class DuplicateRequestError(BadRequestError):
	detail = "already_sent"
