"""Typed failures raised by the event and social domain services."""

from __future__ import annotations

from fastapi import status


class EngineError(Exception):
	"""Base class for domain failures carrying an HTTP status and a detail code."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	detail: str = "engine_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class InvalidRequestError(EngineError):
	"""Malformed or self-referential input."""

	detail = "invalid_request"


class BadRequestError(EngineError):
	"""A business rule rejected the operation."""

	detail = "bad_request"


class ForbiddenError(EngineError):
	status_code = status.HTTP_403_FORBIDDEN
	detail = "forbidden"


class NotParticipantError(ForbiddenError):
	"""Caller has no participant row for the event."""

	status_code = status.HTTP_401_UNAUTHORIZED
	detail = "not_participant"


class NotFoundError(EngineError):
	status_code = status.HTTP_404_NOT_FOUND
	detail = "not_found"


class ConflictError(EngineError):
	"""A uniqueness constraint fired despite the pre-checks."""

	status_code = status.HTTP_409_CONFLICT
	detail = "conflict"


class RateLimitedError(EngineError):
	status_code = status.HTTP_429_TOO_MANY_REQUESTS
	detail = "rate_limited"
