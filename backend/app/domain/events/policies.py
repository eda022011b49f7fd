"""Authorization guards for event-scoped actions.

Each guard takes already-resolved participant rows and raises a typed error,
so every rule can be exercised without a store.
"""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

from app.domain.common.errors import (
	BadRequestError,
	ForbiddenError,
	NotFoundError,
	NotParticipantError,
)
from app.domain.events.models import Participant
from app.domain.roles.models import EVENT_MANAGERS, GIFT_SHARERS, EventRole, RoleEvent

# Open-ended role names accepted for deleting someone else's bring item.
BRING_ITEM_MODERATORS = frozenset({"owner", "organizer", "admin", "host", "superadmin"})


def require_participant(participant: Participant | None, message: str = "not_participant") -> Participant:
	if participant is None:
		raise NotParticipantError(message)
	return participant


def is_event_manager(participant: Participant | None) -> bool:
	return participant is not None and participant.role_kind in EVENT_MANAGERS


def require_event_manager(participant: Participant | None) -> Participant:
	if participant is None or not is_event_manager(participant):
		raise ForbiddenError("event_manager_required")
	return participant


def ensure_role_update_allowed(requester: Participant | None, target: Participant | None) -> Participant:
	"""Target superAdmin rows are immutable and admin rows need a superAdmin requester."""
	requester = require_event_manager(requester)
	if target is None:
		raise NotFoundError("participant_not_found")
	if target.role_kind is EventRole.SUPER_ADMIN:
		raise ForbiddenError("super_admin_immutable")
	if target.role_kind is EventRole.ADMIN and requester.role_kind is not EventRole.SUPER_ADMIN:
		raise ForbiddenError("super_admin_required")
	return target


def ensure_assignable_role(role: RoleEvent | None) -> RoleEvent:
	if role is None or role.role is None:
		raise NotFoundError("role_not_found")
	if role.role is EventRole.SUPER_ADMIN:
		raise ForbiddenError("super_admin_not_assignable")
	return role


def ensure_invitable(
	candidates: Iterable[UUID],
	*,
	friend_ids: set[UUID],
	participant_ids: set[UUID],
) -> None:
	"""Reject the whole batch when any candidate is a participant or not a friend."""
	for candidate in candidates:
		if candidate in participant_ids:
			raise BadRequestError("already_participant")
		if candidate not in friend_ids:
			raise BadRequestError("not_friend")


def ensure_not_invited(invited_ids: set[UUID]) -> None:
	if invited_ids:
		raise BadRequestError("already_invited")


def ensure_can_share_gifts(participant: Participant | None) -> Participant:
	if participant is None or participant.role_kind not in GIFT_SHARERS:
		raise BadRequestError("gift_role_required")
	return participant


def ensure_can_delete_bring_item(participant: Participant | None, *, created_by_id: UUID, user_id: UUID) -> None:
	if created_by_id == user_id:
		return
	participant = require_participant(participant)
	role_name = (participant.role_name or "").lower()
	if role_name not in BRING_ITEM_MODERATORS:
		raise ForbiddenError("bring_item_delete_forbidden")
