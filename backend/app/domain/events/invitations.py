"""Event invitations: bulk invite, respond, and pending notification counts."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence
from uuid import UUID

from fastapi import BackgroundTasks

from app.domain.common.errors import InvalidRequestError, NotFoundError
from app.domain.events import audit, policies
from app.domain.events import repo as repo_module
from app.domain.events.models import Event, EventInvitation, NotificationCounts
from app.domain.events.participants import ParticipantRegistry
from app.domain.events.schemas import EventInvitationSummary
from app.domain.roles.models import EventRole
from app.domain.roles.service import RoleDirectory
from app.domain.social import policy as social_policy
from app.domain.social import repo as social_repo_module
from app.domain.social.models import ResponseOutcome, UserProfile
from app.infra import mailer
from app.infra.postgres import get_pool
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


def _dedupe(user_ids: Sequence[UUID]) -> list[UUID]:
	seen: dict[UUID, None] = {}
	for user_id in user_ids:
		seen.setdefault(UUID(str(user_id)), None)
	return list(seen)


def _invitation_email_data(event: Event, organizer: UserProfile | None) -> dict[str, str]:
	return {
		"eventTitle": event.name,
		"eventDescription": event.description,
		"eventDate": event.date.isoformat(),
		"eventTime": event.time.strftime("%H:%M") if event.time else "",
		"eventLocation": event.address,
		"organizerFirstname": organizer.firstname if organizer else "",
		"organizerLastname": organizer.lastname if organizer else "",
	}


class EventInvitationService:
	"""Gatekeeper for who joins an event and how pending invites resolve."""

	def __init__(
		self,
		*,
		repository: repo_module.EventsRepository | None = None,
		social_repository: social_repo_module.SocialRepository | None = None,
		roles: RoleDirectory | None = None,
		participants: ParticipantRegistry | None = None,
	) -> None:
		self.repo = repository or repo_module.EventsRepository()
		self.social_repo = social_repository or social_repo_module.SocialRepository()
		self.roles = roles or RoleDirectory()
		self.participants = participants or ParticipantRegistry(repository=self.repo, roles=self.roles)

	async def bulk_invite(
		self,
		user_ids: Sequence[UUID],
		organizer_id: UUID,
		event_id: UUID,
		*,
		background: BackgroundTasks | None = None,
	) -> list[EventInvitation]:
		"""Invite every candidate or none of them.

		The organizer must manage the event. Each candidate must be a friend of the
		organizer, not yet a participant and not yet invited. Eligibility is checked
		on the same transaction as the insert; a concurrent invite that slips past the
		checks trips the unique constraint and surfaces as ConflictError.
		"""
		candidates = _dedupe(user_ids)
		if not candidates:
			raise InvalidRequestError("no_candidates")
		await social_policy.enforce_invite_limits(str(organizer_id))

		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				organizer = await self.participants.resolve(organizer_id, event_id, with_event=True, conn=conn)
				try:
					organizer = policies.require_event_manager(organizer)
					participant_ids = await self.repo.participant_ids_among(event_id, candidates, conn=conn)
					friend_ids = await self.repo.friend_ids_among(organizer_id, candidates, conn=conn)
					policies.ensure_invitable(candidates, friend_ids=friend_ids, participant_ids=participant_ids)
					policies.ensure_not_invited(await self.repo.invited_ids_among(event_id, candidates, conn=conn))
				except Exception as exc:
					obs_metrics.inc_event_invite_reject(getattr(exc, "detail", "error"))
					raise
				created = await self.repo.insert_invitations(event_id, organizer_id, candidates, conn=conn)
				invitees = await self.social_repo.get_users(candidates, conn=conn)
				organizer_profile = await self.social_repo.get_user(organizer_id, conn=conn)

		obs_metrics.inc_event_invites_sent(len(created))
		await audit.log_event(
			"invited",
			{"event_id": str(event_id), "organizer_id": str(organizer_id), "count": str(len(created))},
		)
		event = organizer.event
		if event is not None:
			data = _invitation_email_data(event, organizer_profile)
			subject = f"You're invited to {event.name}"
			await mailer.dispatch(
				[(invitee.email, subject, mailer.EVENT_INVITATION, data) for invitee in invitees],
				background=background,
			)
		logger.info("event_bulk_invite", extra={"event_id": str(event_id), "count": len(created)})
		return created

	async def respond(self, user_id: UUID, event_id: UUID, accept: bool) -> ResponseOutcome:
		"""Accept or decline; the invitation is consumed either way.

		Accepting registers the invitee as a participant and confirms the friendship
		with the organizer, clearing any pending friend request between them.
		"""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				invitation = await self.repo.get_invitation(event_id, user_id, conn=conn)
				if invitation is None:
					raise NotFoundError("invitation_not_found")
				if await self.repo.get_event(event_id, conn=conn) is None:
					raise NotFoundError("event_not_found")
				if accept:
					role_id = await self.roles.role_id(EventRole.PARTICIPANT, conn=conn)
					await self.repo.add_participant(conn=conn, event_id=event_id, user_id=user_id, role_id=role_id)
					if invitation.organizer_id != user_id:
						await self.social_repo.ensure_friendship(
							social_policy.canonical_pair(user_id, invitation.organizer_id),
							conn=conn,
						)
						await self.social_repo.delete_invitations_between(user_id, invitation.organizer_id, conn=conn)
				await self.repo.delete_invitation(invitation.id, conn=conn)

		outcome = ResponseOutcome.from_flag(accept)
		obs_metrics.inc_event_invite_response(outcome.value)
		await audit.log_event(outcome.value, {"event_id": str(event_id), "user_id": str(user_id)})
		return outcome

	async def list_invitations(self, user_id: UUID) -> list[EventInvitationSummary]:
		return await self.repo.list_invitations(user_id)

	async def notification_counts(self, user_id: UUID) -> NotificationCounts:
		async def _count(reader: Callable[..., Awaitable[int]]) -> int:
			pool = await get_pool()
			async with pool.acquire() as conn:
				return await reader(user_id, conn=conn)

		friends, events = await asyncio.gather(
			_count(self.social_repo.count_incoming),
			_count(self.repo.count_invitations),
		)
		return NotificationCounts(pending_friend_invitations=friends, pending_event_invitations=events)
