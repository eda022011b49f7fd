"""Service layer for friend requests and friendships."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import BackgroundTasks

from app.domain.common.errors import NotFoundError
from app.domain.social import audit, policy
from app.domain.social import repo as repo_module
from app.domain.social.models import FriendRequestOutcome, ResponseOutcome, UserProfile
from app.domain.social.schemas import FriendRow, InvitationSummary
from app.infra import mailer
from app.infra.postgres import get_pool

logger = logging.getLogger(__name__)


class SocialService:
	"""Friend request reconciliation and friendship bookkeeping."""

	def __init__(self, *, repository: repo_module.SocialRepository | None = None) -> None:
		self.repo = repository or repo_module.SocialRepository()

	async def request_or_confirm(
		self,
		target_id: UUID,
		sender_id: UUID,
		*,
		background: BackgroundTasks | None = None,
	) -> FriendRequestOutcome:
		"""Send a friend request, or confirm the friendship when the target already asked."""
		policy.guard_not_self(sender_id, target_id)
		await policy.enforce_invite_limits(str(sender_id))

		pool = await get_pool()
		outcome = FriendRequestOutcome.SENT
		target: UserProfile | None = None
		sender: UserProfile | None = None
		async with pool.acquire() as conn:
			async with conn.transaction():
				target = await policy.ensure_user_exists(self.repo, conn, target_id)
				try:
					await policy.ensure_not_already_friends(self.repo, conn, sender_id, target_id)
					await policy.ensure_no_open_request(self.repo, conn, sender_id, target_id)
				except Exception as exc:
					audit.inc_request(getattr(exc, "detail", "error"))
					raise
				reverse = await self.repo.get_invitation(target_id, sender_id, conn=conn)
				if reverse is not None:
					await self.repo.create_friendship(policy.canonical_pair(sender_id, target_id), conn=conn)
					await self.repo.delete_invitation(reverse.id, conn=conn)
					outcome = FriendRequestOutcome.CONFIRMED
				else:
					await self.repo.create_invitation(sender_id, target_id, conn=conn)
					sender = await self.repo.get_user(sender_id, conn=conn)

		audit.inc_request(outcome.value)
		logger.info("friend_request", extra={"outcome": outcome.value, "sender_id": str(sender_id), "target_id": str(target_id)})
		if outcome is FriendRequestOutcome.CONFIRMED:
			await audit.log_friend_event("confirmed", {"user_id": str(sender_id), "friend_id": str(target_id)})
			return outcome

		await audit.log_invite_event("sent", {"from": str(sender_id), "to": str(target_id)})
		message = (
			target.email,
			"New friend request on Evift",
			mailer.FRIEND_INVITATION,
			{
				"userFirstname": sender.firstname if sender else "",
				"userEmail": sender.email if sender else "",
			},
		)
		await mailer.dispatch([message], background=background)
		return outcome

	async def respond(self, invitation_id: UUID, caller_id: UUID, accept: bool) -> ResponseOutcome:
		"""Accept or decline a pending request addressed to the caller; the request is consumed either way."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				invitation = policy.ensure_recipient(
					await self.repo.get_invitation_by_id(invitation_id, conn=conn),
					caller_id,
				)
				await policy.ensure_not_already_friends(self.repo, conn, invitation.user_id, invitation.request_id)
				if accept:
					await self.repo.create_friendship(
						policy.canonical_pair(invitation.user_id, invitation.request_id),
						conn=conn,
					)
				await self.repo.delete_invitation(invitation.id, conn=conn)

		outcome = ResponseOutcome.from_flag(accept)
		audit.inc_response(outcome.value)
		await audit.log_invite_event(
			outcome.value,
			{"id": str(invitation.id), "from": str(invitation.user_id), "to": str(invitation.request_id)},
		)
		return outcome

	async def delete_by_request_id(self, user_id: UUID) -> int:
		"""Drop every pending request addressed to the user."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			deleted = await self.repo.delete_invitations_to(user_id, conn=conn)
		if deleted:
			await audit.log_invite_event("cleared", {"to": str(user_id), "count": str(deleted)})
		return deleted

	async def list_friends(self, user_id: UUID) -> list[FriendRow]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			return await self.repo.list_friends(user_id, conn=conn)

	async def list_invitations(self, user_id: UUID) -> list[InvitationSummary]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			return await self.repo.list_incoming(user_id, conn=conn)

	async def count_pending(self, user_id: UUID) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			return await self.repo.count_incoming(user_id, conn=conn)

	async def remove_friend(self, user_id: UUID, friend_id: UUID) -> None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			removed = await self.repo.delete_friendship(policy.canonical_pair(user_id, friend_id), conn=conn)
		if not removed:
			raise NotFoundError("friendship_not_found")
		audit.inc_removed()
		await audit.log_friend_event("removed", {"user_id": str(user_id), "friend_id": str(friend_id)})

	async def find_user_by_email(self, email: str) -> UserProfile:
		pool = await get_pool()
		async with pool.acquire() as conn:
			profile = await self.repo.get_user_by_email(email, conn=conn)
		if profile is None:
			raise NotFoundError("user_not_found")
		return profile
