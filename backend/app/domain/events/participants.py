"""Participant lookups and role changes; the authorization anchor for event actions."""

from __future__ import annotations

import logging
from uuid import UUID

import asyncpg

from app.domain.events import audit, policies
from app.domain.events import repo as repo_module
from app.domain.events.models import Participant
from app.domain.events.schemas import ParticipantSummary
from app.domain.roles.service import RoleDirectory
from app.infra.postgres import get_pool
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class ParticipantRegistry:
	"""Resolves a caller's participant row and enforces the role hierarchy."""

	def __init__(
		self,
		*,
		repository: repo_module.EventsRepository | None = None,
		roles: RoleDirectory | None = None,
	) -> None:
		self.repo = repository or repo_module.EventsRepository()
		self.roles = roles or RoleDirectory()

	async def resolve(
		self,
		user_id: UUID,
		event_id: UUID,
		*,
		with_event: bool = False,
		with_role: bool = True,
		fail_message: str | None = None,
		conn: asyncpg.Connection | None = None,
	) -> Participant | None:
		"""Return the caller's participant row, or None.

		With ``fail_message`` set, a missing row raises NotParticipantError carrying that message.
		"""
		participant = await self.repo.get_participant(
			event_id,
			user_id,
			with_role=with_role,
			with_event=with_event,
			conn=conn,
		)
		if participant is None and fail_message is not None:
			policies.require_participant(None, fail_message)
		return participant

	async def update_participant_role(
		self,
		event_id: UUID,
		target_user_id: UUID,
		new_role_id: UUID,
		requester_id: UUID,
	) -> Participant:
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				requester = await self.resolve(requester_id, event_id, conn=conn)
				target = await self.resolve(target_user_id, event_id, conn=conn)
				target = policies.ensure_role_update_allowed(requester, target)
				new_role = policies.ensure_assignable_role(await self.roles.get(new_role_id, conn=conn))
				updated = await self.repo.update_participant_role(target.id, new_role.id, conn=conn)
		obs_metrics.inc_participant_role_update(new_role.name)
		await audit.log_event(
			"role_updated",
			{
				"event_id": str(event_id),
				"user_id": str(target_user_id),
				"role": new_role.name,
				"actor_id": str(requester_id),
			},
		)
		logger.info("participant_role_updated", extra={"event_id": str(event_id), "role": new_role.name})
		return updated

	async def list_participants(self, event_id: UUID, user_id: UUID) -> list[ParticipantSummary]:
		await self.resolve(user_id, event_id, with_role=False, fail_message="not_participant")
		return await self.repo.list_participants(event_id)
