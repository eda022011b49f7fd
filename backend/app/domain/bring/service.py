"""Items to bring: creation, pledges and coverage reconciliation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

import asyncpg

from app.domain.bring import policy
from app.domain.bring import repo as repo_module
from app.domain.bring.models import BringItem, ReleaseResult, TakeResult
from app.domain.bring.schemas import BringItemView
from app.domain.common.errors import NotFoundError
from app.domain.events import policies as event_policies
from app.domain.events.participants import ParticipantRegistry
from app.infra.postgres import get_pool
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class BringItemService:
	"""Keeps each item's ``is_taken`` flag equal to its live pledge total versus the request.

	Pledge writes lock the item row first, so concurrent pledges on one item
	serialize and each transaction reconciles against the committed total.
	"""

	def __init__(
		self,
		*,
		repository: repo_module.BringRepository | None = None,
		participants: ParticipantRegistry | None = None,
	) -> None:
		self.repo = repository or repo_module.BringRepository()
		self.participants = participants or ParticipantRegistry()

	async def create(self, event_id: UUID, user_id: UUID, name: str, requested_quantity: int) -> BringItem:
		policy.ensure_positive_quantity(requested_quantity, field="requested_quantity")
		pool = await get_pool()
		async with pool.acquire() as conn:
			await self.participants.resolve(user_id, event_id, with_role=False, fail_message="not_participant", conn=conn)
			item = await self.repo.create_item(
				conn=conn,
				event_id=event_id,
				name=name.strip(),
				requested_quantity=requested_quantity,
				created_by_id=user_id,
			)
		obs_metrics.inc_bring_pledge("item_created")
		return item

	async def _load_locked(self, conn: asyncpg.Connection, item_id: UUID, user_id: UUID) -> BringItem:
		item = await self.repo.get_item(item_id, conn=conn, for_update=True)
		if item is None:
			raise NotFoundError("bring_item_not_found")
		await self.participants.resolve(user_id, item.event_id, with_role=False, fail_message="not_participant", conn=conn)
		return item

	async def _reconcile(self, conn: asyncpg.Connection, item: BringItem) -> tuple[int, bool]:
		pledges = await self.repo.take_quantities(item.id, conn=conn)
		change = policy.reconcile(item, pledges, now=datetime.now(timezone.utc))
		is_taken = item.is_taken
		if change is not None:
			is_taken, taken_at = change
			await self.repo.set_coverage(item.id, is_taken=is_taken, taken_at=taken_at, conn=conn)
			obs_metrics.inc_bring_coverage("covered" if is_taken else "uncovered")
		return sum(pledges), is_taken

	async def take(self, item_id: UUID, user_id: UUID, quantity: int) -> TakeResult:
		"""Set the caller's pledge to ``quantity``; a repeated take overwrites the previous amount."""
		policy.ensure_positive_quantity(quantity)
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				item = await self._load_locked(conn, item_id, user_id)
				take = await self.repo.upsert_take(conn=conn, item_id=item.id, user_id=user_id, quantity=quantity)
				total, is_taken = await self._reconcile(conn, item)
		obs_metrics.inc_bring_pledge("take")
		return TakeResult(take=take, total_taken=total, requested_quantity=item.requested_quantity, is_taken=is_taken)

	async def release_take(self, item_id: UUID, user_id: UUID) -> ReleaseResult:
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				item = await self._load_locked(conn, item_id, user_id)
				if await self.repo.delete_take(item.id, user_id, conn=conn) is None:
					raise NotFoundError("take_not_found")
				total, is_taken = await self._reconcile(conn, item)
		obs_metrics.inc_bring_pledge("release")
		return ReleaseResult(total_taken=total, requested_quantity=item.requested_quantity, is_taken=is_taken)

	async def delete_bring_item(self, item_id: UUID, user_id: UUID) -> None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				item = await self.repo.get_item(item_id, conn=conn)
				if item is None:
					raise NotFoundError("bring_item_not_found")
				participant = None
				if item.created_by_id != user_id:
					participant = await self.participants.resolve(user_id, item.event_id, conn=conn)
				event_policies.ensure_can_delete_bring_item(participant, created_by_id=item.created_by_id, user_id=user_id)
				await self.repo.delete_item(item.id, conn=conn)
		obs_metrics.inc_bring_pledge("item_deleted")
		logger.info("bring_item_deleted", extra={"item_id": str(item_id), "event_id": str(item.event_id)})

	async def list_items(self, event_id: UUID, user_id: UUID) -> list[BringItemView]:
		"""Items of the event by creation time, each with its pledges in creation order."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			await self.participants.resolve(user_id, event_id, with_role=False, fail_message="not_participant", conn=conn)
			items = await self.repo.list_items(event_id, conn=conn)
			takes = await self.repo.list_takes([item.id for item in items], conn=conn)
		views: list[BringItemView] = []
		for item in items:
			pledges = [take for take in takes if take.bring_item_id == item.id]
			views.append(
				BringItemView(
					**item.model_dump(),
					total_taken=sum(take.quantity for take in pledges),
					takes=pledges,
				)
			)
		return views
