"""Gift wish-lists and their role-gated sharing into events."""

from __future__ import annotations

import logging
from uuid import UUID

import asyncpg

from app.domain.common.errors import BadRequestError, NotFoundError
from app.domain.events import policies as event_policies
from app.domain.events.participants import ParticipantRegistry
from app.domain.gifts import repo as repo_module
from app.domain.gifts.models import Gift, ListEvent, ListGift
from app.domain.gifts.schemas import GiftCreate, GiftListView, ListEventDetail, ListEventSummary
from app.domain.roles.models import GIFT_SHARERS
from app.infra.postgres import get_pool
from app.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


def _view(gift_list: ListGift, gifts: list[Gift]) -> GiftListView:
	return GiftListView(
		**gift_list.model_dump(),
		gifts=[gift for gift in gifts if gift.list_id == gift_list.id],
	)


class GiftService:
	"""Personal gift lists plus the links that share them into events."""

	def __init__(
		self,
		*,
		repository: repo_module.GiftsRepository | None = None,
		participants: ParticipantRegistry | None = None,
	) -> None:
		self.repo = repository or repo_module.GiftsRepository()
		self.participants = participants or ParticipantRegistry()

	# --- Personal lists -----------------------------------------------------

	async def _owned_list(self, conn: asyncpg.Connection, user_id: UUID, list_id: UUID) -> ListGift:
		gift_list = await self.repo.get_list(list_id, conn=conn)
		if gift_list is None or gift_list.user_id != user_id:
			raise NotFoundError("list_not_found")
		return gift_list

	async def list_user_lists(self, user_id: UUID) -> list[GiftListView]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			lists = await self.repo.list_user_lists(user_id, conn=conn)
			gifts = await self.repo.list_gifts([item.id for item in lists], conn=conn)
		return [_view(item, gifts) for item in lists]

	async def create_list(self, user_id: UUID, name: str, gifts: list[GiftCreate]) -> GiftListView:
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				gift_list = await self.repo.create_list(conn=conn, user_id=user_id, name=name.strip())
				created = await self.repo.insert_gifts(gift_list.id, user_id, gifts, conn=conn)
		return _view(gift_list, created)

	async def add_gifts(self, user_id: UUID, list_id: UUID, gifts: list[GiftCreate]) -> list[Gift]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				gift_list = await self._owned_list(conn, user_id, list_id)
				return await self.repo.insert_gifts(gift_list.id, user_id, gifts, conn=conn)

	async def delete_gift(self, user_id: UUID, gift_id: UUID) -> None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			gift = await self.repo.get_gift(gift_id, conn=conn)
			if gift is None or gift.user_id != user_id:
				raise NotFoundError("gift_not_found")
			await self.repo.delete_gift(gift.id, conn=conn)

	async def delete_list(self, user_id: UUID, list_id: UUID) -> None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				gift_list = await self._owned_list(conn, user_id, list_id)
				await self.repo.delete_list(gift_list.id, conn=conn)

	# --- Sharing into events ------------------------------------------------

	async def add_list_event(self, user_id: UUID, event_id: UUID, list_id: UUID) -> ListEvent:
		"""Link one of the caller's lists into an event; one link per participant per event."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				participant = event_policies.ensure_can_share_gifts(
					await self.participants.resolve(user_id, event_id, conn=conn)
				)
				gift_list = await self._owned_list(conn, user_id, list_id)
				if await self.repo.find_link_by_participant(participant.id, event_id=event_id, conn=conn):
					raise BadRequestError("list_already_linked")
				link = await self.repo.create_list_event(
					conn=conn,
					event_id=event_id,
					list_id=gift_list.id,
					participant_id=participant.id,
				)
		obs_metrics.inc_gift_list_link("added")
		logger.info("gift_list_linked", extra={"event_id": str(event_id), "list_id": str(list_id)})
		return link

	async def find_list_event(self, user_id: UUID, event_id: UUID) -> list[ListEventSummary]:
		"""Lists shared into the event by participants who still hold a sharing role."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			await self.participants.resolve(user_id, event_id, with_role=False, fail_message="not_participant", conn=conn)
			return await self.repo.list_shared(event_id, sorted(role.value for role in GIFT_SHARERS), conn=conn)

	async def remove_list_event(self, user_id: UUID, event_id: UUID, list_id: UUID) -> None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				participant = await self.participants.resolve(
					user_id, event_id, with_role=False, fail_message="not_participant", conn=conn
				)
				link = await self.repo.find_link_by_participant(participant.id, list_id=list_id, conn=conn)
				if link is None or link.event_id != event_id:
					raise NotFoundError("list_link_not_found")
				await self.repo.delete_list_event(link.id, conn=conn)
		obs_metrics.inc_gift_list_link("removed")

	async def find_list(self, user_id: UUID, list_event_id: UUID) -> ListEventDetail:
		pool = await get_pool()
		async with pool.acquire() as conn:
			link = await self.repo.get_list_event(list_event_id, conn=conn)
			if link is None:
				raise NotFoundError("list_link_not_found")
			await self.participants.resolve(
				user_id, link.event_id, with_role=False, fail_message="not_participant", conn=conn
			)
			gift_list = await self.repo.get_list(link.list_id, conn=conn)
			if gift_list is None:
				raise NotFoundError("list_not_found")
			gifts = await self.repo.list_gifts([gift_list.id], conn=conn)
			firstname, lastname = await self.repo.get_owner_names(gift_list.user_id, conn=conn)
		return ListEventDetail(
			id=link.id,
			event_id=link.event_id,
			gift_list=_view(gift_list, gifts),
			owner_firstname=firstname,
			owner_lastname=lastname,
		)

	async def check_gift(self, user_id: UUID, event_id: UUID, gift_id: UUID, checked: bool) -> Gift:
		"""Mark a shared gift as taken by the caller, or clear the mark, in a single update."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			gift = await self.repo.get_gift(gift_id, conn=conn)
			if gift is None:
				raise NotFoundError("gift_not_found")
			if await self.repo.find_link_for_list(gift.list_id, event_id, conn=conn) is None:
				raise NotFoundError("list_link_not_found")
			await self.participants.resolve(user_id, event_id, with_role=False, fail_message="not_participant", conn=conn)
			updated = await self.repo.set_gift_taken(
				gift.id,
				taken=checked,
				taken_by=user_id if checked else None,
				conn=conn,
			)
		obs_metrics.inc_gift_check("taken" if checked else "released")
		return updated
