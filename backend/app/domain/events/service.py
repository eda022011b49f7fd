"""Event lifecycle: creation, listing and lookup."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from app.domain.common.errors import NotFoundError
from app.domain.events import audit
from app.domain.events import repo as repo_module
from app.domain.events.models import Event, Participant
from app.domain.events.schemas import EventCreateRequest
from app.domain.roles.models import EventRole
from app.domain.roles.service import RoleDirectory
from app.infra.postgres import get_pool
from app.obs import metrics as obs_metrics


class EventsService:
	"""Creates events and serves them to their participants."""

	def __init__(
		self,
		*,
		repository: repo_module.EventsRepository | None = None,
		roles: RoleDirectory | None = None,
	) -> None:
		self.repo = repository or repo_module.EventsRepository()
		self.roles = roles or RoleDirectory()

	async def create_event(self, user_id: UUID, payload: EventCreateRequest) -> Event:
		"""Insert the event and register its creator as superAdmin in one transaction."""
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				role_id = await self.roles.role_id(EventRole.SUPER_ADMIN, conn=conn)
				event = await self.repo.create_event(
					conn=conn,
					organizer_id=user_id,
					name=payload.name.strip(),
					description=payload.description,
					date=payload.date,
					time=payload.time,
					address=payload.address,
				)
				await self.repo.add_participant(conn=conn, event_id=event.id, user_id=user_id, role_id=role_id)
		obs_metrics.inc_event_created()
		await audit.log_event("created", {"event_id": str(event.id), "organizer_id": str(user_id)})
		return event

	async def list_upcoming(self, user_id: UUID, *, today: dt.date | None = None) -> list[Event]:
		return await self.repo.list_upcoming(user_id, today=today or dt.date.today())

	async def get_event(self, user_id: UUID, event_id: UUID) -> Participant:
		"""Return the caller's participant row with the event attached."""
		participant = await self.repo.get_participant(event_id, user_id, with_event=True)
		if participant is None or participant.event is None:
			raise NotFoundError("event_not_found")
		return participant
