"""Async repository helpers for gift lists, gifts and list links."""

from __future__ import annotations

from typing import Iterable, Sequence
from uuid import UUID, uuid4

import asyncpg

from app.domain.common.errors import ConflictError
from app.domain.gifts import models
from app.domain.gifts.schemas import GiftCreate, ListEventSummary


class GiftsRepository:
	"""Thin data-access layer around asyncpg. Every call runs on the caller's connection."""

	# --- Lists and gifts ----------------------------------------------------

	async def create_list(self, *, conn: asyncpg.Connection, user_id: UUID, name: str) -> models.ListGift:
		record = await conn.fetchrow(
			"INSERT INTO list_gift (id, name, user_id) VALUES ($1, $2, $3) RETURNING *",
			uuid4(),
			name,
			str(user_id),
		)
		return models.ListGift.model_validate(dict(record))

	async def get_list(self, list_id: UUID, *, conn: asyncpg.Connection) -> models.ListGift | None:
		record = await conn.fetchrow("SELECT * FROM list_gift WHERE id=$1", str(list_id))
		return models.ListGift.model_validate(dict(record)) if record else None

	async def list_user_lists(self, user_id: UUID, *, conn: asyncpg.Connection) -> list[models.ListGift]:
		rows = await conn.fetch(
			"SELECT * FROM list_gift WHERE user_id=$1 ORDER BY created_at ASC, id ASC",
			str(user_id),
		)
		return [models.ListGift.model_validate(dict(row)) for row in rows]

	async def delete_list(self, list_id: UUID, *, conn: asyncpg.Connection) -> None:
		await conn.execute("DELETE FROM list_gift WHERE id=$1", str(list_id))

	async def insert_gifts(
		self,
		list_id: UUID,
		user_id: UUID,
		gifts: Iterable[GiftCreate],
		*,
		conn: asyncpg.Connection,
	) -> list[models.Gift]:
		created: list[models.Gift] = []
		for gift in gifts:
			record = await conn.fetchrow(
				"""
				INSERT INTO gifts (id, name, quantity, url, list_id, user_id)
				VALUES ($1, $2, $3, $4, $5, $6)
				RETURNING *
				""",
				uuid4(),
				gift.name,
				gift.quantity,
				gift.url,
				str(list_id),
				str(user_id),
			)
			created.append(models.Gift.model_validate(dict(record)))
		return created

	async def list_gifts(self, list_ids: Sequence[UUID], *, conn: asyncpg.Connection) -> list[models.Gift]:
		if not list_ids:
			return []
		rows = await conn.fetch(
			"SELECT * FROM gifts WHERE list_id = ANY($1::uuid[]) ORDER BY created_at ASC, id ASC",
			[str(list_id) for list_id in list_ids],
		)
		return [models.Gift.model_validate(dict(row)) for row in rows]

	async def get_gift(self, gift_id: UUID, *, conn: asyncpg.Connection) -> models.Gift | None:
		record = await conn.fetchrow("SELECT * FROM gifts WHERE id=$1", str(gift_id))
		return models.Gift.model_validate(dict(record)) if record else None

	async def delete_gift(self, gift_id: UUID, *, conn: asyncpg.Connection) -> None:
		await conn.execute("DELETE FROM gifts WHERE id=$1", str(gift_id))

	async def set_gift_taken(
		self,
		gift_id: UUID,
		*,
		taken: bool,
		taken_by: UUID | None,
		conn: asyncpg.Connection,
	) -> models.Gift:
		record = await conn.fetchrow(
			"UPDATE gifts SET taken=$2, taken_by=$3 WHERE id=$1 RETURNING *",
			str(gift_id),
			taken,
			str(taken_by) if taken_by else None,
		)
		return models.Gift.model_validate(dict(record))

	# --- List links ---------------------------------------------------------

	async def get_list_event(self, list_event_id: UUID, *, conn: asyncpg.Connection) -> models.ListEvent | None:
		record = await conn.fetchrow("SELECT * FROM list_event WHERE id=$1", str(list_event_id))
		return models.ListEvent.model_validate(dict(record)) if record else None

	async def find_link_by_participant(
		self,
		participant_id: UUID,
		*,
		event_id: UUID | None = None,
		list_id: UUID | None = None,
		conn: asyncpg.Connection,
	) -> models.ListEvent | None:
		if event_id is not None:
			record = await conn.fetchrow(
				"SELECT * FROM list_event WHERE participant_id=$1 AND event_id=$2",
				str(participant_id),
				str(event_id),
			)
		else:
			record = await conn.fetchrow(
				"SELECT * FROM list_event WHERE participant_id=$1 AND list_id=$2",
				str(participant_id),
				str(list_id),
			)
		return models.ListEvent.model_validate(dict(record)) if record else None

	async def find_link_for_list(
		self,
		list_id: UUID,
		event_id: UUID,
		*,
		conn: asyncpg.Connection,
	) -> models.ListEvent | None:
		record = await conn.fetchrow(
			"SELECT * FROM list_event WHERE list_id=$1 AND event_id=$2 LIMIT 1",
			str(list_id),
			str(event_id),
		)
		return models.ListEvent.model_validate(dict(record)) if record else None

	async def create_list_event(
		self,
		*,
		conn: asyncpg.Connection,
		event_id: UUID,
		list_id: UUID,
		participant_id: UUID,
	) -> models.ListEvent:
		try:
			record = await conn.fetchrow(
				"""
				INSERT INTO list_event (id, event_id, list_id, participant_id)
				VALUES ($1, $2, $3, $4)
				RETURNING *
				""",
				uuid4(),
				str(event_id),
				str(list_id),
				str(participant_id),
			)
		except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
			raise ConflictError("list_already_linked") from exc
		return models.ListEvent.model_validate(dict(record))

	async def delete_list_event(self, list_event_id: UUID, *, conn: asyncpg.Connection) -> None:
		await conn.execute("DELETE FROM list_event WHERE id=$1", str(list_event_id))

	async def list_shared(
		self,
		event_id: UUID,
		role_names: Sequence[str],
		*,
		conn: asyncpg.Connection,
	) -> list[ListEventSummary]:
		rows = await conn.fetch(
			"""
			SELECT le.id, le.event_id, le.list_id, le.participant_id,
				lg.name AS list_name, u.id AS owner_id,
				u.firstname AS owner_firstname, u.lastname AS owner_lastname
			FROM list_event le
			JOIN list_gift lg ON lg.id = le.list_id
			JOIN participants p ON p.id = le.participant_id
			JOIN role_event r ON r.id = p.role_id
			JOIN users u ON u.id = p.user_id
			WHERE le.event_id = $1 AND r.name = ANY($2::text[])
			ORDER BY le.created_at ASC, le.id ASC
			""",
			str(event_id),
			list(role_names),
		)
		return [ListEventSummary.model_validate(dict(row)) for row in rows]

	async def get_owner_names(self, user_id: UUID, *, conn: asyncpg.Connection) -> tuple[str | None, str | None]:
		record = await conn.fetchrow("SELECT firstname, lastname FROM users WHERE id=$1", str(user_id))
		if not record:
			return None, None
		return record["firstname"], record["lastname"]
