"""Async repository helpers for bring items and pledges."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence
from uuid import UUID, uuid4

import asyncpg

from app.domain.bring import models
from app.domain.bring.schemas import TakeSummary


class BringRepository:
	"""Thin data-access layer around asyncpg. Every call runs on the caller's connection."""

	async def create_item(
		self,
		*,
		conn: asyncpg.Connection,
		event_id: UUID,
		name: str,
		requested_quantity: int,
		created_by_id: UUID,
	) -> models.BringItem:
		record = await conn.fetchrow(
			"""
			INSERT INTO bring_item (id, event_id, name, requested_quantity, created_by_id)
			VALUES ($1, $2, $3, $4, $5)
			RETURNING *
			""",
			uuid4(),
			str(event_id),
			name,
			requested_quantity,
			str(created_by_id),
		)
		return models.BringItem.model_validate(dict(record))

	async def get_item(
		self,
		item_id: UUID,
		*,
		conn: asyncpg.Connection,
		for_update: bool = False,
	) -> models.BringItem | None:
		query = "SELECT * FROM bring_item WHERE id=$1"
		if for_update:
			query += " FOR UPDATE"
		record = await conn.fetchrow(query, str(item_id))
		return models.BringItem.model_validate(dict(record)) if record else None

	async def upsert_take(
		self,
		*,
		conn: asyncpg.Connection,
		item_id: UUID,
		user_id: UUID,
		quantity: int,
	) -> models.Take:
		record = await conn.fetchrow(
			"""
			INSERT INTO taken (id, bring_item_id, user_id, quantity)
			VALUES ($1, $2, $3, $4)
			ON CONFLICT (bring_item_id, user_id)
			DO UPDATE SET quantity = EXCLUDED.quantity, updated_at = NOW()
			RETURNING *
			""",
			uuid4(),
			str(item_id),
			str(user_id),
			quantity,
		)
		return models.Take.model_validate(dict(record))

	async def delete_take(self, item_id: UUID, user_id: UUID, *, conn: asyncpg.Connection) -> models.Take | None:
		record = await conn.fetchrow(
			"DELETE FROM taken WHERE bring_item_id=$1 AND user_id=$2 RETURNING *",
			str(item_id),
			str(user_id),
		)
		return models.Take.model_validate(dict(record)) if record else None

	async def take_quantities(self, item_id: UUID, *, conn: asyncpg.Connection) -> list[int]:
		rows = await conn.fetch("SELECT quantity FROM taken WHERE bring_item_id=$1", str(item_id))
		return [int(row["quantity"]) for row in rows]

	async def set_coverage(
		self,
		item_id: UUID,
		*,
		is_taken: bool,
		taken_at: datetime | None,
		conn: asyncpg.Connection,
	) -> models.BringItem:
		record = await conn.fetchrow(
			"UPDATE bring_item SET is_taken=$2, taken_at=$3 WHERE id=$1 RETURNING *",
			str(item_id),
			is_taken,
			taken_at,
		)
		return models.BringItem.model_validate(dict(record))

	async def delete_item(self, item_id: UUID, *, conn: asyncpg.Connection) -> None:
		await conn.execute("DELETE FROM bring_item WHERE id=$1", str(item_id))

	async def list_items(self, event_id: UUID, *, conn: asyncpg.Connection) -> list[models.BringItem]:
		rows = await conn.fetch(
			"""
			SELECT * FROM bring_item
			WHERE event_id=$1
			ORDER BY created_at ASC, id ASC
			""",
			str(event_id),
		)
		return [models.BringItem.model_validate(dict(row)) for row in rows]

	async def list_takes(self, item_ids: Sequence[UUID], *, conn: asyncpg.Connection) -> list[TakeSummary]:
		if not item_ids:
			return []
		rows = await conn.fetch(
			"""
			SELECT t.id, t.bring_item_id, t.user_id, t.quantity, t.created_at, u.firstname, u.lastname
			FROM taken t
			JOIN users u ON u.id = t.user_id
			WHERE t.bring_item_id = ANY($1::uuid[])
			ORDER BY t.created_at ASC, t.id ASC
			""",
			[str(item_id) for item_id in item_ids],
		)
		return [TakeSummary.model_validate(dict(row)) for row in rows]
