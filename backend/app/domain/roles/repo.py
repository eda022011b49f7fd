"""Data access for the role lookup table."""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

import asyncpg

from app.domain.roles.models import RoleEvent
from app.infra.postgres import get_pool


class RolesRepository:
	"""Thin data-access layer around asyncpg."""

	async def get_by_name(self, name: str, *, conn: asyncpg.Connection | None = None) -> RoleEvent | None:
		async def _fetch(connection: asyncpg.Connection) -> RoleEvent | None:
			record = await connection.fetchrow("SELECT * FROM role_event WHERE name=$1", name)
			return RoleEvent.model_validate(dict(record)) if record else None

		if conn is not None:
			return await _fetch(conn)
		pool = await get_pool()
		async with pool.acquire() as pooled_conn:
			return await _fetch(pooled_conn)

	async def get_by_id(self, role_id: UUID, *, conn: asyncpg.Connection | None = None) -> RoleEvent | None:
		async def _fetch(connection: asyncpg.Connection) -> RoleEvent | None:
			record = await connection.fetchrow("SELECT * FROM role_event WHERE id=$1", str(role_id))
			return RoleEvent.model_validate(dict(record)) if record else None

		if conn is not None:
			return await _fetch(conn)
		pool = await get_pool()
		async with pool.acquire() as pooled_conn:
			return await _fetch(pooled_conn)

	async def list_roles(self) -> list[RoleEvent]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch("SELECT * FROM role_event ORDER BY created_at ASC, name ASC")
		return [RoleEvent.model_validate(dict(row)) for row in rows]

	async def insert_missing(self, names: Iterable[str]) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				INSERT INTO role_event (name)
				SELECT unnest($1::text[])
				ON CONFLICT (name) DO NOTHING
				RETURNING id
				""",
				list(names),
			)
		return len(rows)
