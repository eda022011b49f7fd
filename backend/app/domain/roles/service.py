"""Lookups over the seeded role vocabulary.

Every call reads the store; roles are never cached in process.
"""

from __future__ import annotations

from uuid import UUID

import asyncpg

from app.domain.common.errors import NotFoundError
from app.domain.roles import repo as repo_module
from app.domain.roles.models import EventRole, RoleEvent


class RoleDirectory:
	"""Resolves role names to identifiers and back."""

	def __init__(self, *, repository: repo_module.RolesRepository | None = None) -> None:
		self.repo = repository or repo_module.RolesRepository()

	async def find(self, name: str, *, conn: asyncpg.Connection | None = None) -> RoleEvent | None:
		return await self.repo.get_by_name(name, conn=conn)

	async def get(self, role_id: UUID, *, conn: asyncpg.Connection | None = None) -> RoleEvent | None:
		return await self.repo.get_by_id(role_id, conn=conn)

	async def require(self, role: EventRole, *, conn: asyncpg.Connection | None = None) -> RoleEvent:
		record = await self.repo.get_by_name(role.value, conn=conn)
		if record is None:
			raise NotFoundError(f"role_not_seeded:{role.value}")
		return record

	async def role_id(self, role: EventRole, *, conn: asyncpg.Connection | None = None) -> UUID:
		return (await self.require(role, conn=conn)).id

	async def list_roles(self) -> list[RoleEvent]:
		return await self.repo.list_roles()

	async def seed_defaults(self) -> int:
		"""Insert any missing vocabulary names; returns how many were created."""
		return await self.repo.insert_missing(role.value for role in EventRole)
