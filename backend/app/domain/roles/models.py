"""Event-scoped role vocabulary."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class EventRole(str, Enum):
	"""Permission tiers, highest first."""

	SUPER_ADMIN = "superAdmin"
	ADMIN = "admin"
	GIFT = "gift"
	PARTICIPANT = "participant"

	@classmethod
	def parse(cls, name: str | None) -> Optional["EventRole"]:
		"""Return the role for a stored name, or None for names outside the vocabulary."""
		if not name:
			return None
		try:
			return cls(name)
		except ValueError:
			return None


EVENT_MANAGERS = frozenset({EventRole.SUPER_ADMIN, EventRole.ADMIN})
GIFT_SHARERS = frozenset({EventRole.SUPER_ADMIN, EventRole.ADMIN, EventRole.GIFT})


class RoleEvent(BaseModel):
	"""A row of the role lookup table."""

	id: UUID
	name: str
	created_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)

	@property
	def role(self) -> Optional[EventRole]:
		return EventRole.parse(self.name)
