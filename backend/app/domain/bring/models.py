"""Domain models for items to bring and the pledges against them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BringItem(BaseModel):
	"""A supply requested for an event. ``is_taken`` caches whether pledges cover the request."""

	id: UUID
	event_id: UUID
	name: str
	requested_quantity: int
	is_taken: bool = False
	taken_at: Optional[datetime] = None
	created_by_id: UUID
	created_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class Take(BaseModel):
	"""One user's pledge against a bring item."""

	id: UUID
	bring_item_id: UUID
	user_id: UUID
	quantity: int
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


@dataclass(slots=True)
class TakeResult:
	take: Take
	total_taken: int
	requested_quantity: int
	is_taken: bool


@dataclass(slots=True)
class ReleaseResult:
	total_taken: int
	requested_quantity: int
	is_taken: bool
