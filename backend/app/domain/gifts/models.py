"""Domain models for gift wish-lists and their links into events."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ListGift(BaseModel):
	id: UUID
	name: str
	user_id: UUID
	created_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class Gift(BaseModel):
	id: UUID
	name: str
	quantity: int = 1
	url: Optional[str] = None
	list_id: UUID
	user_id: UUID
	taken: bool = False
	taken_by: Optional[UUID] = None
	created_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)


class ListEvent(BaseModel):
	"""A list shared into an event by one of its participants."""

	id: UUID
	event_id: UUID
	list_id: UUID
	participant_id: UUID
	created_at: Optional[datetime] = None

	model_config = ConfigDict(from_attributes=True)
