"""Pydantic schemas for the bring item API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class BringItemCreateRequest(BaseModel):
	event_id: UUID
	name: str = Field(..., min_length=1, max_length=120)
	requested_quantity: int = Field(default=1, ge=1, le=1000)


class TakeRequest(BaseModel):
	quantity: int = Field(..., ge=1, le=1000)


class TakeSummary(BaseModel):
	id: UUID
	bring_item_id: UUID
	user_id: UUID
	quantity: int
	created_at: Optional[datetime] = None
	firstname: Optional[str] = None
	lastname: Optional[str] = None


class BringItemView(BaseModel):
	id: UUID
	event_id: UUID
	name: str
	requested_quantity: int
	is_taken: bool
	taken_at: Optional[datetime] = None
	created_by_id: UUID
	created_at: Optional[datetime] = None
	total_taken: int = 0
	takes: list[TakeSummary] = Field(default_factory=list)


class TakeResponse(BaseModel):
	take_id: UUID
	quantity: int
	total_taken: int
	requested_quantity: int
	is_taken: bool


class ReleaseResponse(BaseModel):
	total_taken: int
	requested_quantity: int
	is_taken: bool
