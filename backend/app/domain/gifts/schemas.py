"""Pydantic schemas for gift lists and list sharing."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.gifts.models import Gift


class GiftCreate(BaseModel):
	name: str = Field(..., min_length=2, max_length=100)
	quantity: int = Field(default=1, ge=1, le=100)
	url: Optional[str] = Field(default=None, max_length=2048)


class ListCreateRequest(BaseModel):
	name: str = Field(..., min_length=2, max_length=100)
	gifts: list[GiftCreate] = Field(default_factory=list)


class GiftsAddRequest(BaseModel):
	gifts: list[GiftCreate] = Field(..., min_length=1)


class GiftListView(BaseModel):
	id: UUID
	name: str
	user_id: UUID
	created_at: Optional[datetime] = None
	gifts: list[Gift] = Field(default_factory=list)


class ListEventLinkRequest(BaseModel):
	event_id: UUID
	list_id: UUID


class ListEventSummary(BaseModel):
	id: UUID
	event_id: UUID
	list_id: UUID
	participant_id: UUID
	list_name: str
	owner_id: UUID
	owner_firstname: Optional[str] = None
	owner_lastname: Optional[str] = None


class ListEventDetail(BaseModel):
	id: UUID
	event_id: UUID
	gift_list: GiftListView
	owner_firstname: Optional[str] = None
	owner_lastname: Optional[str] = None


class CheckGiftRequest(BaseModel):
	event_id: UUID
	gift_id: UUID
	checked: bool
