"""Pydantic schemas for the events API."""

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class EventCreateRequest(BaseModel):
	name: str = Field(..., min_length=2, max_length=120)
	description: str = Field(default="", max_length=2000)
	date: dt.date
	time: Optional[dt.time] = None
	address: str = Field(default="", max_length=255)


class EventDetail(BaseModel):
	id: UUID
	name: str
	description: str
	date: dt.date
	time: Optional[dt.time] = None
	address: str
	organizer_id: UUID
	role: Optional[str] = None


class ParticipantSummary(BaseModel):
	id: UUID
	user_id: UUID
	role_id: UUID
	role_name: str
	email: str
	firstname: str
	lastname: str
	picture: Optional[str] = None


class RoleUpdateRequest(BaseModel):
	role_id: UUID


class RoleUpdateResponse(BaseModel):
	participant_id: UUID
	user_id: UUID
	role_id: UUID


class BulkInviteRequest(BaseModel):
	user_ids: list[UUID] = Field(..., min_length=1, max_length=200)


class BulkInviteResponse(BaseModel):
	invited: int


class EventInviteRespondRequest(BaseModel):
	accept: bool


class EventInvitationSummary(BaseModel):
	id: UUID
	event_id: UUID
	user_id: UUID
	organizer_id: UUID
	created_at: Optional[dt.datetime] = None
	event_name: str
	event_date: dt.date
	event_time: Optional[dt.time] = None
	event_address: str = ""
	organizer_firstname: Optional[str] = None
	organizer_lastname: Optional[str] = None


class NotificationCountsResponse(BaseModel):
	pending_friend_invitations: int
	pending_event_invitations: int


class RespondResponse(BaseModel):
	status: Literal["accepted", "declined"]


class RoleSummary(BaseModel):
	id: UUID
	name: str
