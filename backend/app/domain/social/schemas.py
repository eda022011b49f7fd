"""Pydantic schemas for friend requests and friendships."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class FriendRequestPayload(BaseModel):
	target_id: UUID = Field(..., description="User who should receive the friend request")


class FriendRequestResponse(BaseModel):
	status: Literal["sent", "confirmed"]


class InvitationRespondRequest(BaseModel):
	accept: bool


class RespondResponse(BaseModel):
	status: Literal["accepted", "declined"]


class DeletedCount(BaseModel):
	deleted: int


class UserPublic(BaseModel):
	id: UUID
	email: str
	firstname: str
	lastname: str
	picture: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)


class InvitationSummary(BaseModel):
	id: UUID
	user_id: UUID
	request_id: UUID
	created_at: datetime
	sender_email: Optional[str] = None
	sender_firstname: Optional[str] = None
	sender_lastname: Optional[str] = None
	sender_picture: Optional[str] = None


class FriendRow(BaseModel):
	id: UUID
	friend_id: UUID
	created_at: datetime
	email: str
	firstname: str
	lastname: str
	picture: Optional[str] = None
