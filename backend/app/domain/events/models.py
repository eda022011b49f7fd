"""Domain models for events, participants and event invitations."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.domain.roles.models import EventRole, RoleEvent


class Event(BaseModel):
	"""An event owned by its organizer."""

	id: UUID
	name: str
	description: str = ""
	date: dt.date
	time: Optional[dt.time] = None
	address: str = ""
	organizer_id: UUID
	created_at: Optional[dt.datetime] = None

	model_config = ConfigDict(from_attributes=True)


class Participant(BaseModel):
	"""Membership of a user in an event, optionally joined with its role and event."""

	id: UUID
	event_id: UUID
	user_id: UUID
	role_id: UUID
	created_at: Optional[dt.datetime] = None
	role: Optional[RoleEvent] = None
	event: Optional[Event] = None

	model_config = ConfigDict(from_attributes=True)

	@property
	def role_kind(self) -> Optional[EventRole]:
		return self.role.role if self.role is not None else None

	@property
	def role_name(self) -> Optional[str]:
		return self.role.name if self.role is not None else None


class EventInvitation(BaseModel):
	"""A pending invite for user_id to join event_id."""

	id: UUID
	event_id: UUID
	user_id: UUID
	organizer_id: UUID
	created_at: Optional[dt.datetime] = None

	model_config = ConfigDict(from_attributes=True)


@dataclass(slots=True)
class NotificationCounts:
	pending_friend_invitations: int
	pending_event_invitations: int
