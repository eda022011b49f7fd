"""Domain models for friend requests and friendships."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class FriendRequestOutcome(str, Enum):
	"""Result of a friend request."""

	SENT = "sent"
	CONFIRMED = "confirmed"


class ResponseOutcome(str, Enum):
	"""Result of answering a pending request or invitation."""

	ACCEPTED = "accepted"
	DECLINED = "declined"

	@classmethod
	def from_flag(cls, accept: bool) -> "ResponseOutcome":
		return cls.ACCEPTED if accept else cls.DECLINED


@dataclass(slots=True)
class UserProfile:
	"""Public identity of a user."""

	id: UUID
	email: str
	firstname: str
	lastname: str
	picture: Optional[str] = None

	@classmethod
	def from_record(cls, record: dict) -> "UserProfile":
		return cls(
			id=UUID(str(record["id"])),
			email=record["email"],
			firstname=record.get("firstname") or "",
			lastname=record.get("lastname") or "",
			picture=record.get("picture"),
		)


@dataclass(slots=True)
class Invitation:
	"""A directional pending friend request from user_id to request_id."""

	id: UUID
	user_id: UUID
	request_id: UUID
	created_at: datetime

	@classmethod
	def from_record(cls, record: dict) -> "Invitation":
		return cls(
			id=UUID(str(record["id"])),
			user_id=UUID(str(record["user_id"])),
			request_id=UUID(str(record["request_id"])),
			created_at=record["created_at"],
		)


@dataclass(slots=True)
class Friendship:
	"""A confirmed friendship, stored once per pair with user1_id < user2_id."""

	id: UUID
	user1_id: UUID
	user2_id: UUID
	created_at: datetime

	@classmethod
	def from_record(cls, record: dict) -> "Friendship":
		return cls(
			id=UUID(str(record["id"])),
			user1_id=UUID(str(record["user1_id"])),
			user2_id=UUID(str(record["user2_id"])),
			created_at=record["created_at"],
		)
