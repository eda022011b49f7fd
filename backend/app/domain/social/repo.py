"""Async repository helpers for the social graph."""

from __future__ import annotations

from uuid import UUID, uuid4

import asyncpg

from app.domain.common.errors import ConflictError
from app.domain.social.models import Friendship, Invitation, UserProfile
from app.domain.social.schemas import FriendRow, InvitationSummary

Pair = tuple[UUID, UUID]

_USER_COLUMNS = "id, email, firstname, lastname, picture"


class SocialRepository:
	"""Thin data-access layer around asyncpg. Every call runs on the caller's connection."""

	# --- Users --------------------------------------------------------------

	async def get_user(self, user_id: UUID, *, conn: asyncpg.Connection) -> UserProfile | None:
		record = await conn.fetchrow(f"SELECT {_USER_COLUMNS} FROM users WHERE id=$1", str(user_id))
		return UserProfile.from_record(dict(record)) if record else None

	async def get_user_by_email(self, email: str, *, conn: asyncpg.Connection) -> UserProfile | None:
		record = await conn.fetchrow(
			f"SELECT {_USER_COLUMNS} FROM users WHERE lower(email)=lower($1)",
			email.strip(),
		)
		return UserProfile.from_record(dict(record)) if record else None

	async def get_users(self, user_ids: list[UUID], *, conn: asyncpg.Connection) -> list[UserProfile]:
		rows = await conn.fetch(
			f"SELECT {_USER_COLUMNS} FROM users WHERE id = ANY($1::uuid[])",
			[str(uid) for uid in user_ids],
		)
		return [UserProfile.from_record(dict(row)) for row in rows]

	# --- Friendships --------------------------------------------------------

	async def friendship_exists(self, pair: Pair, *, conn: asyncpg.Connection) -> bool:
		value = await conn.fetchval(
			"SELECT 1 FROM friends WHERE user1_id=$1 AND user2_id=$2",
			str(pair[0]),
			str(pair[1]),
		)
		return value is not None

	async def create_friendship(self, pair: Pair, *, conn: asyncpg.Connection) -> Friendship:
		try:
			record = await conn.fetchrow(
				"""
				INSERT INTO friends (id, user1_id, user2_id)
				VALUES ($1, $2, $3)
				RETURNING *
				""",
				uuid4(),
				str(pair[0]),
				str(pair[1]),
			)
		except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
			raise ConflictError("friendship_exists") from exc
		return Friendship.from_record(dict(record))

	async def ensure_friendship(self, pair: Pair, *, conn: asyncpg.Connection) -> bool:
		"""Insert the pair if absent; returns True when a row was created."""
		record = await conn.fetchrow(
			"""
			INSERT INTO friends (id, user1_id, user2_id)
			VALUES ($1, $2, $3)
			ON CONFLICT (user1_id, user2_id) DO NOTHING
			RETURNING id
			""",
			uuid4(),
			str(pair[0]),
			str(pair[1]),
		)
		return record is not None

	async def delete_friendship(self, pair: Pair, *, conn: asyncpg.Connection) -> bool:
		record = await conn.fetchrow(
			"DELETE FROM friends WHERE user1_id=$1 AND user2_id=$2 RETURNING id",
			str(pair[0]),
			str(pair[1]),
		)
		return record is not None

	async def list_friends(self, user_id: UUID, *, conn: asyncpg.Connection) -> list[FriendRow]:
		rows = await conn.fetch(
			"""
			SELECT f.id, f.created_at, u.id AS friend_id, u.email, u.firstname, u.lastname, u.picture
			FROM friends f
			JOIN users u ON u.id = CASE WHEN f.user1_id = $1 THEN f.user2_id ELSE f.user1_id END
			WHERE f.user1_id = $1 OR f.user2_id = $1
			ORDER BY u.firstname ASC, u.lastname ASC, f.created_at ASC
			""",
			str(user_id),
		)
		return [FriendRow.model_validate(dict(row)) for row in rows]

	# --- Invitations --------------------------------------------------------

	async def get_invitation(self, sender_id: UUID, target_id: UUID, *, conn: asyncpg.Connection) -> Invitation | None:
		record = await conn.fetchrow(
			"SELECT * FROM invitations WHERE user_id=$1 AND request_id=$2",
			str(sender_id),
			str(target_id),
		)
		return Invitation.from_record(dict(record)) if record else None

	async def get_invitation_by_id(self, invitation_id: UUID, *, conn: asyncpg.Connection) -> Invitation | None:
		record = await conn.fetchrow("SELECT * FROM invitations WHERE id=$1", str(invitation_id))
		return Invitation.from_record(dict(record)) if record else None

	async def create_invitation(self, sender_id: UUID, target_id: UUID, *, conn: asyncpg.Connection) -> Invitation:
		try:
			record = await conn.fetchrow(
				"""
				INSERT INTO invitations (id, user_id, request_id)
				VALUES ($1, $2, $3)
				RETURNING *
				""",
				uuid4(),
				str(sender_id),
				str(target_id),
			)
		except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
			raise ConflictError("invitation_exists") from exc
		return Invitation.from_record(dict(record))

	async def delete_invitation(self, invitation_id: UUID, *, conn: asyncpg.Connection) -> None:
		await conn.execute("DELETE FROM invitations WHERE id=$1", str(invitation_id))

	async def delete_invitations_between(self, user_a: UUID, user_b: UUID, *, conn: asyncpg.Connection) -> int:
		rows = await conn.fetch(
			"""
			DELETE FROM invitations
			WHERE (user_id = $1 AND request_id = $2) OR (user_id = $2 AND request_id = $1)
			RETURNING id
			""",
			str(user_a),
			str(user_b),
		)
		return len(rows)

	async def delete_invitations_to(self, user_id: UUID, *, conn: asyncpg.Connection) -> int:
		rows = await conn.fetch("DELETE FROM invitations WHERE request_id=$1 RETURNING id", str(user_id))
		return len(rows)

	async def list_incoming(self, user_id: UUID, *, conn: asyncpg.Connection) -> list[InvitationSummary]:
		rows = await conn.fetch(
			"""
			SELECT i.id, i.user_id, i.request_id, i.created_at,
				sender.email AS sender_email,
				sender.firstname AS sender_firstname,
				sender.lastname AS sender_lastname,
				sender.picture AS sender_picture
			FROM invitations i
			JOIN users sender ON sender.id = i.user_id
			WHERE i.request_id = $1
			ORDER BY i.created_at DESC
			""",
			str(user_id),
		)
		return [InvitationSummary.model_validate(dict(row)) for row in rows]

	async def count_incoming(self, user_id: UUID, *, conn: asyncpg.Connection) -> int:
		value = await conn.fetchval("SELECT COUNT(*) FROM invitations WHERE request_id=$1", str(user_id))
		return int(value or 0)
