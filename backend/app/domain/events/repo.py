"""Async repository helpers for events, participants and event invitations."""

from __future__ import annotations

import datetime as dt
from typing import Sequence
from uuid import UUID, uuid4

import asyncpg

from app.domain.common.errors import ConflictError
from app.domain.events import models
from app.domain.events.schemas import EventInvitationSummary, ParticipantSummary
from app.domain.roles.models import RoleEvent
from app.infra.postgres import get_pool

_EVENT_COLUMNS = ("id", "name", "description", "date", "time", "address", "organizer_id", "created_at")


def _participant_from_record(record: asyncpg.Record, *, with_role: bool, with_event: bool) -> models.Participant:
	data = dict(record)
	participant = models.Participant(
		id=data["id"],
		event_id=data["event_id"],
		user_id=data["user_id"],
		role_id=data["role_id"],
		created_at=data.get("created_at"),
	)
	if with_role and data.get("role__name") is not None:
		participant.role = RoleEvent(id=data["role_id"], name=data["role__name"])
	if with_event and data.get("event__id") is not None:
		participant.event = models.Event.model_validate({col: data[f"event__{col}"] for col in _EVENT_COLUMNS})
	return participant


def _ids(values: Sequence[UUID]) -> list[str]:
	return [str(value) for value in values]


class EventsRepository:
	"""Thin data-access layer around asyncpg."""

	# --- Events -------------------------------------------------------------

	async def create_event(
		self,
		*,
		conn: asyncpg.Connection,
		organizer_id: UUID,
		name: str,
		description: str,
		date: dt.date,
		time: dt.time | None,
		address: str,
	) -> models.Event:
		record = await conn.fetchrow(
			"""
			INSERT INTO events (id, name, description, date, time, address, organizer_id)
			VALUES ($1, $2, $3, $4, $5, $6, $7)
			RETURNING *
			""",
			uuid4(),
			name,
			description,
			date,
			time,
			address,
			str(organizer_id),
		)
		return models.Event.model_validate(dict(record))

	async def get_event(self, event_id: UUID, *, conn: asyncpg.Connection | None = None) -> models.Event | None:
		async def _fetch(connection: asyncpg.Connection) -> models.Event | None:
			record = await connection.fetchrow("SELECT * FROM events WHERE id=$1", str(event_id))
			return models.Event.model_validate(dict(record)) if record else None

		if conn is not None:
			return await _fetch(conn)
		pool = await get_pool()
		async with pool.acquire() as pooled_conn:
			return await _fetch(pooled_conn)

	async def list_upcoming(self, user_id: UUID, *, today: dt.date) -> list[models.Event]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT e.*
				FROM events e
				JOIN participants p ON p.event_id = e.id
				WHERE p.user_id = $1 AND e.date >= $2
				ORDER BY e.date ASC, e.time ASC NULLS FIRST, e.created_at ASC
				""",
				str(user_id),
				today,
			)
		return [models.Event.model_validate(dict(row)) for row in rows]

	# --- Participants -------------------------------------------------------

	async def get_participant(
		self,
		event_id: UUID,
		user_id: UUID,
		*,
		with_role: bool = True,
		with_event: bool = False,
		conn: asyncpg.Connection | None = None,
	) -> models.Participant | None:
		columns = ["p.*"]
		joins: list[str] = []
		if with_role:
			columns.append("r.name AS role__name")
			joins.append("LEFT JOIN role_event r ON r.id = p.role_id")
		if with_event:
			columns.extend(f"e.{col} AS event__{col}" for col in _EVENT_COLUMNS)
			joins.append("JOIN events e ON e.id = p.event_id")
		query = """
			SELECT {columns}
			FROM participants p
			{joins}
			WHERE p.event_id=$1 AND p.user_id=$2
		""".format(columns=", ".join(columns), joins="\n".join(joins))

		async def _fetch(connection: asyncpg.Connection) -> models.Participant | None:
			record = await connection.fetchrow(query, str(event_id), str(user_id))
			if not record:
				return None
			return _participant_from_record(record, with_role=with_role, with_event=with_event)

		if conn is not None:
			return await _fetch(conn)
		pool = await get_pool()
		async with pool.acquire() as pooled_conn:
			return await _fetch(pooled_conn)

	async def add_participant(
		self,
		*,
		conn: asyncpg.Connection,
		event_id: UUID,
		user_id: UUID,
		role_id: UUID,
	) -> models.Participant:
		try:
			record = await conn.fetchrow(
				"""
				INSERT INTO participants (id, event_id, user_id, role_id)
				VALUES ($1, $2, $3, $4)
				RETURNING *
				""",
				uuid4(),
				str(event_id),
				str(user_id),
				str(role_id),
			)
		except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
			raise ConflictError("already_participant") from exc
		return models.Participant.model_validate(dict(record))

	async def update_participant_role(
		self,
		participant_id: UUID,
		role_id: UUID,
		*,
		conn: asyncpg.Connection,
	) -> models.Participant:
		record = await conn.fetchrow(
			"UPDATE participants SET role_id=$2 WHERE id=$1 RETURNING *",
			str(participant_id),
			str(role_id),
		)
		return models.Participant.model_validate(dict(record))

	async def list_participants(self, event_id: UUID) -> list[ParticipantSummary]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT p.id, p.user_id, p.role_id, r.name AS role_name,
					u.email, u.firstname, u.lastname, u.picture
				FROM participants p
				JOIN users u ON u.id = p.user_id
				JOIN role_event r ON r.id = p.role_id
				WHERE p.event_id = $1
				ORDER BY p.created_at ASC, p.id ASC
				""",
				str(event_id),
			)
		return [ParticipantSummary.model_validate(dict(row)) for row in rows]

	async def participant_ids_among(
		self,
		event_id: UUID,
		user_ids: Sequence[UUID],
		*,
		conn: asyncpg.Connection,
	) -> set[UUID]:
		rows = await conn.fetch(
			"SELECT user_id FROM participants WHERE event_id=$1 AND user_id = ANY($2::uuid[])",
			str(event_id),
			_ids(user_ids),
		)
		return {UUID(str(row["user_id"])) for row in rows}

	async def friend_ids_among(
		self,
		user_id: UUID,
		user_ids: Sequence[UUID],
		*,
		conn: asyncpg.Connection,
	) -> set[UUID]:
		rows = await conn.fetch(
			"""
			SELECT CASE WHEN user1_id = $1 THEN user2_id ELSE user1_id END AS friend_id
			FROM friends
			WHERE (user1_id = $1 AND user2_id = ANY($2::uuid[]))
			   OR (user2_id = $1 AND user1_id = ANY($2::uuid[]))
			""",
			str(user_id),
			_ids(user_ids),
		)
		return {UUID(str(row["friend_id"])) for row in rows}

	# --- Event invitations --------------------------------------------------

	async def invited_ids_among(
		self,
		event_id: UUID,
		user_ids: Sequence[UUID],
		*,
		conn: asyncpg.Connection,
	) -> set[UUID]:
		rows = await conn.fetch(
			"SELECT user_id FROM event_invitations WHERE event_id=$1 AND user_id = ANY($2::uuid[])",
			str(event_id),
			_ids(user_ids),
		)
		return {UUID(str(row["user_id"])) for row in rows}

	async def insert_invitations(
		self,
		event_id: UUID,
		organizer_id: UUID,
		user_ids: Sequence[UUID],
		*,
		conn: asyncpg.Connection,
	) -> list[models.EventInvitation]:
		try:
			rows = await conn.fetch(
				"""
				INSERT INTO event_invitations (event_id, user_id, organizer_id)
				SELECT $1, invitee, $2
				FROM unnest($3::uuid[]) AS invitee
				RETURNING *
				""",
				str(event_id),
				str(organizer_id),
				_ids(user_ids),
			)
		except asyncpg.UniqueViolationError as exc:  # type: ignore[attr-defined]
			raise ConflictError("already_invited") from exc
		return [models.EventInvitation.model_validate(dict(row)) for row in rows]

	async def get_invitation(
		self,
		event_id: UUID,
		user_id: UUID,
		*,
		conn: asyncpg.Connection,
	) -> models.EventInvitation | None:
		record = await conn.fetchrow(
			"SELECT * FROM event_invitations WHERE event_id=$1 AND user_id=$2",
			str(event_id),
			str(user_id),
		)
		return models.EventInvitation.model_validate(dict(record)) if record else None

	async def delete_invitation(self, invitation_id: UUID, *, conn: asyncpg.Connection) -> None:
		await conn.execute("DELETE FROM event_invitations WHERE id=$1", str(invitation_id))

	async def list_invitations(self, user_id: UUID) -> list[EventInvitationSummary]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT i.id, i.event_id, i.user_id, i.organizer_id, i.created_at,
					e.name AS event_name, e.date AS event_date, e.time AS event_time,
					e.address AS event_address,
					o.firstname AS organizer_firstname, o.lastname AS organizer_lastname
				FROM event_invitations i
				JOIN events e ON e.id = i.event_id
				JOIN users o ON o.id = i.organizer_id
				WHERE i.user_id = $1
				ORDER BY i.created_at DESC
				""",
				str(user_id),
			)
		return [EventInvitationSummary.model_validate(dict(row)) for row in rows]

	async def count_invitations(self, user_id: UUID, *, conn: asyncpg.Connection) -> int:
		value = await conn.fetchval("SELECT COUNT(*) FROM event_invitations WHERE user_id=$1", str(user_id))
		return int(value or 0)
