"""Audit helpers for events and event invitations."""

from __future__ import annotations

from typing import Dict

from app.infra.redis import redis_client

STREAM_KEY = "x:events.events"


async def log_event(event: str, fields: Dict[str, str]) -> None:
	payload = {"event": event, **fields}
	await redis_client.xadd(STREAM_KEY, payload)
