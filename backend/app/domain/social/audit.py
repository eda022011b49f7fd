"""Audit helpers for friend requests and friendships."""

from __future__ import annotations

from typing import Dict

from app.infra.redis import redis_client
from app.obs import metrics as obs_metrics


async def log_invite_event(event: str, fields: Dict[str, str]) -> None:
	payload = {"event": event, **fields}
	await redis_client.xadd("x:invites.events", payload)


async def log_friend_event(event: str, fields: Dict[str, str]) -> None:
	payload = {"event": event, **fields}
	await redis_client.xadd("x:friendships.events", payload)


def inc_request(result: str) -> None:
	obs_metrics.inc_friend_request(result)


def inc_response(action: str) -> None:
	obs_metrics.inc_friend_response(action)


def inc_removed() -> None:
	obs_metrics.inc_friend_removed()
