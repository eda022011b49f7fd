"""Fixed-window request budgets kept in Redis."""

from __future__ import annotations

import time
from typing import Optional

from app.infra.redis import redis_client


def window_key(kind: str, actor_id: str, window_seconds: int, now: float) -> str:
	"""Counter key for the window containing ``now``; a new window starts a fresh key."""
	return f"rl:{kind}:{actor_id}:{window_seconds}:{int(now // window_seconds)}"


async def allow(
	kind: str,
	actor_id: str,
	*,
	limit: int,
	window_seconds: int = 60,
	now: Optional[float] = None,
) -> bool:
	"""Count one use of ``kind`` by ``actor_id``; False once the window's budget is spent."""
	if limit <= 0:
		return False
	window = max(1, int(window_seconds))
	key = window_key(kind, actor_id, window, time.time() if now is None else now)
	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, window)
		used, _ = await pipe.execute()
	return int(used) <= limit
