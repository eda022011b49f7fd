"""Liveness and readiness probes.

Readiness needs Redis (rate limits, audit streams), Postgres and a schema at
least as new as ``MIN_MIGRATION``.
"""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Dict, Tuple

from app.infra import postgres
from app.infra.redis import redis_client
from app.obs import metrics

logger = logging.getLogger(__name__)

MIN_MIGRATION = "0001"

Check = Dict[str, Any]


def _latency_ms(started: float) -> float:
	return round((perf_counter() - started) * 1000, 2)


async def check_redis(timeout: float = 0.2) -> Check:
	started = perf_counter()
	try:
		await asyncio.wait_for(redis_client.ping(), timeout=timeout)
	except Exception as exc:  # pragma: no cover - runtime dependent
		metrics.mark_redis(False)
		logger.warning("readiness_redis_failed", exc_info=True)
		return {"ok": False, "error": str(exc)}
	metrics.mark_redis(True, latency_seconds=perf_counter() - started)
	return {"ok": True, "latency_ms": _latency_ms(started)}


async def check_postgres(timeout: float = 0.3) -> Tuple[Check, Check]:
	"""Ping the database and read the newest applied migration on the same connection."""
	started = perf_counter()
	try:
		pool = await postgres.get_pool()
		async with pool.acquire() as conn:
			await asyncio.wait_for(conn.execute("SELECT 1"), timeout=timeout)
			db_state: Check = {"ok": True, "latency_ms": _latency_ms(started)}
			metrics.mark_postgres(True, latency_seconds=perf_counter() - started)
			try:
				version = await conn.fetchval("SELECT max(version) FROM schema_migrations")
			except Exception as exc:  # pragma: no cover - table missing before first migration
				return db_state, {"ok": False, "error": str(exc)}
	except Exception as exc:  # pragma: no cover - runtime dependent
		metrics.mark_postgres(False)
		logger.warning("readiness_postgres_failed", exc_info=True)
		return {"ok": False, "error": str(exc)}, {"ok": False, "error": "postgres_unavailable"}

	if version is None:
		return db_state, {"ok": False, "error": "no_migrations"}
	return db_state, {"ok": str(version) >= MIN_MIGRATION, "version": str(version), "required": MIN_MIGRATION}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok"}


async def readiness() -> Tuple[int, Dict[str, Any]]:
	redis_state, (postgres_state, migration_state) = await asyncio.gather(check_redis(), check_postgres())
	checks = {"redis": redis_state, "postgres": postgres_state, "migrations": migration_state}
	ready = all(state.get("ok") for state in checks.values())
	return (200 if ready else 503), {"status": "ok" if ready else "degraded", "checks": checks}
