"""Process-wide asyncpg pool, created lazily on first use."""

from __future__ import annotations

from typing import Optional

import asyncpg

from app.settings import settings

_pool: Optional[asyncpg.Pool] = None


async def init_pool() -> asyncpg.Pool:
	global _pool
	if _pool is not None:
		return _pool
	_pool = await asyncpg.create_pool(
		dsn=settings.postgres_url,
		min_size=settings.postgres_min_pool_size,
		max_size=settings.postgres_max_pool_size,
		ssl="require" if settings.postgres_ssl else "disable",
		server_settings={"application_name": settings.service_name},
	)
	return _pool


async def get_pool() -> asyncpg.Pool:
	return _pool if _pool is not None else await init_pool()


async def close_pool() -> None:
	global _pool
	pool, _pool = _pool, None
	if pool is not None:
		await pool.close()
