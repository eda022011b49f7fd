"""Insert the event role vocabulary (superAdmin, admin, gift, participant) if missing."""

import asyncio
import os
import sys

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BACKEND_DIR = os.path.join(ROOT_DIR, "backend")
if BACKEND_DIR not in sys.path:
    sys.path.append(BACKEND_DIR)

from app.domain.roles.service import RoleDirectory
from app.infra.postgres import close_pool, init_pool


async def seed() -> None:
    await init_pool()
    try:
        directory = RoleDirectory()
        created = await directory.seed_defaults()
        roles = await directory.list_roles()
        print(f"Created {created} role(s); vocabulary: {', '.join(role.name for role in roles)}")
    finally:
        await close_pool()


if __name__ == "__main__":
    asyncio.run(seed())
