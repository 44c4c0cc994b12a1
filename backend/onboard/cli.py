"""Management CLI.

Usage:
    python -m onboard.cli seed-steps           # Insert/update the onboarding step catalog
    python -m onboard.cli make-admin <email>   # Promote an existing client to ADMIN
    python -m onboard.cli purge-tokens         # Delete expired refresh/reset/verification tokens
"""

import asyncio
import sys

from sqlalchemy import select

from onboard.auth.tokens import purge_expired_tokens
from onboard.database import async_session
from onboard.models.client import Client, Role
from onboard.services.onboarding import ensure_step_catalog


async def seed_steps() -> int:
    async with async_session() as db:
        count = await ensure_step_catalog(db)
        await db.commit()
    print(f"  Seeded {count} onboarding step(s)")
    return 0


async def make_admin(email: str) -> int:
    async with async_session() as db:
        result = await db.execute(select(Client).where(Client.email == email.lower()))
        client = result.scalar_one_or_none()
        if not client:
            print(f"  No client registered with {email}")
            return 1
        if client.role == Role.ADMIN:
            print(f"  {client.email} is already an admin")
            return 0
        client.role = Role.ADMIN
        await db.commit()
    print(f"  {client.email} is now an admin")
    return 0


async def purge_tokens() -> int:
    async with async_session() as db:
        purged = await purge_expired_tokens(db)
        await db.commit()
    for table, count in purged.items():
        print(f"  {table}: {count} expired row(s) deleted")
    return 0


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv if argv is None else argv
    cmd = argv[1] if len(argv) > 1 else ""
    if cmd == "seed-steps":
        return asyncio.run(seed_steps())
    if cmd == "purge-tokens":
        return asyncio.run(purge_tokens())
    if cmd == "make-admin" and len(argv) > 2:
        return asyncio.run(make_admin(argv[2]))
    print("Usage: python -m onboard.cli [seed-steps|make-admin <email>|purge-tokens]")
    return 2


if __name__ == "__main__":
    sys.exit(main(sys.argv))
