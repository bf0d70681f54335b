"""
Database Seed Script

Creates the schema if needed and loads the demo tables, menu and users.
Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from reservation_api.core.config import get_settings, setup_logging
from reservation_api.core.security import PasswordHasher
from reservation_api.database import build_engine, build_session_maker, init_db
from reservation_api.seed import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    USER_EMAIL,
    USER_PASSWORD,
    seed_database,
)


async def main() -> int:
    settings = get_settings()
    setup_logging(settings)

    print("=" * 60)
    print("🌱 SEEDING DATABASE")
    print("=" * 60)

    engine = build_engine(settings.database_url)
    try:
        await init_db(engine)
        session_maker = build_session_maker(engine)
        async with session_maker() as db:
            result = await seed_database(db, PasswordHasher(rounds=settings.bcrypt_rounds))
    except Exception as e:
        print(f"\n❌ Seed failed: {e}")
        return 1
    finally:
        await engine.dispose()

    print(f"\n✅ Tables: {result.tables}")
    print(f"✅ Menu items: {result.menu_items}")
    print(f"✅ Users: {result.users}")
    print(f"\nDefault admin user: {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
    print(f"Default test user: {USER_EMAIL} / {USER_PASSWORD}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
