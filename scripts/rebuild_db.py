"""
Drop and recreate every PhotoSpot table.
WARNING: This deletes all users, photos, tags and favorites!

Usage:
    python scripts/rebuild_db.py
    python scripts/rebuild_db.py --yes   # skip the confirmation prompt
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path to import from project
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import settings
from db.database import get_engine, dispose_engine, Base
from db import models  # noqa: F401  registers the tables on Base


def _table_names():
    return [table.name for table in Base.metadata.sorted_tables]


async def rebuild_database(confirmed: bool = False):
    """Drop and recreate all tables in dependency order"""
    target = settings.DATABASE_URL.split("@")[-1]
    print("\n" + "=" * 60)
    print(f"DATABASE REBUILD: {target}")
    print("=" * 60)
    print(f"Tables to drop: {', '.join(reversed(_table_names()))}")
    print("=" * 60 + "\n")

    if not confirmed:
        response = input("Type 'yes' to delete all data: ")
        if response.lower() not in ['yes', 'y']:
            print("Rebuild cancelled.")
            return

    engine = get_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            print("✓ All tables dropped")
            await conn.run_sync(Base.metadata.create_all)
            print("✓ All tables created")

        print("\nTables created:")
        for name in _table_names():
            print(f"  - {name}")
        print("\nRun scripts/seed_photos.py to load sample data.")

    except Exception as e:
        print(f"\n✗ Error during rebuild: {e}")
        raise
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(rebuild_database(confirmed="--yes" in sys.argv))
