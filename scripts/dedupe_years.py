"""
Remove duplicate academic years

Older databases could hold several rows with the same year code. This keeps
the oldest row for each code, moves departments off the removed rows, deletes
the rest, then adds a unique index on years.code if the table has none.

Run with: python scripts/dedupe_years.py
"""
import asyncio
import sys
import os

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import text

from classroom.core.database import AsyncSessionLocal, close_db, get_engine, has_unique_column
from classroom.services.hierarchy_service import HierarchyService

UNIQUE_INDEX_SQL = "CREATE UNIQUE INDEX uq_years_code ON years (code)"


async def dedupe_years():
    print("=" * 50)
    print("Removing duplicate years...")
    print("=" * 50)

    async with AsyncSessionLocal() as db:
        deleted = await HierarchyService(db).remove_duplicate_years()

    if deleted:
        print(f"Deleted {len(deleted)} duplicate entries")
    else:
        print("No duplicates found")

    async with get_engine().begin() as conn:
        if await conn.run_sync(has_unique_column, "years", "code"):
            print("years.code is already unique")
        else:
            await conn.execute(text(UNIQUE_INDEX_SQL))
            print("Created unique index uq_years_code")

    await close_db()


if __name__ == "__main__":
    asyncio.run(dedupe_years())
