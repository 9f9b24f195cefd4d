"""Show the latest location of each user on an assignment.

Usage: python scripts/check_locations.py [ASSIGNMENT_ID]
"""
import asyncio
import sys
from pathlib import Path
from uuid import UUID

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fieldops.database import AsyncSessionLocal, engine
from fieldops.services.diagnostics_service import locations_report


async def main(assignment_id=None):
    async with AsyncSessionLocal() as db:
        for line in await locations_report(db, assignment_id=assignment_id):
            print(line)
    await engine.dispose()


if __name__ == "__main__":
    target = UUID(sys.argv[1]) if len(sys.argv) > 1 else None
    asyncio.run(main(target))
