"""List roles with their permissions."""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fieldops.database import AsyncSessionLocal, engine
from fieldops.services.diagnostics_service import roles_report


async def main():
    async with AsyncSessionLocal() as db:
        for line in await roles_report(db):
            print(line)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
