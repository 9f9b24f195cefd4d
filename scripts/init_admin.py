"""Script to create the default permissions, roles and superadmin account."""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fieldops.config import settings
from fieldops.database import AsyncSessionLocal, Base, engine
from fieldops.models import *  # noqa: F401,F403
from fieldops.services.bootstrap_service import bootstrap


async def init_admin():
    """Create tables, roles and the superadmin if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        admin_user = await bootstrap(db)
        role_names = ", ".join(sorted(r.name for r in admin_user.roles))

    print("✓ Permissions and roles are in place")
    print("\n" + "=" * 50)
    print("Superadmin account:")
    print(f"  Email: {admin_user.email}")
    print(f"  Roles: {role_names}")
    if admin_user.email == settings.DEFAULT_ADMIN_EMAIL:
        print("  Password: value of DEFAULT_ADMIN_PASSWORD")
    print("=" * 50)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_admin())
