"""Seed the remote profile store with sample pilgrim profiles.

Loads all profiles from fixtures/profiles/ into the profile document table so
their short links resolve.

Usage:
    python -m hajjcare.scripts.seed_profiles

The script is idempotent - it can be run multiple times safely.
Existing documents are updated via merge-upsert semantics.
"""

import asyncio
import json
from pathlib import Path

from sqlalchemy import text

from hajjcare.config import settings
from hajjcare.database import async_session_maker, engine, init_db
from hajjcare.schemas.profile import PilgrimProfile
from hajjcare.services.remote_store import RemoteProfileStore


async def verify_connection() -> bool:
    """Verify the database connection is working."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print("  Database: connected")
    except Exception as e:
        print(f"  Database: FAILED - {e}")
        return False
    return True


async def seed_profiles(fixtures_dir: Path) -> dict[str, int]:
    """
    Seed the store with all profile fixtures.

    Args:
        fixtures_dir: Path to fixtures/profiles directory.

    Returns:
        Dictionary with counts: profiles_loaded, profiles_skipped.
    """
    stats = {"profiles_loaded": 0, "profiles_skipped": 0}

    profile_files = sorted(fixtures_dir.glob("profile_*.json"))
    if not profile_files:
        print(f"No profiles found in {fixtures_dir}")
        return stats

    print(f"Found {len(profile_files)} profiles")

    print("\nVerifying database connection...")
    if not await verify_connection():
        raise RuntimeError("Database connection verification failed")
    await init_db()

    store = RemoteProfileStore(async_session_maker, timeout=settings.store_timeout_seconds)

    print("\nLoading profiles...")
    for profile_path in profile_files:
        with open(profile_path, encoding="utf-8") as f:
            profile = PilgrimProfile.model_validate(json.load(f))

        if await store.put(profile.id, profile):
            print(f"  {profile_path.name}: {profile.id}")
            stats["profiles_loaded"] += 1
        else:
            print(f"  {profile_path.name}: skipped (default template)")
            stats["profiles_skipped"] += 1

    return stats


def main() -> None:
    """Main entry point for the seed script."""
    # Resolve fixtures directory relative to repo root
    repo_root = Path(__file__).parent.parent.parent.parent
    fixtures_dir = repo_root / "fixtures" / "profiles"

    if not fixtures_dir.exists():
        print(f"Fixtures directory not found: {fixtures_dir}")
        return

    print("=" * 50)
    print("Hajj Care Profile Seeding")
    print("=" * 50)

    stats = asyncio.run(seed_profiles(fixtures_dir))

    print("\n" + "=" * 50)
    print("Summary")
    print("=" * 50)
    print(f"  Profiles loaded: {stats['profiles_loaded']}")
    print(f"  Profiles skipped: {stats['profiles_skipped']}")
    print("\nProfile seeding complete!")


if __name__ == "__main__":
    main()
