"""Profile document repository.

Point lookups and merge-upserts of profile documents within a caller-owned
session. Callers outside a request should go through
:class:`hajjcare.services.remote_store.RemoteProfileStore`, which owns the
session, the timeout and the error translation.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from hajjcare.models.profile import ProfileDocument
from hajjcare.schemas.profile import PilgrimProfile

logger = logging.getLogger(__name__)


def deep_merge(existing: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    """Merge ``incoming`` into ``existing`` without mutating either.

    Nested objects are merged key by key; lists and scalars from ``incoming``
    replace the existing value.
    """
    merged = dict(existing)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ProfileRepository:
    """Repository for profile documents."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session.

        Args:
            db: Async SQLAlchemy session.
        """
        self.db = db

    async def get(self, profile_id: str) -> PilgrimProfile | None:
        """Load a profile by id.

        Args:
            profile_id: The profile identifier.

        Returns:
            The stored profile, or None if absent or no longer valid.
        """
        document = await self.db.get(ProfileDocument, profile_id)
        if document is None:
            return None

        try:
            return PilgrimProfile.model_validate(document.data)
        except ValidationError as e:
            logger.warning("Stored profile %s failed validation: %s", profile_id, e)
            return None

    async def upsert(self, profile_id: str, profile: PilgrimProfile) -> ProfileDocument:
        """Insert the profile, or merge it into the existing document.

        Args:
            profile_id: Document key.
            profile: Profile to write; its id is forced to ``profile_id``.

        Returns:
            The saved ProfileDocument.
        """
        incoming = profile.model_dump(mode="json")
        incoming["id"] = profile_id

        document = await self.db.get(ProfileDocument, profile_id)
        if document is None:
            document = ProfileDocument(id=profile_id, data=incoming)
            self.db.add(document)
        else:
            # Reassign so the JSON column is flagged as modified
            document.data = deep_merge(document.data, incoming)

        await self.db.flush()
        return document
