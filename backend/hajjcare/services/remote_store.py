"""Remote Profile Store client.

Each call opens its own session, commits its own work, and runs under a
bounded timeout, so it can be used from request handlers and from detached
background tasks alike. Every backend failure surfaces as
:class:`StoreUnavailable`.
"""

import asyncio
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hajjcare.constants import is_pristine
from hajjcare.repositories.profile import ProfileRepository
from hajjcare.schemas.profile import PilgrimProfile

logger = logging.getLogger(__name__)

# Default bound for a single store call, in seconds
DEFAULT_TIMEOUT = 5.0


class StoreUnavailable(RuntimeError):
    """Raised when the remote store cannot be reached or fails."""

    pass


class RemoteProfileStore:
    """Keyed document store for pilgrim profiles."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._session_maker = session_maker
        self._timeout = timeout

    async def get(self, profile_id: str) -> PilgrimProfile | None:
        """Point lookup by profile id.

        Raises:
            StoreUnavailable: On database error, connection error or timeout.
        """
        return await self._run(self._get, profile_id)

    async def put(self, profile_id: str, profile: PilgrimProfile) -> bool:
        """Merge-upsert a profile under ``profile_id``.

        A profile that is still the untouched default template is never
        written, so a fresh installation cannot clobber a previously synced
        record that shares its id.

        Returns:
            True if the document was written, False if the write was skipped.

        Raises:
            StoreUnavailable: On database error, connection error or timeout.
        """
        if is_pristine(profile):
            logger.info("Skipping store write for %s: profile is the default template", profile_id)
            return False
        await self._run(self._put, profile_id, profile)
        return True

    async def _get(self, profile_id: str) -> PilgrimProfile | None:
        async with self._session_maker() as session:
            return await ProfileRepository(session).get(profile_id)

    async def _put(self, profile_id: str, profile: PilgrimProfile) -> None:
        try:
            await self._upsert(profile_id, profile)
        except IntegrityError:
            # Another writer inserted the same id first; merge into its row instead
            logger.info("Concurrent insert of %s, retrying as merge", profile_id)
            await self._upsert(profile_id, profile)

    async def _upsert(self, profile_id: str, profile: PilgrimProfile) -> None:
        async with self._session_maker() as session:
            await ProfileRepository(session).upsert(profile_id, profile)
            await session.commit()

    async def _run(self, operation, profile_id, *args):
        try:
            return await asyncio.wait_for(operation(profile_id, *args), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise StoreUnavailable(
                f"Store call for {profile_id} timed out after {self._timeout}s"
            ) from e
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"Store call for {profile_id} failed: {e}") from e
