"""Profile resolver for opened share links.

Opening ``/p/{id}`` (optionally with ``?d=<token>``) walks an ordered chain
of lookups and stops at the first hit:

1. embedded token  - decode, force the path id, cache, sync in background
2. remote store    - adopt the stored record, cache it
3. local cache     - adopt if the ids match, sync in background
4. placeholder     - emergency view carrying only the requested id

Each step either returns a resolution or None; any failure inside a step is
treated as a miss. Steps are awaited strictly in order.
"""

import logging

from hajjcare.schemas.profile import PilgrimProfile, ProfileResolution
from hajjcare.services.background import BackgroundSync
from hajjcare.services.codec import MalformedToken, decode
from hajjcare.services.local_cache import LocalProfileCache
from hajjcare.services.remote_store import RemoteProfileStore, StoreUnavailable

logger = logging.getLogger(__name__)


def placeholder_profile(profile_id: str) -> PilgrimProfile:
    """Emergency-view profile used when no source knows ``profile_id``."""
    return PilgrimProfile(id=profile_id, not_found=True)


class ProfileResolver:
    """Resolves a requested profile id against token, store and cache."""

    def __init__(
        self,
        store: RemoteProfileStore,
        cache: LocalProfileCache,
        sync: BackgroundSync | None = None,
    ):
        self.store = store
        self.cache = cache
        self.sync = sync or BackgroundSync(store)

    async def resolve(self, profile_id: str, token: str | None = None) -> ProfileResolution:
        """Resolve ``profile_id``; always returns a result, never raises."""
        steps = (
            lambda: self._from_token(profile_id, token),
            lambda: self._from_store(profile_id),
            lambda: self._from_cache(profile_id),
        )
        for step in steps:
            resolution = await step()
            if resolution is not None:
                logger.info("Resolved profile %s from %s", profile_id, resolution.source)
                return resolution

        logger.info("No source holds profile %s, showing emergency view", profile_id)
        return ProfileResolution(profile=placeholder_profile(profile_id), source="placeholder")

    async def _from_token(self, profile_id: str, token: str | None) -> ProfileResolution | None:
        if not token:
            return None

        try:
            profile = decode(token)
        except MalformedToken as e:
            logger.info("Embedded data for %s is unusable: %s", profile_id, e)
            return None
        except Exception:
            logger.exception("Unexpected failure decoding embedded data for %s", profile_id)
            return None

        if profile.id != profile_id:
            logger.debug("Embedded id %s overridden by path id %s", profile.id, profile_id)
            profile = profile.model_copy(update={"id": profile_id})

        self._cache_quietly(profile)
        self.sync.schedule_put(profile)
        return ProfileResolution(profile=profile, source="embedded")

    async def _from_store(self, profile_id: str) -> ProfileResolution | None:
        try:
            profile = await self.store.get(profile_id)
        except StoreUnavailable as e:
            logger.warning("Remote store lookup for %s failed: %s", profile_id, e)
            return None

        if profile is None:
            return None

        if profile.id != profile_id:
            profile = profile.model_copy(update={"id": profile_id})

        self._cache_quietly(profile)
        return ProfileResolution(profile=profile, source="remote")

    async def _from_cache(self, profile_id: str) -> ProfileResolution | None:
        profile = self.cache.load()
        if profile is None or profile.id != profile_id:
            return None

        self.sync.schedule_put(profile)
        return ProfileResolution(profile=profile, source="cache")

    def _cache_quietly(self, profile: PilgrimProfile) -> None:
        try:
            self.cache.save(profile)
        except OSError as e:
            logger.warning("Could not write profile %s to local cache: %s", profile.id, e)

    async def drain(self) -> None:
        """Wait for background store writes launched by earlier resolutions."""
        await self.sync.drain()
