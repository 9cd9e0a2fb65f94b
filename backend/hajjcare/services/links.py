"""Share link builder.

Two link forms exist:

- long link:  ``{origin}/p/{id}?d={token}``, self-contained, resolvable
  without the remote store
- short link: ``{origin}/p/{id}``, needs a matching record in the store

The smart link and the QR link pick between them based on whether the
profile could be synced into the store at share time.
"""

import logging
from urllib.parse import quote

from hajjcare.constants import SHARE_PATH, SHARE_TOKEN_PARAM
from hajjcare.schemas.profile import PilgrimProfile, ShareLinks
from hajjcare.services.codec import encode
from hajjcare.services.remote_store import RemoteProfileStore, StoreUnavailable

logger = logging.getLogger(__name__)


class ShareLinkBuilder:
    """Builds share URLs for a profile against a public origin."""

    def __init__(
        self,
        origin: str,
        store: RemoteProfileStore,
        qr_fallback_to_long_link: bool = False,
    ):
        self.origin = origin.rstrip("/")
        self.store = store
        self.qr_fallback_to_long_link = qr_fallback_to_long_link

    def build_short_link(self, profile: PilgrimProfile) -> str:
        """Identifier-only link."""
        return f"{self.origin}{SHARE_PATH}/{quote(profile.id, safe='')}"

    def build_long_link(self, profile: PilgrimProfile) -> str:
        """Link embedding the full encoded profile in the ``d`` parameter."""
        token = quote(encode(profile), safe="")
        return f"{self.build_short_link(profile)}?{SHARE_TOKEN_PARAM}={token}"

    async def _sync(self, profile: PilgrimProfile) -> bool:
        """Upsert ``profile``; True only if the store now holds it."""
        try:
            return await self.store.put(profile.id, profile)
        except StoreUnavailable as e:
            logger.warning("Store unavailable while sharing %s: %s", profile.id, e)
            return False

    def _smart_link(self, profile: PilgrimProfile, synced: bool) -> str:
        # Unsynced profiles only resolve through the embedded form
        return self.build_short_link(profile) if synced else self.build_long_link(profile)

    def _qr_link(self, profile: PilgrimProfile, synced: bool) -> str:
        if not synced and self.qr_fallback_to_long_link:
            return self.build_long_link(profile)
        return self.build_short_link(profile)

    async def build_smart_link(self, profile: PilgrimProfile) -> str:
        """Short link if the store now holds the profile, otherwise long link."""
        return self._smart_link(profile, await self._sync(profile))

    async def build_qr_link(self, profile: PilgrimProfile) -> str:
        """Link encoded in the QR image.

        Always the short form, regardless of which link was built last. The
        profile is synced first so the short link resolves; with
        ``qr_fallback_to_long_link`` set, a failed sync switches the QR to
        the long form instead.
        """
        return self._qr_link(profile, await self._sync(profile))

    async def build_all(self, profile: PilgrimProfile) -> ShareLinks:
        """Every link form for ``profile``, from a single sync."""
        synced = await self._sync(profile)
        return ShareLinks(
            short_link=self.build_short_link(profile),
            long_link=self.build_long_link(profile),
            smart_link=self._smart_link(profile, synced),
            qr_link=self._qr_link(profile, synced),
        )
