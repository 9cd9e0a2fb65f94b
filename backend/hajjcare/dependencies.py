"""Service singletons for FastAPI dependency injection.

Each getter builds its service once per process from settings. Tests swap
them out through ``app.dependency_overrides``.
"""

from functools import lru_cache

from hajjcare.config import settings
from hajjcare.database import async_session_maker
from hajjcare.services.background import BackgroundSync
from hajjcare.services.links import ShareLinkBuilder
from hajjcare.services.local_cache import LocalProfileCache
from hajjcare.services.profile_editor import ProfileEditor
from hajjcare.services.remote_store import RemoteProfileStore
from hajjcare.services.resolver import ProfileResolver
from hajjcare.services.sharing import WebhookShareChannel
from hajjcare.services.summary import EmergencySummaryService


@lru_cache
def get_remote_store() -> RemoteProfileStore:
    """Remote profile store backed by the configured database."""
    return RemoteProfileStore(async_session_maker, timeout=settings.store_timeout_seconds)


@lru_cache
def get_local_cache() -> LocalProfileCache:
    """Single-slot cache file for the active profile."""
    return LocalProfileCache(settings.local_cache_path)


@lru_cache
def get_background_sync() -> BackgroundSync:
    """Shared holder for fire-and-forget store writes."""
    return BackgroundSync(get_remote_store())


@lru_cache
def get_resolver() -> ProfileResolver:
    """Resolver for opened share links."""
    return ProfileResolver(get_remote_store(), get_local_cache(), get_background_sync())


@lru_cache
def get_editor() -> ProfileEditor:
    """Owner of the active profile."""
    return ProfileEditor(
        get_local_cache(),
        get_background_sync(),
        mirror_on_save=settings.mirror_on_save,
    )


@lru_cache
def get_link_builder() -> ShareLinkBuilder:
    """Share link builder for the public origin."""
    return ShareLinkBuilder(
        settings.public_origin,
        get_remote_store(),
        qr_fallback_to_long_link=settings.qr_fallback_to_long_link,
    )


@lru_cache
def get_share_channel() -> WebhookShareChannel | None:
    """Configured share channel, or None for manual copy only."""
    if not settings.share_webhook_url:
        return None
    return WebhookShareChannel(settings.share_webhook_url)


@lru_cache
def get_summary_service() -> EmergencySummaryService:
    """Emergency summary service (LLM with local fallback)."""
    return EmergencySummaryService()
