"""Delivery of share links.

A share channel pushes the link somewhere (for example an SMS or messaging
gateway behind a webhook). When no channel is configured, or the channel
rejects the link, the link is handed back for manual copying instead of
failing the share action.
"""

import logging

import httpx

from hajjcare.schemas.profile import PilgrimProfile, ShareDelivery

logger = logging.getLogger(__name__)

# Seconds before a webhook delivery is abandoned
DEFAULT_TIMEOUT = 5.0


class ShareUnavailable(RuntimeError):
    """Raised when a share channel rejects the link."""

    pass


class WebhookShareChannel:
    """Posts share links to a configured HTTP endpoint."""

    def __init__(
        self, url: str, timeout: float = DEFAULT_TIMEOUT, client: httpx.AsyncClient | None = None
    ):
        self.url = url
        self.timeout = timeout
        self._client = client

    async def deliver(self, profile: PilgrimProfile, link: str) -> None:
        """Send ``link`` for ``profile``.

        Raises:
            ShareUnavailable: If the request fails or the endpoint answers
                with an error status.
        """
        payload = {
            "profile_id": profile.id,
            "title": "Hajj Care",
            "text": f"Medical profile: {profile.full_name}",
            "url": link,
        }
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ShareUnavailable(f"Share webhook rejected the link: {e}") from e


async def share_link(
    profile: PilgrimProfile,
    link: str,
    channel: WebhookShareChannel | None,
) -> ShareDelivery:
    """Deliver ``link`` through ``channel``, falling back to manual copy."""
    if channel is not None:
        try:
            await channel.deliver(profile, link)
            return ShareDelivery(url=link, delivered=True, channel="webhook")
        except ShareUnavailable as e:
            logger.info("Share channel unavailable for %s, offering manual copy: %s", profile.id, e)

    return ShareDelivery(url=link, delivered=False, channel="manual")
