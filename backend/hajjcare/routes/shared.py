"""Share link routes: opening ``/p/{profile_id}``."""

from fastapi import APIRouter, Depends, Query

from hajjcare.auth import require_security_code, security_code_header
from hajjcare.constants import SHARE_PATH
from hajjcare.dependencies import get_resolver
from hajjcare.schemas.profile import ProfileResolution
from hajjcare.services.resolver import ProfileResolver

router = APIRouter(prefix=SHARE_PATH, tags=["shared"])


@router.get("/{profile_id}", response_model=ProfileResolution)
async def open_shared_profile(
    profile_id: str,
    d: str | None = Query(default=None, description="Embedded profile token"),
    resolver: ProfileResolver = Depends(get_resolver),
    security_code: str | None = Depends(security_code_header),
) -> ProfileResolution:
    """Resolve a shared profile link.

    Tries the embedded token, then the remote store, then the local cache.
    When nothing matches, the emergency view (placeholder profile) is
    returned with 200 rather than an error.

    Args:
        profile_id: Profile identifier from the link path.
        d: Optional embedded profile token from a long link.

    Returns:
        The resolved profile and the source it came from.

    Raises:
        HTTPException: 401 if the profile has a security code and the
            X-Security-Code header does not match it.
    """
    resolution = await resolver.resolve(profile_id, d)
    require_security_code(resolution.profile, security_code)
    return resolution
