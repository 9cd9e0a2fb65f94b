"""Security-code gate for profile access.

The code printed on the pilgrim's bracelet unlocks the profile. It is
compared in constant time against the profile's own code, sent by clients
in the ``X-Security-Code`` header.
"""

import secrets

from fastapi import Header, HTTPException, status

from hajjcare.schemas.profile import PilgrimProfile


def verify_security_code(profile: PilgrimProfile, code: str | None) -> bool:
    """True if ``code`` unlocks ``profile``.

    A profile without a code (such as the emergency-view placeholder) is
    always open.
    """
    if not profile.security_code:
        return True
    if code is None:
        return False
    return secrets.compare_digest(code.encode("utf-8"), profile.security_code.encode("utf-8"))


async def security_code_header(
    x_security_code: str | None = Header(default=None),
) -> str | None:
    """Read the bracelet code supplied by the client, if any."""
    return x_security_code


def require_security_code(profile: PilgrimProfile, code: str | None) -> None:
    """Raise 401 unless ``code`` unlocks ``profile``.

    Raises:
        HTTPException: 401 if the code is missing or wrong.
    """
    if verify_security_code(profile, code):
        return
    if code is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing security code",
        )
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid security code",
    )
