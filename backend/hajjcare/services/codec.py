"""Profile codec: reversible mapping between a profile and a URL-safe token.

Encoding layers, applied in order:
1. Canonical JSON text (UTF-8, compact separators, no ASCII escaping)
2. URL-safe base64 of the UTF-8 bytes, so every Unicode code point survives
3. Percent-escaping, so the token can be placed literally in a URL

Decoding undoes the layers in reverse order and validates the result.
"""

import base64
import json
import logging
from urllib.parse import quote, unquote

from pydantic import ValidationError

from hajjcare.schemas.profile import PilgrimProfile

logger = logging.getLogger(__name__)


class MalformedToken(ValueError):
    """Raised when a share token cannot be decoded into a profile."""

    pass


def encode(profile: PilgrimProfile) -> str:
    """Encode a profile into a URL-safe token."""
    payload = json.dumps(
        profile.model_dump(mode="json"),
        ensure_ascii=False,
        separators=(",", ":"),
    )
    b64 = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return quote(b64, safe="")


def decode(token: str) -> PilgrimProfile:
    """Decode a token produced by :func:`encode`.

    Raises:
        MalformedToken: If the token is not validly escaped, not valid base64,
            not UTF-8 JSON, or does not describe a well-formed profile.
    """
    if not token:
        raise MalformedToken("Empty token")

    try:
        b64 = unquote(token, errors="strict")
        raw = base64.b64decode(b64.encode("ascii"), altchars=b"-_", validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (ValueError, RecursionError) as e:
        raise MalformedToken(f"Token could not be decoded: {e}") from e

    if not isinstance(data, dict):
        raise MalformedToken("Token does not contain a profile object")

    try:
        return PilgrimProfile.model_validate(data)
    except ValidationError as e:
        logger.debug("Decoded token failed profile validation: %s", e)
        raise MalformedToken("Token does not describe a valid profile") from e
