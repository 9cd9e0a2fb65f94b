"""Single-slot local cache for the active profile.

One JSON file holds the most recently active profile on this installation.
Last write wins; a missing file is the normal first-run state.
"""

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from hajjcare.schemas.profile import PilgrimProfile

logger = logging.getLogger(__name__)


class LocalProfileCache:
    """Persisted single slot holding one profile."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> PilgrimProfile | None:
        """Return the cached profile, or None if there is none usable."""
        if not self.path.exists():
            return None

        try:
            return PilgrimProfile.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable local profile cache %s: %s", self.path, e)
            return None

    def save(self, profile: PilgrimProfile) -> None:
        """Replace the cached profile.

        Writes to a sibling temp file first so a crash never leaves a
        half-written slot behind.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(profile.model_dump_json(), encoding="utf-8")
        os.replace(tmp_path, self.path)
