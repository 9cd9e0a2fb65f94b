"""Editing and persistence of the active profile.

Every edit produces a full replacement profile. On save the derived fields
are recomputed, the vitals timestamp is stamped, the result is written to the
local cache, and (optionally) mirrored to the remote store in the background.
"""

import logging
from datetime import date, datetime, timezone

from hajjcare.constants import default_profile
from hajjcare.schemas.profile import (
    BloodPressureReading,
    BloodSugarReading,
    PilgrimProfile,
)
from hajjcare.services.background import BackgroundSync
from hajjcare.services.local_cache import LocalProfileCache

logger = logging.getLogger(__name__)


class ProfileIdChanged(ValueError):
    """Raised when a save tries to change the immutable profile id."""

    pass


def compute_age(date_of_birth: date | None, today: date | None = None) -> int | None:
    """Age in whole years on ``today``."""
    if date_of_birth is None:
        return None
    today = today or date.today()
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return max(years, 0)


def compute_bmi(height_cm: float | None, weight_kg: float | None) -> float | None:
    """Body-mass index rounded to one decimal, or None without both inputs."""
    if not height_cm or not weight_kg or height_cm <= 0 or weight_kg <= 0:
        return None
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


def apply_derived_fields(profile: PilgrimProfile, today: date | None = None) -> PilgrimProfile:
    """Return ``profile`` with age and BMI recomputed from their sources."""
    return profile.model_copy(
        update={
            "age": compute_age(profile.date_of_birth, today),
            "bmi": compute_bmi(profile.height_cm, profile.weight_kg),
        }
    )


def add_blood_sugar_reading(
    profile: PilgrimProfile, reading: BloodSugarReading
) -> PilgrimProfile:
    """Return a copy of ``profile`` with ``reading`` at the front of its history."""
    vitals = profile.vital_signs.model_copy(
        update={"blood_sugar_readings": [reading, *profile.vital_signs.blood_sugar_readings]}
    )
    return profile.model_copy(update={"vital_signs": vitals})


def add_blood_pressure_reading(
    profile: PilgrimProfile, reading: BloodPressureReading
) -> PilgrimProfile:
    """Return a copy of ``profile`` with ``reading`` at the front of its history."""
    vitals = profile.vital_signs.model_copy(
        update={
            "blood_pressure_readings": [reading, *profile.vital_signs.blood_pressure_readings]
        }
    )
    return profile.model_copy(update={"vital_signs": vitals})


class ProfileEditor:
    """Owns the active profile of this installation."""

    def __init__(
        self,
        cache: LocalProfileCache,
        sync: BackgroundSync | None = None,
        mirror_on_save: bool = True,
    ):
        self.cache = cache
        self.sync = sync
        self.mirror_on_save = mirror_on_save

    def active(self) -> PilgrimProfile:
        """Cached profile, or a fresh default template on first run."""
        profile = self.cache.load()
        if profile is None:
            profile = default_profile()
            logger.info("No cached profile, starting from template %s", profile.id)
            self.cache.save(profile)
        return profile

    def save(self, profile: PilgrimProfile) -> PilgrimProfile:
        """Persist a full replacement of the active profile.

        Raises:
            ProfileIdChanged: If ``profile.id`` differs from the active id.
        """
        current = self.active()
        if profile.id != current.id:
            raise ProfileIdChanged(
                f"Profile id is immutable: {current.id} cannot become {profile.id}"
            )

        profile = apply_derived_fields(profile)
        vitals = profile.vital_signs.model_copy(
            update={"last_updated": datetime.now(timezone.utc)}
        )
        profile = profile.model_copy(update={"vital_signs": vitals, "not_found": False})

        self.cache.save(profile)
        if self.mirror_on_save and self.sync is not None:
            self.sync.schedule_put(profile)
        return profile

    def add_blood_sugar(self, reading: BloodSugarReading) -> PilgrimProfile:
        """Record a blood sugar reading on the active profile and save."""
        return self.save(add_blood_sugar_reading(self.active(), reading))

    def add_blood_pressure(self, reading: BloodPressureReading) -> PilgrimProfile:
        """Record a blood pressure reading on the active profile and save."""
        return self.save(add_blood_pressure_reading(self.active(), reading))
