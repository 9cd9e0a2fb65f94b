"""Default profile template and related constants."""

import random
from datetime import date

from hajjcare.schemas.profile import (
    MedicalHistory,
    Medication,
    PilgrimProfile,
    VitalSigns,
)

# Prefix for locally generated profile identifiers: H-<year>-NNNN
PROFILE_ID_PREFIX = "H"

# Path segment for share links: {origin}/p/{id}
SHARE_PATH = "/p"

# Query parameter carrying the embedded profile token
SHARE_TOKEN_PARAM = "d"


def generate_profile_id(today: date | None = None) -> str:
    """Generate a new profile identifier such as ``H-2024-4821``."""
    year = (today or date.today()).year
    return f"{PROFILE_ID_PREFIX}-{year}-{random.randint(1000, 9999)}"


def default_profile(profile_id: str | None = None) -> PilgrimProfile:
    """Build the sample profile a fresh installation starts with."""
    return PilgrimProfile(
        id=profile_id or generate_profile_id(),
        full_name="أحمد بن عبدالله",
        nationality="سعودي",
        native_language="العربية",
        passport_id="123456789",
        emergency_contact_name="اسم الحملة",
        emergency_phone="0500000000",
        security_code="1234",
        medical_history=MedicalHistory(
            chronic_diseases=["السكري"],
            allergies=["البنسلين"],
            previous_surgeries=[],
        ),
        medication_history=[
            Medication(name="منظم سكر", dosage="500ملجم", frequency="مرتين يومياً"),
        ],
        vital_signs=VitalSigns(blood_type="O+"),
    )


# Fields ignored when deciding whether a profile is still the untouched template
_PRISTINE_IGNORED = {"id": True, "vital_signs": {"last_updated"}}


def is_pristine(profile: PilgrimProfile) -> bool:
    """True if ``profile`` is indistinguishable from the default template.

    Compares every field except the identifier and timestamps, so a template
    profile always matches on full name and passport number, and any edit at
    all makes it non-pristine.
    """
    template = default_profile(profile.id)
    return profile.model_dump(exclude=_PRISTINE_IGNORED) == template.model_dump(
        exclude=_PRISTINE_IGNORED
    )
