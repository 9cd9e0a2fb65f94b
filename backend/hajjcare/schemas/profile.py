"""Pilgrim medical profile schemas.

A profile is always handled as a full value: the edit form produces a
complete replacement, the share token carries the complete structure, and the
remote store and local cache both hold it verbatim under the same field names.
"""

from datetime import date, datetime, timezone
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so readings compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class Medication(BaseModel):
    """A single entry in the medication history."""

    name: str
    dosage: str = ""
    frequency: str = ""


class MedicalHistory(BaseModel):
    """Free-text medical history lists, in the order the user entered them."""

    chronic_diseases: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    previous_surgeries: list[str] = Field(default_factory=list)


class BloodSugarReading(BaseModel):
    """Blood glucose measurement."""

    value: float
    unit: Literal["mg/dL", "mmol/L"] = "mg/dL"
    measured_at: UtcDatetime
    note: str | None = None


class BloodPressureReading(BaseModel):
    """Blood pressure measurement, optionally with pulse."""

    systolic: int
    diastolic: int
    measured_at: UtcDatetime
    pulse: int | None = None
    note: str | None = None


class VitalSigns(BaseModel):
    """Blood type plus two append-only reading histories.

    New readings are inserted at the front, but list order is not trusted:
    the latest reading is always picked by ``measured_at``.
    """

    blood_type: str = ""
    last_updated: UtcDatetime | None = None
    blood_sugar_readings: list[BloodSugarReading] = Field(default_factory=list)
    blood_pressure_readings: list[BloodPressureReading] = Field(default_factory=list)

    def latest_blood_sugar(self) -> BloodSugarReading | None:
        """Most recent blood sugar reading by timestamp."""
        return latest_reading(self.blood_sugar_readings)

    def latest_blood_pressure(self) -> BloodPressureReading | None:
        """Most recent blood pressure reading by timestamp."""
        return latest_reading(self.blood_pressure_readings)


def latest_reading(readings):
    """Return the reading with the newest ``measured_at``, or None if empty."""
    if not readings:
        return None
    return sorted(readings, key=lambda r: r.measured_at, reverse=True)[0]


class PilgrimProfile(BaseModel):
    """Complete medical and demographic record for one pilgrim."""

    # Identity (immutable once created)
    id: str = Field(..., min_length=1)

    # Demographics
    full_name: str = ""
    nationality: str = ""
    native_language: str = ""
    passport_id: str = ""
    date_of_birth: date | None = None
    age: int | None = None  # derived from date_of_birth at save time
    height_cm: float | None = None
    weight_kg: float | None = None
    bmi: float | None = None  # derived from height and weight at save time

    # Clinical
    medical_history: MedicalHistory = Field(default_factory=MedicalHistory)
    medication_history: list[Medication] = Field(default_factory=list)
    vital_signs: VitalSigns = Field(default_factory=VitalSigns)

    # Contacts
    emergency_contact_name: str = ""
    emergency_phone: str = ""  # campaign phone
    red_crescent_phone: str | None = None

    # Bracelet access code
    security_code: str = ""

    # Set only on the emergency-view placeholder
    not_found: bool = False


class ProfileResolution(BaseModel):
    """Response for an opened share link."""

    source: Literal["embedded", "remote", "cache", "placeholder"]
    profile: PilgrimProfile


class SecurityCodeCheck(BaseModel):
    """Request body for the security-code gate."""

    code: str


class ShareLinks(BaseModel):
    """All link forms for the active profile."""

    short_link: str
    long_link: str
    smart_link: str
    qr_link: str


class ShareDelivery(BaseModel):
    """Outcome of a share action."""

    url: str
    delivered: bool = Field(
        ..., description="False when the link must be copied manually"
    )
    channel: Literal["webhook", "manual"]


class EmergencySummary(BaseModel):
    """Short bullet summary for responders."""

    text: str
    source: Literal["ai", "fallback"]
    language: str
