"""Pydantic schemas."""

from hajjcare.schemas.profile import (
    BloodPressureReading,
    BloodSugarReading,
    EmergencySummary,
    MedicalHistory,
    Medication,
    PilgrimProfile,
    ProfileResolution,
    SecurityCodeCheck,
    ShareDelivery,
    ShareLinks,
    VitalSigns,
)

__all__ = [
    "BloodPressureReading",
    "BloodSugarReading",
    "MedicalHistory",
    "Medication",
    "PilgrimProfile",
    "VitalSigns",
    # API payloads
    "EmergencySummary",
    "ProfileResolution",
    "SecurityCodeCheck",
    "ShareDelivery",
    "ShareLinks",
]
