"""Languages and the summary strings shown to responders."""

from enum import Enum


class Language(str, Enum):
    """Supported interface languages."""

    AR = "ar"
    EN = "en"
    UR = "ur"
    ID = "id"


# Language names as given to the summarization model
LANGUAGE_NAMES: dict[Language, str] = {
    Language.AR: "Arabic",
    Language.EN: "English",
    Language.UR: "Urdu",
    Language.ID: "Indonesian",
}

_SUMMARY_LABELS = {
    "chronic": "Chronic",
    "meds": "Meds",
    "latest_bp": "Latest BP",
    "latest_sugar": "Latest Sugar",
    "pulse": "Pulse",
}

SUMMARY_TEXT: dict[Language, dict[str, str]] = {
    Language.AR: {
        **_SUMMARY_LABELS,
        "pulse": "النبض",
        "no_summary": "- لا يوجد ملخص طبي متاح.",
    },
    Language.EN: {
        **_SUMMARY_LABELS,
        "no_summary": "- No medical summary available.",
    },
    Language.UR: {
        **_SUMMARY_LABELS,
        "pulse": "نبض",
        "no_summary": "- کوئی طبی خلاصہ دستیاب نہیں۔",
    },
    Language.ID: {
        **_SUMMARY_LABELS,
        "pulse": "Nadi",
        "no_summary": "- Tidak ada ringkasan medis.",
    },
}