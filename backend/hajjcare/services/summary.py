"""Emergency summary for responders.

Asks an LLM for a short, life-saving bullet summary of the profile in the
responder's language. When no API key is configured, the call fails, or the
answer is too short or generic to trust, a deterministic local summary is
built from chronic conditions, medications and the latest vitals instead.
"""

import logging

from openai import AsyncOpenAI, OpenAIError

from hajjcare.config import settings
from hajjcare.i18n import LANGUAGE_NAMES, SUMMARY_TEXT, Language
from hajjcare.schemas.profile import EmergencySummary, PilgrimProfile

logger = logging.getLogger(__name__)

# Maximum tokens for the generated summary
DEFAULT_MAX_OUTPUT_TOKENS = 200

# Sampling temperature for the summary
DEFAULT_TEMPERATURE = 0.1

# Seconds before an LLM call is abandoned
DEFAULT_TIMEOUT = 10.0

# Answers shorter than this are not trusted
MIN_SUMMARY_CHARS = 25

# Placeholder answers models return when they have nothing useful to say
_GENERIC_ANSWERS = frozenset({
    "summary unavailable.",
    "error generating ai summary.",
    "no information available.",
    "n/a",
    "none",
})


def build_prompt(profile: PilgrimProfile, language: Language) -> str:
    """Prompt text for the summarization model."""
    history = profile.medical_history
    meds = ", ".join(
        f"{m.name} ({m.dosage})" if m.dosage else m.name for m in profile.medication_history
    )
    return (
        "You are an emergency medical assistant for Hajj.\n"
        "Summarize the following medical profile into a short, critical emergency brief "
        f"in {LANGUAGE_NAMES[language]}, as 3-5 bullet points starting with '- '.\n"
        "Focus on life-saving information: allergies, chronic diseases and current medications.\n"
        "\n"
        "Profile:\n"
        f"Name: {profile.full_name}\n"
        f"Blood type: {profile.vital_signs.blood_type}\n"
        f"Conditions: {', '.join(history.chronic_diseases)}\n"
        f"Allergies: {', '.join(history.allergies)}\n"
        f"Meds: {meds}\n"
        "\n"
        "Output strictly the summary text."
    )


def fallback_summary(profile: PilgrimProfile, language: Language) -> str:
    """Deterministic bullet summary built without any external call."""
    text = SUMMARY_TEXT[language]
    lines = []

    chronic = [c for c in profile.medical_history.chronic_diseases if c.strip()]
    if chronic:
        lines.append(f"- {text['chronic']}: {', '.join(chronic)}")

    meds = [
        " ".join(part for part in (m.name, m.dosage) if part)
        for m in profile.medication_history
        if m.name.strip()
    ]
    if meds:
        lines.append(f"- {text['meds']}: {', '.join(meds)}")

    bp = profile.vital_signs.latest_blood_pressure()
    if bp is not None:
        line = f"- {text['latest_bp']}: {bp.systolic}/{bp.diastolic}"
        if bp.pulse is not None:
            line += f" ({text['pulse']} {bp.pulse})"
        lines.append(line)

    sugar = profile.vital_signs.latest_blood_sugar()
    if sugar is not None:
        lines.append(f"- {text['latest_sugar']}: {sugar.value:g} {sugar.unit}")

    if not lines:
        return text["no_summary"]
    return "\n".join(lines)


def is_trustworthy(answer: str | None) -> bool:
    """Reject empty, very short, or boilerplate model answers."""
    if not answer:
        return False
    stripped = answer.strip()
    if len(stripped) < MIN_SUMMARY_CHARS:
        return False
    return stripped.lower() not in _GENERIC_ANSWERS


class EmergencySummaryService:
    """Produces emergency summaries with a local fallback."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str | None = None,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ):
        """Initialize the service.

        Args:
            client: Optional pre-configured AsyncOpenAI client (for testing).
                If not provided, one is created from settings when an API key
                is configured; otherwise only the fallback is used.
            model: Model to use. Defaults to ``settings.summary_model``.
            max_output_tokens: Maximum tokens in the generated summary.
        """
        if client is None and settings.openai_api_key:
            client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=DEFAULT_TIMEOUT)
        self._client = client
        self._model = model or settings.summary_model
        self._max_output_tokens = max_output_tokens

    async def summarize(
        self, profile: PilgrimProfile, language: Language = Language.EN
    ) -> EmergencySummary:
        """Summarize ``profile`` for responders in ``language``."""
        answer = await self._ask_model(profile, language)
        if is_trustworthy(answer):
            return EmergencySummary(text=answer.strip(), source="ai", language=language.value)

        return EmergencySummary(
            text=fallback_summary(profile, language),
            source="fallback",
            language=language.value,
        )

    async def _ask_model(self, profile: PilgrimProfile, language: Language) -> str | None:
        if self._client is None:
            return None

        try:
            response = await self._client.responses.create(
                model=self._model,
                input=build_prompt(profile, language),
                max_output_tokens=self._max_output_tokens,
                temperature=DEFAULT_TEMPERATURE,
            )
        except OpenAIError as e:
            logger.warning("Emergency summary generation failed for %s: %s", profile.id, e)
            return None

        answer = getattr(response, "output_text", None)
        if not is_trustworthy(answer):
            logger.info("Discarding untrustworthy summary for %s", profile.id)
        return answer

    async def close(self) -> None:
        """Close the OpenAI client connection."""
        if self._client is not None:
            await self._client.close()
