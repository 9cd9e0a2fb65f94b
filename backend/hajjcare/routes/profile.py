"""Active profile API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from hajjcare.auth import verify_security_code
from hajjcare.dependencies import (
    get_editor,
    get_link_builder,
    get_share_channel,
    get_summary_service,
)
from hajjcare.i18n import Language
from hajjcare.schemas.profile import (
    BloodPressureReading,
    BloodSugarReading,
    EmergencySummary,
    PilgrimProfile,
    SecurityCodeCheck,
    ShareDelivery,
    ShareLinks,
)
from hajjcare.services.links import ShareLinkBuilder
from hajjcare.services.profile_editor import ProfileEditor, ProfileIdChanged
from hajjcare.services.qr import render_qr_png
from hajjcare.services.sharing import WebhookShareChannel, share_link
from hajjcare.services.summary import EmergencySummaryService

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=PilgrimProfile)
async def get_active_profile(
    editor: ProfileEditor = Depends(get_editor),
) -> PilgrimProfile:
    """Get the active profile, creating the default template on first run."""
    return editor.active()


@router.put("", response_model=PilgrimProfile)
async def save_profile(
    profile: PilgrimProfile,
    editor: ProfileEditor = Depends(get_editor),
) -> PilgrimProfile:
    """Replace the active profile.

    Derived fields (age, BMI) are recomputed from their sources; any values
    sent for them are ignored.

    Raises:
        HTTPException: 409 if the profile id differs from the active id.
    """
    try:
        return editor.save(profile)
    except ProfileIdChanged as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )


@router.post(
    "/readings/blood-sugar",
    response_model=PilgrimProfile,
    status_code=status.HTTP_201_CREATED,
)
async def add_blood_sugar_reading(
    reading: BloodSugarReading,
    editor: ProfileEditor = Depends(get_editor),
) -> PilgrimProfile:
    """Record a blood sugar reading on the active profile."""
    return editor.add_blood_sugar(reading)


@router.post(
    "/readings/blood-pressure",
    response_model=PilgrimProfile,
    status_code=status.HTTP_201_CREATED,
)
async def add_blood_pressure_reading(
    reading: BloodPressureReading,
    editor: ProfileEditor = Depends(get_editor),
) -> PilgrimProfile:
    """Record a blood pressure reading on the active profile."""
    return editor.add_blood_pressure(reading)


@router.post("/verify")
async def verify_code(
    check: SecurityCodeCheck,
    editor: ProfileEditor = Depends(get_editor),
) -> dict:
    """Check a bracelet security code against the active profile."""
    return {"verified": verify_security_code(editor.active(), check.code)}


@router.get("/share", response_model=ShareLinks)
async def get_share_links(
    editor: ProfileEditor = Depends(get_editor),
    links: ShareLinkBuilder = Depends(get_link_builder),
) -> ShareLinks:
    """All link forms for the active profile."""
    return await links.build_all(editor.active())


@router.post("/share", response_model=ShareDelivery)
async def share_profile(
    editor: ProfileEditor = Depends(get_editor),
    links: ShareLinkBuilder = Depends(get_link_builder),
    channel: WebhookShareChannel | None = Depends(get_share_channel),
) -> ShareDelivery:
    """Share the smart link, falling back to manual copy."""
    profile = editor.active()
    link = await links.build_smart_link(profile)
    return await share_link(profile, link, channel)


@router.get(
    "/qr",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_qr_code(
    editor: ProfileEditor = Depends(get_editor),
    links: ShareLinkBuilder = Depends(get_link_builder),
) -> Response:
    """PNG QR code for the active profile's short link."""
    link = await links.build_qr_link(editor.active())
    return Response(
        content=render_qr_png(link),
        media_type="image/png",
        headers={"X-Share-Link": link},
    )


@router.get("/summary", response_model=EmergencySummary)
async def get_emergency_summary(
    lang: Language = Query(default=Language.EN),
    editor: ProfileEditor = Depends(get_editor),
    summaries: EmergencySummaryService = Depends(get_summary_service),
) -> EmergencySummary:
    """Short emergency brief for responders in the requested language."""
    return await summaries.summarize(editor.active(), lang)
