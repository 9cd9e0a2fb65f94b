"""Integration tests for API endpoints.

Tests the full API request/response cycle through FastAPI, with every
service wired to a throwaway SQLite store and a temp cache slot.
"""

import base64
from urllib.parse import urlsplit

import pytest

from hajjcare.constants import is_pristine
from hajjcare.schemas.profile import PilgrimProfile
from hajjcare.services.codec import encode

TEST_ORIGIN = "https://care.example"
SAMPLE_CODE = {"X-Security-Code": "4821"}


def _path_and_query(link: str) -> str:
    parts = urlsplit(link)
    return f"{parts.path}?{parts.query}" if parts.query else parts.path


# =============================================================================
# Shared Link Endpoint
# =============================================================================


class TestOpenSharedLink:
    """Tests for GET /p/{profile_id}."""

    @pytest.mark.asyncio
    async def test_stored_profile_resolves(self, client, store, sample_profile):
        """A short link resolves from the remote store."""
        await store.put(sample_profile.id, sample_profile)

        response = await client.get("/p/H-2024-1111", headers=SAMPLE_CODE)

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "remote"
        assert data["profile"]["full_name"] == "Test User"

    @pytest.mark.asyncio
    async def test_long_link_resolves_without_store_record(self, client, sample_profile):
        """The d parameter carries the whole profile."""
        response = await client.get(
            "/p/H-2024-1111",
            params={"d": encode(sample_profile)},
            headers=SAMPLE_CODE,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "embedded"
        assert PilgrimProfile.model_validate(data["profile"]) == sample_profile

    @pytest.mark.asyncio
    async def test_path_id_wins_over_embedded_id(self, client, profile_factory):
        embedded = profile_factory("H-2024-9999")

        response = await client.get(
            "/p/H-2024-1111",
            params={"d": encode(embedded)},
            headers=SAMPLE_CODE,
        )

        assert response.json()["profile"]["id"] == "H-2024-1111"

    @pytest.mark.asyncio
    async def test_unknown_id_returns_emergency_view(self, client):
        """No source knows the id: 200 with a placeholder, no code required."""
        response = await client.get("/p/UNKNOWN-ID")

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "placeholder"
        assert data["profile"]["id"] == "UNKNOWN-ID"
        assert data["profile"]["not_found"] is True
        assert data["profile"]["medication_history"] == []

    @pytest.mark.asyncio
    async def test_unparseable_token_returns_emergency_view(self, client):
        """A crafted d parameter never turns into a server error."""
        payload = '{"id": "H-2024-1111", "age": ' + "1" * 5000 + "}"
        token = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")

        response = await client.get("/p/H-2024-7777", params={"d": token})

        assert response.status_code == 200
        assert response.json()["source"] == "placeholder"

    @pytest.mark.asyncio
    async def test_cached_profile_resolves(self, client, cache, profile_factory):
        cache.save(profile_factory("H-2024-2222"))

        response = await client.get("/p/H-2024-2222", headers=SAMPLE_CODE)

        assert response.json()["source"] == "cache"

    @pytest.mark.asyncio
    async def test_missing_code_returns_401(self, client, store, sample_profile):
        await store.put(sample_profile.id, sample_profile)

        response = await client.get("/p/H-2024-1111")

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing security code"

    @pytest.mark.asyncio
    async def test_wrong_code_returns_401(self, client, store, sample_profile):
        await store.put(sample_profile.id, sample_profile)

        response = await client.get("/p/H-2024-1111", headers={"X-Security-Code": "0000"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid security code"


# =============================================================================
# Active Profile Endpoints
# =============================================================================


class TestActiveProfile:
    """Tests for GET/PUT /api/profile."""

    @pytest.mark.asyncio
    async def test_first_run_returns_template(self, client):
        response = await client.get("/api/profile")

        assert response.status_code == 200
        profile = PilgrimProfile.model_validate(response.json())
        assert is_pristine(profile)

    @pytest.mark.asyncio
    async def test_save_recomputes_derived_fields(self, client):
        active = (await client.get("/api/profile")).json()
        active.update({"full_name": "Aisyah Putri", "height_cm": 150, "weight_kg": 45, "bmi": 1})

        response = await client.put("/api/profile", json=active)

        assert response.status_code == 200
        data = response.json()
        assert data["full_name"] == "Aisyah Putri"
        assert data["bmi"] == 20.0
        assert data["vital_signs"]["last_updated"] is not None

    @pytest.mark.asyncio
    async def test_save_persists_across_requests(self, client):
        active = (await client.get("/api/profile")).json()
        active["nationality"] = "Indonesian"
        await client.put("/api/profile", json=active)

        response = await client.get("/api/profile")

        assert response.json()["nationality"] == "Indonesian"

    @pytest.mark.asyncio
    async def test_save_rejects_id_change(self, client):
        active = (await client.get("/api/profile")).json()
        active["id"] = "H-1999-0000"

        response = await client.put("/api/profile", json=active)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_save_rejects_invalid_body(self, client):
        response = await client.put("/api/profile", json={"full_name": "no id"})
        assert response.status_code == 422


class TestReadings:
    """Tests for POST /api/profile/readings/*."""

    @pytest.mark.asyncio
    async def test_add_blood_pressure(self, client):
        response = await client.post(
            "/api/profile/readings/blood-pressure",
            json={
                "systolic": 135,
                "diastolic": 85,
                "pulse": 88,
                "measured_at": "2024-06-12T09:30:00Z",
            },
        )

        assert response.status_code == 201
        readings = response.json()["vital_signs"]["blood_pressure_readings"]
        assert readings[0]["systolic"] == 135

    @pytest.mark.asyncio
    async def test_add_blood_sugar(self, client):
        response = await client.post(
            "/api/profile/readings/blood-sugar",
            json={"value": 7.2, "unit": "mmol/L", "measured_at": "2024-06-12T06:00:00Z"},
        )

        assert response.status_code == 201
        readings = response.json()["vital_signs"]["blood_sugar_readings"]
        assert readings[0]["unit"] == "mmol/L"

    @pytest.mark.asyncio
    async def test_invalid_unit_rejected(self, client):
        response = await client.post(
            "/api/profile/readings/blood-sugar",
            json={"value": 7.2, "unit": "g/L", "measured_at": "2024-06-12T06:00:00Z"},
        )
        assert response.status_code == 422


class TestVerify:
    """Tests for POST /api/profile/verify."""

    @pytest.mark.asyncio
    async def test_template_code(self, client):
        response = await client.post("/api/profile/verify", json={"code": "1234"})
        assert response.json() == {"verified": True}

    @pytest.mark.asyncio
    async def test_wrong_code(self, client):
        response = await client.post("/api/profile/verify", json={"code": "9999"})
        assert response.json() == {"verified": False}


# =============================================================================
# Sharing Endpoints
# =============================================================================


class TestSharing:
    """Tests for share links, share delivery and QR."""

    @pytest.mark.asyncio
    async def test_template_shares_long_links(self, client, store):
        """An untouched template is never synced, so the smart link is long."""
        response = await client.get("/api/profile/share")

        assert response.status_code == 200
        links = response.json()
        assert links["short_link"].startswith(f"{TEST_ORIGIN}/p/H-")
        assert "?d=" in links["long_link"]
        assert links["smart_link"] == links["long_link"]

    @pytest.mark.asyncio
    async def test_edited_profile_shares_short_link(self, client, store, cache, sample_profile):
        cache.save(sample_profile)

        links = (await client.get("/api/profile/share")).json()

        assert links["smart_link"] == f"{TEST_ORIGIN}/p/H-2024-1111"
        assert links["qr_link"] == links["smart_link"]
        assert await store.get("H-2024-1111") == sample_profile

    @pytest.mark.asyncio
    async def test_shared_link_round_trip(self, client, cache, sample_profile):
        """A long link from the share endpoint opens to the same profile."""
        cache.save(sample_profile)
        links = (await client.get("/api/profile/share")).json()

        response = await client.get(_path_and_query(links["long_link"]), headers=SAMPLE_CODE)

        data = response.json()
        assert data["source"] == "embedded"
        assert PilgrimProfile.model_validate(data["profile"]) == sample_profile

    @pytest.mark.asyncio
    async def test_share_without_channel_is_manual(self, client, cache, sample_profile):
        cache.save(sample_profile)

        response = await client.post("/api/profile/share")

        assert response.status_code == 200
        assert response.json() == {
            "url": f"{TEST_ORIGIN}/p/H-2024-1111",
            "delivered": False,
            "channel": "manual",
        }

    @pytest.mark.asyncio
    async def test_qr_png(self, client, cache, sample_profile):
        cache.save(sample_profile)

        response = await client.get("/api/profile/qr")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["x-share-link"] == f"{TEST_ORIGIN}/p/H-2024-1111"
        assert response.content.startswith(b"\x89PNG")


class TestSummary:
    """Tests for GET /api/profile/summary."""

    @pytest.mark.asyncio
    async def test_fallback_summary(self, client, cache, sample_profile):
        cache.save(sample_profile)

        response = await client.get("/api/profile/summary", params={"lang": "en"})

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "fallback"
        assert data["language"] == "en"
        assert "- Latest BP: 142/88 (Pulse 78)" in data["text"]

    @pytest.mark.asyncio
    async def test_summary_with_naive_reading_timestamp(self, client, cache, sample_profile):
        """A reading posted without a UTC offset is compared as UTC."""
        cache.save(sample_profile)
        posted = await client.post(
            "/api/profile/readings/blood-pressure",
            json={
                "systolic": 150,
                "diastolic": 95,
                "pulse": 70,
                "measured_at": "2024-06-11T08:00:00",
            },
        )
        assert posted.status_code == 201

        response = await client.get("/api/profile/summary", params={"lang": "en"})

        assert response.status_code == 200
        assert "- Latest BP: 150/95 (Pulse 70)" in response.json()["text"]

    @pytest.mark.asyncio
    async def test_unsupported_language_rejected(self, client):
        response = await client.get("/api/profile/summary", params={"lang": "fr"})
        assert response.status_code == 422
