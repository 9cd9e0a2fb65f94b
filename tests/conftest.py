"""Pytest configuration and fixtures for Hajj Care fixture tests."""
import json
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "profiles"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_profile() -> dict:
    """Load first profile fixture."""
    with open(FIXTURES_DIR / "profile_1.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def all_profiles() -> list[dict]:
    """Load all profile fixtures."""
    profiles = []
    for path in sorted(FIXTURES_DIR.glob("profile_*.json")):
        with open(path, encoding="utf-8") as f:
            profiles.append(json.load(f))
    return profiles
