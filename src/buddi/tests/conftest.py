"""Shared fixtures and mock API responses for Buddi ETL tests."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.buddi.base import AccessToken, Credentials
from src.buddi.schemas import DeviceRecord
from src.config import Settings

# Fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings with test credentials, isolated from any local .env file."""
    return Settings(
        CustomerID="test_customer",
        RefreshToken="test_refresh_token",
        ClientSecret="test_client_secret",
        MonitoredOnly=True,
        Timeframe="Last Day",
        DEBUG=False,
        buddi_api_base="https://buddi.test/apiv3/api",
        etl_api="https://cloudtak.test",
        etl_layer="42",
        etl_token="etl_test_token",
        _env_file=None,
    )


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        customer_id="test_customer",
        client_secret="test_client_secret",
        refresh_token="test_refresh_token",
    )


@pytest.fixture
def access_token() -> AccessToken:
    return AccessToken(
        token="test_access_token",
        expires_at="2026-02-23T12:30:00Z",
        token_type="Buddi-oauthtoken",
    )


@pytest.fixture
def emitted_at() -> datetime:
    return datetime(2026, 2, 23, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def today() -> date:
    return date(2026, 2, 23)


# ---------------------------------------------------------------------------
# JSON fixture loaders
# ---------------------------------------------------------------------------


@pytest.fixture
def token_response_raw() -> dict:
    return json.loads((FIXTURES_DIR / "token_response.json").read_text())


@pytest.fixture
def locations_page_raw() -> dict:
    return json.loads((FIXTURES_DIR / "locations_page.json").read_text())


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


@pytest.fixture
def make_record_raw() -> Callable[..., dict]:
    """Build a raw wearer record dict; keyword overrides win."""

    def _make(wearer_id: int = 7, **overrides: Any) -> dict:
        raw = {
            "wearerId": wearer_id,
            "firstName": "Jane",
            "lastName": "Doe",
            "lastGPSTime": "10/25/2023 03:45:15PM",
            "strapStatus": "Closed",
            "onCharge": False,
            "gpsSignal": 4,
            "batteryPercentage": 50,
            "latitude": 10.0,
            "longitude": 20.0,
            "locationAddress": None,
        }
        raw.update(overrides)
        return raw

    return _make


@pytest.fixture
def make_record(make_record_raw: Callable[..., dict]) -> Callable[..., DeviceRecord]:
    def _make(wearer_id: int = 7, **overrides: Any) -> DeviceRecord:
        return DeviceRecord.model_validate(make_record_raw(wearer_id, **overrides))

    return _make


# ---------------------------------------------------------------------------
# Mock HTTP clients
# ---------------------------------------------------------------------------


def make_response(body: Any) -> MagicMock:
    """A mock httpx.Response returning ``body`` from ``.json()``."""
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status = MagicMock()
    response.json = MagicMock(return_value=body)
    return response


@pytest.fixture
def mock_httpx_client() -> Callable[..., MagicMock]:
    """Mock httpx.AsyncClient whose GETs return ``bodies`` in order."""

    def _make(*bodies: Any) -> MagicMock:
        client = MagicMock()
        client.get = AsyncMock(side_effect=[make_response(b) for b in bodies])
        client.post = AsyncMock(return_value=make_response({}))
        return client

    return _make
