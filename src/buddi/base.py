"""Base classes and canonical data models for the Buddi location ETL.

A run authenticates against the Buddi API, pages through wearer locations,
and reduces them to one ``TrackedFeature`` per wearer.  These types are the
single source of truth shared by the client, the reconciler and the sink.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


#: Fixed CoT symbology for every wearer: friendly ground unit, GPS derived.
COT_TYPE = "a-f-G"
COT_HOW = "m-g"

#: How long after emission a wearer position is considered outdated.
STALE_AFTER = timedelta(minutes=2)

FEATURE_ID_PREFIX = "buddi-"


def format_utc(value: datetime) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SSZ``.

    Naive datetimes are assumed to already be UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class BuddiError(Exception):
    """Base class for every fatal error raised during a run."""


class AuthenticationError(BuddiError):
    """The token endpoint was unreachable or returned an unusable body."""


class ResponseShapeError(BuddiError):
    """A locations page could not be decoded or failed schema validation."""


class TimestampParseError(BuddiError, ValueError):
    """A wearer's GPS timestamp did not match its expected format."""


# ---------------------------------------------------------------------------
# Credentials / Auth tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Credentials:
    """Long-lived Buddi credentials supplied by configuration.

    Attributes:
        customer_id:   Customer ID issued by Buddi (sent as ``X-Client-Id``).
        client_secret: Client secret issued by Buddi.
        refresh_token: Refresh token exchanged for a short-lived access token.
    """

    customer_id: str
    client_secret: str
    refresh_token: str

    def __repr__(self) -> str:
        return f"Credentials(customer_id={self.customer_id!r}, client_secret=***, refresh_token=***)"


@dataclass
class AccessToken:
    """Short-lived access token returned by ``/v1/token``.

    Only valid for the current run; never persisted.

    Attributes:
        token:      Opaque access token.
        expires_at: Expiry as reported by Buddi (UTC string, not interpreted).
        token_type: Token type reported by Buddi.
    """

    token: str
    expires_at: str
    token_type: str

    @property
    def authorization(self) -> str:
        """Value of the ``Authorization`` header for API calls."""
        return f"Buddi-oauthtoken: {self.token}"


# ---------------------------------------------------------------------------
# Output feature
# ---------------------------------------------------------------------------


@dataclass
class TrackedFeature:
    """One wearer's latest position, ready for submission as GeoJSON.

    Attributes:
        id:          Stable key ``buddi-<wearerId>``.
        callsign:    Display name ``Buddi: <first> <last>``.
        start:       Observation instant (UTC).
        time:        Emission (processing) instant (UTC).
        latitude:    WGS84 latitude.
        longitude:   WGS84 longitude.
        battery:     String-encoded battery percentage.
        metadata:    Full raw wearer record as received.
        type:        CoT event type.
        how:         CoT how tag.
    """

    id: str
    callsign: str
    start: datetime
    time: datetime
    latitude: float
    longitude: float
    battery: str = "0"
    metadata: dict[str, Any] = field(default_factory=dict)
    type: str = COT_TYPE
    how: str = COT_HOW

    @property
    def stale(self) -> datetime:
        return self.time + STALE_AFTER

    def to_geojson(self) -> dict[str, Any]:
        """Serialize to a GeoJSON Feature with CoT properties."""
        return {
            "id": self.id,
            "type": "Feature",
            "properties": {
                "type": self.type,
                "how": self.how,
                "callsign": self.callsign,
                "time": format_utc(self.time),
                "start": format_utc(self.start),
                "stale": format_utc(self.stale),
                "status": {"battery": self.battery},
                "metadata": self.metadata,
            },
            "geometry": {
                "type": "Point",
                "coordinates": [self.longitude, self.latitude],
            },
        }


def feature_collection(features: list[TrackedFeature]) -> dict[str, Any]:
    """Wrap features in a GeoJSON FeatureCollection."""
    return {
        "type": "FeatureCollection",
        "features": [f.to_geojson() for f in features],
    }


# ---------------------------------------------------------------------------
# Abstract sink
# ---------------------------------------------------------------------------


class FeatureSink(ABC):
    """Downstream consumer of the reconciled feature collection.

    ``submit`` is called exactly once per run, after every page has been
    processed, including when the collection is empty.
    """

    @abstractmethod
    async def submit(self, collection: dict[str, Any]) -> None:
        """Deliver a GeoJSON FeatureCollection.

        Args:
            collection: ``{"type": "FeatureCollection", "features": [...]}``.
        """
