"""Pydantic models for Buddi API responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator


class BuddiBase(BaseModel):
    """Base model with shared config for all Buddi response schemas."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="allow",
    )


# ---------- Token ----------

class TokenResponse(BuddiBase):
    # the token is sent back verbatim
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=False, extra="allow")

    access_token: str
    expires_at_utc: str
    token_type: str


# ---------- Wearer locations ----------

class DeviceRecord(BuddiBase):
    """A wearer's last known location.  Unknown vendor fields are kept."""

    wearer_id: int = Field(alias="wearerId")
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    last_gps_time: str | None = Field(default=None, alias="lastGPSTime")
    last_gps_time_utc: str | None = Field(default=None, alias="lastGPSTimeInUTC")
    strap_status: Any = Field(default=None, alias="strapStatus")
    on_charge: Any = Field(default=None, alias="onCharge")
    gps_signal: Any = Field(default=None, alias="gpsSignal")
    battery_percentage: float | None = Field(default=None, alias="batteryPercentage")
    latitude: float | None = None
    longitude: float | None = None
    location_address: str | None = Field(default=None, alias="locationAddress")

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_raw(cls, data: Any, handler: Any) -> "DeviceRecord":
        record = handler(data)
        if isinstance(data, dict):
            record._raw = dict(data)
        return record

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def raw(self) -> dict[str, Any]:
        """Return the record keyed as Buddi sent it, extra fields included."""
        return dict(self._raw) or self.model_dump(by_alias=True, mode="json")


class PageMeta(BuddiBase):
    total: int | None = None
    page: int | None = None
    per_page: int | None = None
    pages: int | None = None


class LocationsResponse(BuddiBase):
    result: int | str
    data: list[DeviceRecord] | None = None
    meta: PageMeta | None = None
    error: str | None = None
    message: str | None = None
