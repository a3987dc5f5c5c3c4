"""ETL configuration loaded from environment variables."""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

BUDDI_API_BASE = "https://eagle-preprod.buddi.co.uk/apiv3/api"


class Timeframe(str, Enum):
    """How far back location history is requested from Buddi."""

    ALL = "All"
    LAST_DAY = "Last Day"
    LAST_7_DAYS = "Last 7 Days"

    @property
    def days(self) -> int | None:
        """Look-back window in days, or None for an unbounded request."""
        return {
            Timeframe.ALL: None,
            Timeframe.LAST_DAY: 1,
            Timeframe.LAST_7_DAYS: 7,
        }[self]


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file).

    The Buddi connection fields keep the names used by the ETL layer
    configuration (``CustomerID``, ``RefreshToken`` ...) as their aliases.
    """

    # --- Buddi connection ---
    customer_id: str = Field(
        validation_alias="CustomerID",
        description="The Customer ID provided by Buddi",
    )
    refresh_token: str = Field(
        validation_alias="RefreshToken",
        description="The Refresh Token provided by Buddi",
    )
    client_secret: str = Field(
        validation_alias="ClientSecret",
        description="The Client Secret provided by Buddi",
    )
    monitored_only: bool = Field(
        default=True,
        validation_alias="MonitoredOnly",
        description="Only return wearers that are actively monitored",
    )
    timeframe: Timeframe = Field(
        default=Timeframe.LAST_DAY,
        validation_alias="Timeframe",
        description="How far back to request location history",
    )
    debug: bool = Field(
        default=False,
        validation_alias="DEBUG",
        description="Print results in logs",
    )

    # --- Buddi API ---
    buddi_api_base: str = BUDDI_API_BASE
    http_timeout_seconds: float = 30.0

    # --- Layer sink ---
    etl_api: str
    etl_layer: str = Field(min_length=1)
    etl_token: str = ""  # server-side only, never logged

    # --- App ---
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
