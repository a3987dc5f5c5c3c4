"""GPS timestamp normalization for Buddi wearer records.

Buddi has reported the last GPS fix in two shapes over its API versions:

    lastGPSTime       ``10/25/2023 03:45:15PM``  (older, no zone)
    lastGPSTimeInUTC  ``2023-10-25T15:45:15Z``   (later, ISO-8601)

Both are resolved into a ``GpsTimestamp`` when a record is read, and every
caller goes through ``normalize()`` to get an aware UTC datetime.

The legacy string carries no zone.  Its digits are read as a UTC wall-clock
reading; they are never shifted by the host's local timezone, so a run
produces the same instants wherever it is executed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone

from src.buddi.base import TimestampParseError
from src.buddi.schemas import DeviceRecord

LEGACY_FORMAT = "%m/%d/%Y %I:%M:%S%p"


class GpsTimestamp(ABC):
    """A raw GPS time string tagged with the rule used to read it."""

    raw: str

    @abstractmethod
    def normalize(self) -> datetime:
        """Return the observation instant as an aware UTC datetime.

        Raises:
            TimestampParseError: If ``raw`` does not match the format.
        """

    @staticmethod
    def from_record(record: DeviceRecord) -> GpsTimestamp | None:
        """Pick the timestamp field present on a record.

        ``lastGPSTimeInUTC`` wins when both are present.  Returns None when
        neither is set.
        """
        if record.last_gps_time_utc:
            return UtcIsoTime(record.last_gps_time_utc)
        if record.last_gps_time:
            return LegacyLocalTime(record.last_gps_time)
        return None


@dataclass(frozen=True)
class LegacyLocalTime(GpsTimestamp):
    """``MM/dd/yyyy hh:mm:ssAM|PM``, digits taken as UTC."""

    raw: str

    def normalize(self) -> datetime:
        try:
            parsed = datetime.strptime(self.raw.strip(), LEGACY_FORMAT)
        except ValueError as exc:
            raise TimestampParseError(
                f"lastGPSTime {self.raw!r} does not match MM/dd/yyyy hh:mm:ssAM|PM"
            ) from exc
        return parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class UtcIsoTime(GpsTimestamp):
    """ISO-8601 string; naive values are UTC."""

    raw: str

    def normalize(self) -> datetime:
        try:
            parsed = datetime.fromisoformat(self.raw.strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise TimestampParseError(
                f"lastGPSTimeInUTC {self.raw!r} is not an ISO-8601 timestamp"
            ) from exc
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
