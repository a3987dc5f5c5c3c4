"""Reduce Buddi wearer records to one tracked feature per wearer.

Records are consumed in the order they were received.  A record is dropped
when it has no GPS time or no position; otherwise it is turned into a
``TrackedFeature`` and offered to the run's ``LatestFeatureMap``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from src.buddi.base import TrackedFeature
from src.buddi.schemas import DeviceRecord
from src.buddi.sync.dedup import LatestFeatureMap, feature_key
from src.buddi.timestamps import GpsTimestamp

logger = logging.getLogger("buddi.reconciler")


def battery_status(value: float | None) -> str:
    """Encode a battery percentage for the feature status block.

    Missing (or zero) values become ``"0"``; whole numbers drop the decimal.
    """
    if not value:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def callsign(record: DeviceRecord) -> str:
    name = " ".join(part for part in (record.first_name, record.last_name) if part)
    return f"Buddi: {name}"


def build_feature(record: DeviceRecord, emitted_at: datetime) -> TrackedFeature | None:
    """Build the feature for one wearer record.

    This is a pure function — no I/O, no side effects.

    Args:
        record:     Validated wearer record.
        emitted_at: Processing time shared by the whole run (UTC).

    Returns:
        TrackedFeature, or None when the record lacks a GPS time or position.

    Raises:
        TimestampParseError: If the GPS time is present but malformed.
    """
    timestamp = GpsTimestamp.from_record(record)
    if timestamp is None or not record.has_position:
        return None

    return TrackedFeature(
        id=feature_key(record.wearer_id),
        callsign=callsign(record),
        start=timestamp.normalize(),
        time=emitted_at,
        latitude=record.latitude,
        longitude=record.longitude,
        battery=battery_status(record.battery_percentage),
        metadata=record.raw(),
    )


class Reconciler:
    """Accumulates pages of records into the latest feature per wearer.

    Usage::

        reconciler = Reconciler()
        async for page in client.iter_pages(token):
            reconciler.consume(page)
        features = reconciler.features()
    """

    def __init__(self, emitted_at: datetime | None = None) -> None:
        self.emitted_at = emitted_at or datetime.now(timezone.utc)
        self._latest = LatestFeatureMap()
        self.considered = 0
        self.skipped = 0

    def consume(self, records: Iterable[DeviceRecord]) -> None:
        for record in records:
            self.considered += 1
            feature = build_feature(record, self.emitted_at)
            if feature is None:
                self.skipped += 1
                logger.debug("Skipping wearer %s: no GPS time or position", record.wearer_id)
                continue
            self._latest.offer(feature)

    def features(self) -> list[TrackedFeature]:
        logger.info(
            "Reconciled %d records into %d features (%d skipped)",
            self.considered, len(self._latest), self.skipped,
        )
        return self._latest.features()


def reconcile(
    records: Iterable[DeviceRecord], emitted_at: datetime | None = None
) -> list[TrackedFeature]:
    """Reduce a record stream to the latest feature per wearer."""
    reconciler = Reconciler(emitted_at)
    reconciler.consume(records)
    return reconciler.features()
