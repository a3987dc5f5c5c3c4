"""Per-wearer deduplication for a single ETL run.

Buddi can return the same wearer on more than one page (the result set
shifts while we page through it).  Only the freshest fix per wearer is kept.

Dedup key:
    feature id ``buddi-<wearerId>`` — stable across runs, so the downstream
    layer updates the same marker instead of adding a new one.
"""

from __future__ import annotations

import logging

from src.buddi.base import FEATURE_ID_PREFIX, TrackedFeature

logger = logging.getLogger("buddi.sync.dedup")


def feature_key(wearer_id: int) -> str:
    """Generate the feature id for a wearer.

    Args:
        wearer_id: Buddi ``wearerId``.

    Returns:
        ``buddi-<wearerId>``.
    """
    return f"{FEATURE_ID_PREFIX}{wearer_id}"


class LatestFeatureMap:
    """In-process map of feature id to the most recent feature.

    Built fresh for every run and never shared.  A feature replaces the
    stored one only when its ``start`` is strictly later, so on an exact tie
    the first feature seen is kept.

    Usage::

        latest = LatestFeatureMap()
        for feature in candidates:
            latest.offer(feature)
        features = latest.features()
    """

    def __init__(self) -> None:
        self._features: dict[str, TrackedFeature] = {}

    def offer(self, feature: TrackedFeature) -> bool:
        """Store ``feature`` if it is newer than what is held for its id.

        Args:
            feature: Candidate feature.

        Returns:
            True if the feature was stored.
        """
        current = self._features.get(feature.id)
        if current is not None and not feature.start > current.start:
            logger.debug(
                "Keeping %s at %s over observation at %s",
                feature.id, current.start.isoformat(), feature.start.isoformat(),
            )
            return False
        self._features[feature.id] = feature
        return True

    def features(self) -> list[TrackedFeature]:
        """Return the surviving features."""
        return list(self._features.values())

    def __len__(self) -> int:
        return len(self._features)
