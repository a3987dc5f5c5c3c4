"""Buddi wearer location ETL.

Polls the Buddi API for wearer locations and forwards one point feature per
wearer to the downstream layer.

Subpackages:
    sync/  — Pagination state machine and per-wearer deduplication

Core modules:
    base        — Credentials, tokens, TrackedFeature, errors, FeatureSink ABC
    schemas     — Pydantic models for Buddi responses
    timestamps  — GPS timestamp variants and UTC normalization
    client      — Token exchange and paginated location fetch
    reconciler  — Latest-feature-per-wearer reduction
    sink        — HTTP layer submission
    task        — One end-to-end run
"""

from src.buddi.base import (
    AccessToken,
    AuthenticationError,
    BuddiError,
    Credentials,
    FeatureSink,
    ResponseShapeError,
    TimestampParseError,
    TrackedFeature,
)
from src.buddi.client import BuddiClient
from src.buddi.task import BuddiTask

__all__ = [
    "AccessToken",
    "AuthenticationError",
    "BuddiClient",
    "BuddiError",
    "BuddiTask",
    "Credentials",
    "FeatureSink",
    "ResponseShapeError",
    "TimestampParseError",
    "TrackedFeature",
]
