"""One Buddi ingestion run: authenticate, page, reconcile, submit.

Steps, strictly in order:
1. Exchange credentials for an access token
2. Page through wearer locations
3. Reduce records to the latest feature per wearer
4. Submit the FeatureCollection once (empty collections included)

Any failure aborts the run before submission; the scheduler retries on its
next tick.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import Any, AsyncGenerator

import httpx

from src.buddi.base import FeatureSink, feature_collection
from src.buddi.client import BuddiClient
from src.buddi.reconciler import Reconciler
from src.buddi.sink import LayerSink
from src.config import Settings

logger = logging.getLogger("buddi.task")

# Settings published in the task's input schema.
_INPUT_FIELDS = ("customer_id", "refresh_token", "client_secret", "monitored_only", "timeframe", "debug")


class SchemaType(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class BuddiTask:
    """Scheduled, incoming-only ETL task for Buddi wearer locations."""

    name = "etl-buddi"
    flow = ("incoming",)
    invocation = ("schedule",)

    def __init__(
        self,
        settings: Settings,
        sink: FeatureSink | None = None,
        http_client: httpx.AsyncClient | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the task.

        Args:
            settings:    Loaded configuration.
            sink:        Destination for the collection (defaults to LayerSink).
            http_client: Optional shared httpx client (for testing).
            now:         Fixed emission time (for testing).
        """
        self.settings = settings
        self._sink = sink
        self._http_client = http_client
        self._now = now

    @staticmethod
    def schema(kind: SchemaType = SchemaType.INPUT) -> dict[str, Any]:
        """JSON schema of the task's configuration or output."""
        if kind is SchemaType.OUTPUT:
            return {"type": "object", "properties": {}}

        full = Settings.model_json_schema(by_alias=True)
        aliases = {
            Settings.model_fields[name].validation_alias for name in _INPUT_FIELDS
        }
        return {
            "type": "object",
            "title": "BuddiInput",
            "properties": {
                key: value for key, value in full["properties"].items() if key in aliases
            },
            "required": [key for key in full.get("required", []) if key in aliases],
            **({"$defs": full["$defs"]} if "$defs" in full else {}),
        }

    async def control(self) -> dict[str, Any]:
        """Run one ingestion pass and return the submitted collection."""
        async with self._client() as http:
            client = BuddiClient.from_settings(self.settings, http_client=http)
            token = await client.authenticate()

            reconciler = Reconciler(emitted_at=self._now)
            async for records in client.iter_pages(token):
                reconciler.consume(records)

            collection = feature_collection(reconciler.features())
            sink = self._sink or LayerSink.from_settings(self.settings, http_client=http)
            await sink.submit(collection)

        logger.info("%s: submitted %d features", self.name, len(collection["features"]))
        return collection

    @asynccontextmanager
    async def _client(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.settings.http_timeout_seconds) as client:
            yield client
