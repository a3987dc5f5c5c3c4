"""Submit reconciled features to the downstream layer API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.buddi.base import FeatureSink
from src.config import Settings

logger = logging.getLogger("buddi.sink")


class LayerSink(FeatureSink):
    """POST a FeatureCollection to ``{api}/api/layer/{layer}/cot``.

    The layer replaces its contents with what it receives, so the collection
    must always be the full snapshot for the run.
    """

    def __init__(
        self,
        api: str,
        layer: str,
        token: str = "",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api or not layer:
            raise ValueError("LayerSink requires both an API root and a layer id")
        self._url =f"{api.rstrip('/')}/api/layer/{layer}/cot"
        self._token = token
        self._timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> "LayerSink":
        return cls(
            api=settings.etl_api,
            layer=settings.etl_layer,
            token=settings.etl_token,
            timeout=settings.http_timeout_seconds,
            http_client=http_client,
        )

    @property
    def url(self) -> str:
        return self._url

    async def submit(self, collection: dict[str, Any]) -> None:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        logger.info("Submitting %d features to %s", len(collection["features"]), self._url)

        if self._http_client:
            response = await self._http_client.post(self._url, json=collection, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._url, json=collection, headers=headers)

        response.raise_for_status()
