"""Tests for the HTTP layer sink."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.buddi.sink import LayerSink
from src.config import Settings

EMPTY = {"type": "FeatureCollection", "features": []}


class TestLayerSink:
    def test_url_from_settings(self, settings: Settings) -> None:
        sink = LayerSink.from_settings(settings)
        assert sink.url == "https://cloudtak.test/api/layer/42/cot"

    def test_trailing_slash_trimmed(self) -> None:
        assert LayerSink("https://cloudtak.test/", "7").url == "https://cloudtak.test/api/layer/7/cot"

    @pytest.mark.parametrize(("api", "layer"), [("https://cloudtak.test", ""), ("", "7")])
    def test_missing_target_rejected(self, api: str, layer: str) -> None:
        with pytest.raises(ValueError):
            LayerSink(api, layer)

    @pytest.mark.asyncio
    async def test_posts_collection_with_bearer(self, settings: Settings, mock_httpx_client) -> None:
        http = mock_httpx_client()
        await LayerSink.from_settings(settings, http_client=http).submit(EMPTY)

        http.post.assert_called_once()
        assert http.post.call_args.kwargs["json"] == EMPTY
        assert http.post.call_args.kwargs["headers"]["Authorization"] == "Bearer etl_test_token"

    @pytest.mark.asyncio
    async def test_no_token_no_authorization(self, mock_httpx_client) -> None:
        http = mock_httpx_client()
        await LayerSink("https://cloudtak.test", "7", http_client=http).submit(EMPTY)
        assert "Authorization" not in http.post.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_error_status_raises(self) -> None:
        request = httpx.Request("POST", "https://cloudtak.test/api/layer/7/cot")
        response = MagicMock()
        response.raise_for_status = MagicMock(
            side_effect=httpx.HTTPStatusError(
                "500", request=request, response=httpx.Response(500, request=request)
            )
        )
        http = MagicMock()
        http.post = AsyncMock(return_value=response)

        with pytest.raises(httpx.HTTPStatusError):
            await LayerSink("https://cloudtak.test", "7", http_client=http).submit(EMPTY)
