"""Buddi wearer location API client.

Authentication exchanges the customer's long-lived credentials for a
short-lived access token, which is then sent with a custom scheme:

    Authorization: Buddi-oauthtoken: <token>

API base: https://eagle-preprod.buddi.co.uk/apiv3/api

Endpoints used:
    /v1/token              — Access token from client id/secret/refresh token
    /v1/wearers/locations  — Paginated last known location per wearer
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, AsyncIterator

import httpx
from pydantic import ValidationError

from src.buddi.base import AccessToken, AuthenticationError, Credentials, ResponseShapeError
from src.buddi.schemas import DeviceRecord, LocationsResponse, TokenResponse
from src.buddi.sync.pagination import PAGE_SIZE, Paginator
from src.config import BUDDI_API_BASE, Settings, Timeframe

logger = logging.getLogger("buddi.client")

USER_AGENT = "CloudTAK ETL/1.0"


class BuddiClient:
    """Buddi API client for one ETL run.

    The access token is requested once per run and is not refreshed; a run
    finishes well inside the token lifetime.
    """

    def __init__(
        self,
        credentials: Credentials,
        api_base: str = BUDDI_API_BASE,
        monitored_only: bool = True,
        timeframe: Timeframe = Timeframe.LAST_DAY,
        debug: bool = False,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        today: date | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            credentials:    Buddi customer credentials.
            api_base:       API root, without trailing slash.
            monitored_only: Restrict results to actively monitored wearers.
            timeframe:      How far back to request locations.
            debug:          Log every validated response body.
            timeout:        Per-request timeout in seconds.
            http_client:    Optional pre-configured httpx client (for testing).
            today:          Reference date for ``start_date`` (defaults to the UTC date).
        """
        self._credentials = credentials
        self._api_base = api_base.rstrip("/")
        self._monitored_only = monitored_only
        self._timeframe = timeframe
        self._debug = debug
        self._timeout = timeout
        self._http_client = http_client
        self._today = today

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> "BuddiClient":
        return cls(
            Credentials(
                customer_id=settings.customer_id,
                client_secret=settings.client_secret,
                refresh_token=settings.refresh_token,
            ),
            api_base=settings.buddi_api_base,
            monitored_only=settings.monitored_only,
            timeframe=settings.timeframe,
            debug=settings.debug,
            timeout=settings.http_timeout_seconds,
            http_client=http_client,
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def authenticate(self) -> AccessToken:
        """Exchange the configured credentials for an access token.

        Returns:
            AccessToken for the rest of the run.

        Raises:
            AuthenticationError: If the request fails or the body is not a
                valid token response.
        """
        logger.info("Buddi: requesting access token for customer %s", self._credentials.customer_id)

        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "X-Client-Id": self._credentials.customer_id,
            "X-Client-Secret": self._credentials.client_secret,
            "X-Refresh-Token": self._credentials.refresh_token,
        }

        try:
            body = await self._get(f"{self._api_base}/v1/token", params={}, headers=headers)
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Token request failed: {exc}") from exc
        except ValueError as exc:
            raise AuthenticationError("Token response was not valid JSON") from exc

        try:
            parsed = TokenResponse.model_validate(body)
        except ValidationError as exc:
            if self._debug:
                logger.info("Buddi: rejected token response: %s", exc)
            raise AuthenticationError(f"Unexpected token response: {exc}") from exc

        logger.debug("Buddi: token of type %s expires at %s", parsed.token_type, parsed.expires_at_utc)
        return AccessToken(
            token=parsed.access_token,
            expires_at=parsed.expires_at_utc,
            token_type=parsed.token_type,
        )

    # ------------------------------------------------------------------
    # Wearer locations
    # ------------------------------------------------------------------

    def start_date(self) -> date | None:
        """First date to request, or None when the timeframe is unbounded."""
        days = self._timeframe.days
        if days is None:
            return None
        today = self._today or datetime.now(timezone.utc).date()
        return today - timedelta(days=days)

    def location_params(self, page: int, per_page: int = PAGE_SIZE) -> dict[str, str]:
        """Build the query string for one locations page."""
        params = {"page": str(page), "per_page": str(per_page)}
        if self._monitored_only:
            params["monitored_only"] = "true"
        start = self.start_date()
        if start is not None:
            params["start_date"] = start.isoformat()
        return params

    async def fetch_page(self, token: AccessToken, page: int, per_page: int = PAGE_SIZE) -> LocationsResponse:
        """Fetch and validate one locations page.

        Raises:
            ResponseShapeError: If the body is not JSON or fails validation.
            httpx.HTTPStatusError: On non-2xx responses.
        """
        try:
            body = await self._get(
                f"{self._api_base}/v1/wearers/locations",
                params=self.location_params(page, per_page),
                headers=self._build_headers(token),
            )
        except ValueError as exc:
            raise ResponseShapeError(f"Locations page {page} was not valid JSON") from exc

        try:
            response = LocationsResponse.model_validate(body)
        except ValidationError as exc:
            if self._debug:
                logger.info("Buddi: rejected locations page %d: %s", page, body)
            raise ResponseShapeError(f"Locations page {page} failed validation: {exc}") from exc

        if self._debug:
            logger.info("Buddi: locations page %d: %s", page, body)
        logger.debug(
            "Buddi: page %d result=%s records=%s meta=%s",
            page,
            response.result,
            None if response.data is None else len(response.data),
            response.meta,
        )
        return response

    async def iter_pages(self, token: AccessToken) -> AsyncIterator[list[DeviceRecord]]:
        """Yield the records of each locations page until paging is exhausted.

        At least one page is always requested.
        """
        paginator = Paginator()
        while paginator.is_fetching:
            try:
                response = await self.fetch_page(token, paginator.page, paginator.per_page)
            except Exception:
                paginator.abort()
                logger.error(
                    "Buddi: paging %s on page %d after %d page(s)",
                    paginator.state.value, paginator.page, paginator.fetched,
                )
                raise

            paginator.advance(response)
            if response.data is not None:
                yield response.data

        logger.info(
            "Buddi: fetched %d page(s) (reported total: %s)",
            paginator.fetched,
            paginator.total_pages,
        )

    async def fetch_locations(self, token: AccessToken) -> list[DeviceRecord]:
        """Fetch every wearer record across all pages."""
        records: list[DeviceRecord] = []
        async for page in self.iter_pages(token):
            records.extend(page)
        return records

    # ------------------------------------------------------------------
    # Private HTTP helper
    # ------------------------------------------------------------------

    def _build_headers(self, token: AccessToken) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "Authorization": token.authorization,
        }

    async def _get(self, url: str, params: dict, headers: dict[str, str]) -> Any:
        """Make a GET request to the Buddi API and decode the JSON body.

        Raises:
            httpx.HTTPStatusError: On non-2xx responses.
            ValueError: If the body is not JSON.
        """
        try:
            if self._http_client:
                response = await self._http_client.get(url, params=params, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, params=params, headers=headers)

            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Buddi API error: %s %s → %d",
                exc.request.method, exc.request.url.path, exc.response.status_code,
            )
            raise

        return response.json()
