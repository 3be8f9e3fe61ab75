"""Google Ads connector (keyword performance via the REST search endpoint)."""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from demandsynth.connectors.base import BaseConnector
from demandsynth.connectors.config import ConnectorConfig, ConnectorType
from demandsynth.connectors.exceptions import AuthenticationError
from demandsynth.connectors.registry import get_registry
from demandsynth.signals.schema import AdsPerformanceRow

logger = logging.getLogger(__name__)

# Overridable per connection with connection_params["api_version"]
API_VERSION = "v22"
API_HOST = "https://googleads.googleapis.com"
TOKEN_URL = "https://oauth2.googleapis.com/token"

# Required credential keys for Google Ads OAuth
REQUIRED_CREDENTIALS = ("developer_token", "client_id", "client_secret", "refresh_token")

# HTTP timeouts (in seconds)
API_TIMEOUT = httpx.Timeout(60.0, connect=10.0)
TOKEN_TIMEOUT = httpx.Timeout(10.0, connect=5.0)

MICROS_PER_UNIT = 1_000_000

KEYWORD_PERFORMANCE_QUERY = """
SELECT
  campaign.id,
  campaign.name,
  ad_group.id,
  ad_group.name,
  ad_group_criterion.keyword.text,
  metrics.impressions,
  metrics.clicks,
  metrics.conversions,
  metrics.cost_micros,
  segments.date
FROM keyword_view
WHERE segments.date BETWEEN '{start}' AND '{end}'
"""


def _normalize_customer_id(customer_id: str) -> str:
    """Strip dashes from a XXX-XXX-XXXX customer id."""
    return customer_id.replace("-", "")


class GoogleAdsConnector(BaseConnector):
    """Connector for Google Ads keyword performance.

    The access token is exchanged from the refresh token on authenticate()
    and exchanged again when a search request comes back 401.

    Required credentials:
        - developer_token: Google Ads API developer token
        - client_id: OAuth client ID
        - client_secret: OAuth client secret
        - refresh_token: OAuth refresh token
        - login_customer_id: Manager account id (optional)

    Required connection_params:
        - customer_id: Google Ads customer id (XXX-XXX-XXXX or digits)

    Optional connection_params:
        - api_version: Google Ads API version (defaults to API_VERSION)

    Example:
        config = ConnectorConfig(
            connector_type=ConnectorType.GOOGLE_ADS,
            name="Google Ads",
            credentials={
                "developer_token": "dev-token",
                "client_id": "client-id.apps.googleusercontent.com",
                "client_secret": "secret",
                "refresh_token": "1//0x...",
            },
            connection_params={"customer_id": "123-456-7890", "api_version": "v22"},
        )
    """

    connector_type = ConnectorType.GOOGLE_ADS

    # Maximum number of token refresh retries per request
    MAX_TOKEN_REFRESH_RETRIES = 1

    def __init__(self, config: ConnectorConfig):
        super().__init__(config)
        params = config.connection_params
        self.customer_id = _normalize_customer_id(str(params.get("customer_id", "")))
        self.api_version = str(params.get("api_version") or API_VERSION)
        self._access_token: str | None = None
        self._token_refresh_lock = threading.Lock()

    @property
    def base_url(self) -> str:
        return f"{API_HOST}/{self.api_version}"

    def authenticate(self) -> None:
        """Exchange the refresh token for an access token and open the API client.

        Raises:
            AuthenticationError: If credentials are missing or the exchange fails.
        """
        if not self.customer_id:
            raise AuthenticationError("Google Ads customer_id is required")

        creds = self.config.credentials
        missing = [key for key in REQUIRED_CREDENTIALS if not creds.get(key)]
        if missing:
            raise AuthenticationError(
                f"Missing required Google Ads credentials: {', '.join(missing)}"
            )

        self._refresh_access_token()

        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "developer-token": creds["developer_token"],
        }
        if creds.get("login_customer_id"):
            headers["login-customer-id"] = _normalize_customer_id(
                str(creds["login_customer_id"])
            )

        self._client = httpx.Client(base_url=self.base_url, headers=headers, timeout=API_TIMEOUT)
        self._authenticated = True
        logger.info(
            f"Connected to Google Ads customer {self.customer_id} (API {self.api_version})"
        )

    def _refresh_access_token(self) -> None:
        """Exchange the refresh token for a new access token.

        Raises:
            AuthenticationError: If the exchange fails.
        """
        creds = self.config.credentials
        try:
            with httpx.Client(timeout=TOKEN_TIMEOUT) as client:
                response = client.post(
                    TOKEN_URL,
                    data={
                        "grant_type": "refresh_token",
                        "client_id": creds["client_id"],
                        "client_secret": creds["client_secret"],
                        "refresh_token": creds["refresh_token"],
                    },
                )
                response.raise_for_status()
                self._access_token = response.json()["access_token"]
        except Exception as e:
            raise AuthenticationError(
                f"Failed to refresh Google Ads access token: {e}"
            ) from e

        if self._client:
            self._client.headers["Authorization"] = f"Bearer {self._access_token}"

    def _search(self, body: dict[str, Any]) -> dict[str, Any]:
        """POST one search page, refreshing the token once on 401.

        Raises:
            httpx.HTTPStatusError: If the API rejects the request.
            AuthenticationError: If the token refresh fails.
        """
        path = f"/customers/{self.customer_id}/googleAds:search"
        retries = 0
        while True:
            response = self._client.post(path, json=body)
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 401 and retries < self.MAX_TOKEN_REFRESH_RETRIES:
                    retries += 1
                    logger.warning(
                        f"Google Ads search returned 401 for customer {self.customer_id}, "
                        "refreshing access token"
                    )
                    old_token = self._access_token
                    with self._token_refresh_lock:
                        if self._access_token == old_token:
                            self._refresh_access_token()
                    continue
                raise
            return response.json()

    def fetch_records(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Generator[dict[str, Any], None, None]:
        """Yield keyword performance rows, following nextPageToken.

        Raises:
            httpx.HTTPStatusError: If the API rejects a request.
        """
        if not self.is_authenticated:
            self.authenticate()

        until = until or datetime.now(UTC)
        since = since or until - timedelta(days=30)
        query = KEYWORD_PERFORMANCE_QUERY.format(
            start=since.date().isoformat(), end=until.date().isoformat()
        )

        page_token: str | None = None
        count = 0
        while True:
            body: dict[str, Any] = {"query": query}
            if page_token:
                body["pageToken"] = page_token

            data = self._search(body)

            for result in data.get("results", []):
                yield result
                count += 1

                if limit and count >= limit:
                    return

            page_token = data.get("nextPageToken")
            if not page_token:
                break

    def normalize(self, raw_records: list[dict[str, Any]]) -> list[AdsPerformanceRow]:
        rows = []
        for record in raw_records:
            campaign = record.get("campaign", {})
            ad_group = record.get("adGroup", {})
            keyword = record.get("adGroupCriterion", {}).get("keyword", {})
            metrics = record.get("metrics", {})
            segments = record.get("segments", {})

            rows.append(
                AdsPerformanceRow(
                    campaign_id=str(campaign.get("id", "")),
                    campaign_name=campaign.get("name", ""),
                    ad_group_id=str(ad_group.get("id", "")),
                    ad_group_name=ad_group.get("name", ""),
                    keyword=keyword.get("text", ""),
                    impressions=int(metrics.get("impressions", 0)),
                    clicks=int(metrics.get("clicks", 0)),
                    conversions=float(metrics.get("conversions", 0)),
                    cost=int(metrics.get("costMicros", 0)) / MICROS_PER_UNIT,
                    date=datetime.fromisoformat(segments["date"]).replace(tzinfo=UTC),
                )
            )
        return rows

    def _cleanup_client(self) -> None:
        """Close HTTP client."""
        if self._client:
            try:
                self._client.close()
            except Exception as e:
                logger.warning(f"Error closing Google Ads HTTP client: {e}")
        self._access_token = None


# Auto-register connector
get_registry().register(GoogleAdsConnector)
