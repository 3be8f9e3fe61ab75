"""Google Search Console connector."""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

from googleapiclient.discovery import build

from demandsynth.connectors.adapters.google_auth import load_google_credentials
from demandsynth.connectors.base import BaseConnector
from demandsynth.connectors.config import ConnectorConfig, ConnectorType
from demandsynth.connectors.exceptions import AuthenticationError
from demandsynth.connectors.registry import get_registry
from demandsynth.signals.schema import SearchDemandRow

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/webmasters.readonly"]

# Search Analytics API maximum rows per request
ROW_LIMIT = 25_000

DIMENSIONS = ["query", "page", "date"]


class SearchConsoleConnector(BaseConnector):
    """Connector for Search Console search analytics.

    Fetches one row per query, page and date.

    Required connection_params:
        - site_url: Property URL as registered in Search Console
          (e.g. "https://example.com/" or "sc-domain:example.com")

    Optional connection_params:
        - search_type: "web", "image", "video", "news" (default: web)

    Example:
        config = ConnectorConfig(
            connector_type=ConnectorType.SEARCH_CONSOLE,
            name="Search Console",
            connection_params={"site_url": "sc-domain:example.com"},
        )
    """

    connector_type = ConnectorType.SEARCH_CONSOLE

    def __init__(self, config: ConnectorConfig):
        super().__init__(config)
        self.site_url: str = config.connection_params.get("site_url", "")

    def authenticate(self) -> None:
        """Build the Search Console API client.

        Raises:
            AuthenticationError: If the site is missing or credentials fail to load.
        """
        if not self.site_url:
            raise AuthenticationError("Search Console site_url is required")

        try:
            creds = load_google_credentials(self.config.credentials or None, SCOPES)
            self._client = build(
                "searchconsole", "v1", credentials=creds, cache_discovery=False
            )
            self._authenticated = True
            logger.info(f"Connected to Search Console for {self.site_url}")
        except Exception as e:
            raise AuthenticationError(
                f"Failed to authenticate with Search Console: {e}"
            ) from e

    def fetch_records(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Generator[dict[str, Any], None, None]:
        """Yield search analytics rows, paging with startRow."""
        if not self.is_authenticated:
            self.authenticate()

        until = until or datetime.now(UTC)
        since = since or until
        body: dict[str, Any] = {
            "startDate": since.date().isoformat(),
            "endDate": until.date().isoformat(),
            "dimensions": DIMENSIONS,
            "type": self.config.connection_params.get("search_type", "web"),
            "rowLimit": ROW_LIMIT,
        }

        start_row = 0
        count = 0
        while True:
            body["startRow"] = start_row
            response = (
                self._client.searchanalytics()
                .query(siteUrl=self.site_url, body=body)
                .execute()
            )
            rows = response.get("rows", [])

            for row in rows:
                record = dict(zip(DIMENSIONS, row.get("keys", [])))
                record.update(
                    {
                        "clicks": row.get("clicks", 0),
                        "impressions": row.get("impressions", 0),
                        "ctr": row.get("ctr", 0.0),
                        "position": row.get("position", 0.0),
                    }
                )
                yield record
                count += 1

                if limit and count >= limit:
                    return

            if len(rows) < ROW_LIMIT:
                break
            start_row += len(rows)

    def normalize(self, raw_records: list[dict[str, Any]]) -> list[SearchDemandRow]:
        rows = []
        for record in raw_records:
            rows.append(
                SearchDemandRow(
                    query=record["query"],
                    page=record["page"],
                    impressions=int(record.get("impressions", 0)),
                    clicks=int(record.get("clicks", 0)),
                    ctr=float(record.get("ctr", 0.0)),
                    position=float(record.get("position", 0.0)),
                    date=datetime.fromisoformat(record["date"]).replace(tzinfo=UTC),
                )
            )
        return rows


# Auto-register connector
get_registry().register(SearchConsoleConnector)
