"""Google Analytics 4 connectors (events and key-event conversions)."""

from __future__ import annotations

import logging
from abc import ABC
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

from googleapiclient.discovery import build

from demandsynth.connectors.adapters.google_auth import load_google_credentials
from demandsynth.connectors.base import BaseConnector
from demandsynth.connectors.config import ConnectorConfig, ConnectorType
from demandsynth.connectors.exceptions import AuthenticationError
from demandsynth.connectors.registry import get_registry
from demandsynth.signals.schema import AnalyticsConversion, AnalyticsEvent

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/analytics.readonly"]

# Maximum rows per runReport page
PAGE_SIZE = 100_000

# GA4 placeholder for dimensions without a value
NOT_SET = "(not set)"

DATE_HOUR_MINUTE_FORMAT = "%Y%m%d%H%M"


def _parse_date_hour_minute(value: str) -> datetime:
    return datetime.strptime(value, DATE_HOUR_MINUTE_FORMAT).replace(tzinfo=UTC)


def _optional(value: str | None) -> str | None:
    if value is None or value in ("", NOT_SET):
        return None
    return value


class _GA4Connector(BaseConnector, ABC):
    """Shared GA4 Data API plumbing.

    Required connection_params:
        - property_id: GA4 property ID (numeric)

    Optional credentials:
        - Parsed service account or authorized user JSON. When omitted,
          application default credentials are used.
    """

    dimensions: list[str]
    metrics: list[str]

    def __init__(self, config: ConnectorConfig):
        super().__init__(config)
        self.property_id: str = str(config.connection_params.get("property_id", ""))

    def authenticate(self) -> None:
        """Build the Analytics Data API client.

        Raises:
            AuthenticationError: If the property is missing or credentials fail to load.
        """
        if not self.property_id:
            raise AuthenticationError("GA4 property_id is required")

        try:
            creds = load_google_credentials(self.config.credentials or None, SCOPES)
            self._client = build(
                "analyticsdata", "v1beta", credentials=creds, cache_discovery=False
            )
            self._authenticated = True
            logger.info(f"Connected to GA4 property {self.property_id}")
        except Exception as e:
            raise AuthenticationError(f"Failed to authenticate with GA4: {e}") from e

    def _report_dimensions(self) -> list[str]:
        return list(self.dimensions)

    def fetch_records(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Generator[dict[str, Any], None, None]:
        """Run the report page by page and yield one dict per row.

        Keys are the dimension and metric names of the report.
        """
        if not self.is_authenticated:
            self.authenticate()

        dimensions = self._report_dimensions()
        body: dict[str, Any] = {
            "dateRanges": [
                {
                    "startDate": since.date().isoformat() if since else "30daysAgo",
                    "endDate": until.date().isoformat() if until else "today",
                }
            ],
            "dimensions": [{"name": name} for name in dimensions],
            "metrics": [{"name": name} for name in self.metrics],
            "limit": PAGE_SIZE,
        }

        offset = 0
        count = 0
        while True:
            body["offset"] = offset
            response = (
                self._client.properties()
                .runReport(property=f"properties/{self.property_id}", body=body)
                .execute()
            )
            rows = response.get("rows", [])

            for row in rows:
                record = {
                    name: item.get("value")
                    for name, item in zip(dimensions, row.get("dimensionValues", []))
                }
                record.update(
                    {
                        name: item.get("value")
                        for name, item in zip(self.metrics, row.get("metricValues", []))
                    }
                )
                yield record
                count += 1

                if limit and count >= limit:
                    return

            offset += len(rows)
            if not rows or offset >= int(response.get("rowCount", 0)):
                break


class GA4EventsConnector(_GA4Connector):
    """Fetches GA4 events by name, minute and page.

    Optional connection_params:
        - session_dimension: Custom dimension carrying the session id, e.g.
          customEvent:ga_session_id. It must be registered on the property or
          runReport rejects the request, so it is omitted by default and
          session_id is left empty.
        - user_dimension: Dimension carrying the user id (default: none)

    Example:
        config = ConnectorConfig(
            connector_type=ConnectorType.GA4_EVENTS,
            name="GA4 events",
            connection_params={"property_id": "123456789"},
        )
    """

    connector_type = ConnectorType.GA4_EVENTS

    dimensions = ["eventName", "dateHourMinute", "pagePath"]
    metrics = ["eventCount"]

    def _report_dimensions(self) -> list[str]:
        params = self.config.connection_params
        dimensions = list(self.dimensions)
        if params.get("session_dimension"):
            dimensions.append(params["session_dimension"])
        if params.get("user_dimension"):
            dimensions.append(params["user_dimension"])
        return dimensions

    def normalize(self, raw_records: list[dict[str, Any]]) -> list[AnalyticsEvent]:
        params = self.config.connection_params
        session_dimension = params.get("session_dimension")
        user_dimension = params.get("user_dimension")

        events = []
        for record in raw_records:
            events.append(
                AnalyticsEvent(
                    event_name=record["eventName"],
                    timestamp=_parse_date_hour_minute(record["dateHourMinute"]),
                    session_id=_optional(record.get(session_dimension)) or "",
                    page=record.get("pagePath") or "",
                    user_id=_optional(record.get(user_dimension)) if user_dimension else None,
                    event_params={"event_count": int(record.get("eventCount") or 0)},
                )
            )
        return events


class GA4ConversionsConnector(_GA4Connector):
    """Fetches GA4 key events with session source, medium and campaign.

    Rows with no key events are dropped.

    Optional connection_params:
        - currency: Currency of the property's event values (e.g. "USD")
    """

    connector_type = ConnectorType.GA4_CONVERSIONS

    dimensions = [
        "eventName",
        "dateHourMinute",
        "sessionSource",
        "sessionMedium",
        "sessionCampaignName",
    ]
    metrics = ["keyEvents", "eventValue"]

    def normalize(self, raw_records: list[dict[str, Any]]) -> list[AnalyticsConversion]:
        currency = self.config.connection_params.get("currency")

        conversions = []
        for record in raw_records:
            if float(record.get("keyEvents") or 0) <= 0:
                continue
            value = record.get("eventValue")
            conversions.append(
                AnalyticsConversion(
                    conversion_name=record["eventName"],
                    timestamp=_parse_date_hour_minute(record["dateHourMinute"]),
                    source=record.get("sessionSource") or NOT_SET,
                    medium=record.get("sessionMedium") or NOT_SET,
                    value=float(value) if value not in (None, "") else None,
                    currency=currency,
                    campaign=_optional(record.get("sessionCampaignName")),
                )
            )
        return conversions


# Auto-register connectors
get_registry().register(GA4EventsConnector)
get_registry().register(GA4ConversionsConnector)
