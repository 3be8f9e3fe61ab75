"""HubSpot lifecycle stage connector."""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

from demandsynth.connectors.base import BaseConnector
from demandsynth.connectors.config import ConnectorConfig, ConnectorType
from demandsynth.connectors.exceptions import AuthenticationError
from demandsynth.connectors.registry import get_registry
from demandsynth.signals.schema import LifecycleTransition

logger = logging.getLogger(__name__)

LIFECYCLE_PROPERTY = "lifecyclestage"

# Contact properties carried onto each transition
CONTACT_PROPERTIES = ["email", "hs_analytics_source", LIFECYCLE_PROPERTY]


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class HubSpotLifecycleConnector(BaseConnector):
    """Connector for HubSpot contact lifecycle stage transitions.

    Reads the lifecycle stage property history of every contact. Each pair
    of consecutive history entries is one transition, kept when the later
    entry's timestamp falls inside the requested range.

    Required credentials:
        - access_token: HubSpot private app access token

    Example:
        config = ConnectorConfig(
            connector_type=ConnectorType.HUBSPOT_LIFECYCLE,
            name="HubSpot lifecycle",
            credentials={"access_token": "pat-na1-xxx"},
        )
    """

    connector_type = ConnectorType.HUBSPOT_LIFECYCLE

    def __init__(self, config: ConnectorConfig):
        """Initialize HubSpot lifecycle connector."""
        super().__init__(config)

    def authenticate(self) -> None:
        """Connect to HubSpot.

        Raises:
            ImportError: If hubspot-api-client is not installed.
            AuthenticationError: If authentication fails.
        """
        try:
            from hubspot import HubSpot
        except ImportError as e:
            raise ImportError(
                "hubspot-api-client is required. Install with: pip install hubspot-api-client"
            ) from e

        creds = self.config.credentials
        if not creds.get("access_token"):
            raise AuthenticationError("HubSpot access_token is required")

        try:
            self._client = HubSpot(access_token=creds["access_token"])
            self._authenticated = True
            logger.info("Connected to HubSpot")
        except Exception as e:
            raise AuthenticationError(f"Failed to authenticate with HubSpot: {e}") from e

    def fetch_records(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Generator[dict[str, Any], None, None]:
        """Yield one raw transition per consecutive pair of stage history entries."""
        if not self.is_authenticated:
            self.authenticate()

        api = self._client.crm.contacts.basic_api

        after = None
        count = 0
        while True:
            response = api.get_page(
                limit=100,
                after=after,
                properties=CONTACT_PROPERTIES,
                properties_with_history=[LIFECYCLE_PROPERTY],
            )

            for contact in response.results:
                history = (contact.properties_with_history or {}).get(LIFECYCLE_PROPERTY) or []
                entries = sorted(
                    ((_as_datetime(entry.timestamp), entry.value) for entry in history),
                    key=lambda item: item[0],
                )
                properties = {
                    key: value
                    for key, value in (contact.properties or {}).items()
                    if key != LIFECYCLE_PROPERTY
                }

                for (_, from_stage), (changed_at, to_stage) in zip(entries, entries[1:]):
                    if since and changed_at < since:
                        continue
                    if until and changed_at > until:
                        continue

                    yield {
                        "contact_id": str(contact.id),
                        "from_stage": from_stage,
                        "to_stage": to_stage,
                        "timestamp": changed_at,
                        "properties": properties,
                    }
                    count += 1

                    if limit and count >= limit:
                        return

            if not response.paging or not response.paging.next:
                break
            after = response.paging.next.after

    def normalize(self, raw_records: list[dict[str, Any]]) -> list[LifecycleTransition]:
        return [
            LifecycleTransition(
                contact_id=record["contact_id"],
                from_stage=record["from_stage"],
                to_stage=record["to_stage"],
                timestamp=_as_datetime(record["timestamp"]),
                properties=dict(record.get("properties") or {}),
            )
            for record in raw_records
        ]

    def _cleanup_client(self) -> None:
        """Clear the HubSpot client reference.

        hubspot-api-client has no explicit close method.
        """
        self._client = None


# Auto-register connector
get_registry().register(HubSpotLifecycleConnector)
