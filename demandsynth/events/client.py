"""HubSpot Marketing Events API client."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from demandsynth.events.exceptions import MarketingEventsError
from demandsynth.events.mapping import DEFAULT_APP_ID, insight_to_marketing_event
from demandsynth.events.reconcile import EventSyncResult, ExternalEventRecord, reconcile
from demandsynth.signals.schema import QualifiedInsight

logger = logging.getLogger(__name__)

BASE_URL = "https://api.hubapi.com/marketing/v3/marketing-events"

# HTTP timeouts (in seconds)
API_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

# Page size for event listing
LIST_PAGE_SIZE = 100


@dataclass
class BatchCreateFailure:
    """An insight that could not be created during a batch create."""

    insight_id: str
    insight_name: str
    error: str


@dataclass
class BatchCreateResult:
    """Outcome of a batch create: ids created plus the per-insight failures."""

    created: list[str] = field(default_factory=list)
    failures: list[BatchCreateFailure] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        """Return True if at least one insight failed."""
        return bool(self.failures)


class MarketingEventsClient:
    """
    Create, update, delete and list HubSpot marketing events.

    Two write paths with different failure contracts:
    - sync_events(): full reconciliation, fails on the first error
    - batch_create_events(): bulk seeding, records failures and continues

    Example:
        with MarketingEventsClient(api_key="pat-na1-xxx") as client:
            result = client.sync_events(insights)
            print(f"{len(result.created)} created, {len(result.deleted)} deleted")
    """

    def __init__(
        self,
        api_key: str,
        app_id: str = DEFAULT_APP_ID,
        base_url: str = BASE_URL,
    ):
        """Initialize the client.

        Args:
            api_key: HubSpot private app access token.
            app_id: Organizer id recorded on events and used in event paths.
            base_url: Marketing events API base URL.

        Raises:
            ValueError: If api_key is empty.
        """
        if not api_key:
            raise ValueError("HubSpot api_key is required")
        self.app_id = app_id
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=API_TIMEOUT,
        )

    def __enter__(self) -> MarketingEventsClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise MarketingEventsError on any failure."""
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise MarketingEventsError(
                f"Marketing events {method} {path} failed with status "
                f"{e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise MarketingEventsError(f"Marketing events {method} {path} failed: {e}") from e

    def _event_path(self, event_id: str) -> str:
        return f"/events/{self.app_id}/{event_id}"

    def create_event(self, insight: QualifiedInsight) -> str:
        """Create a marketing event for an insight.

        Returns:
            The new event's id.

        Raises:
            MarketingEventsError: If the API call fails.
        """
        payload = insight_to_marketing_event(insight, self.app_id)
        response = self._request("POST", "/events", json=payload)
        event_id = str(response.json()["id"])
        logger.info(f"Created marketing event: {event_id} for insight: {insight.name}")
        return event_id

    def update_event(self, event_id: str, insight: QualifiedInsight) -> None:
        """Update an existing marketing event from an insight.

        Raises:
            MarketingEventsError: If the API call fails.
        """
        payload = insight_to_marketing_event(insight, self.app_id)
        self._request("PATCH", self._event_path(event_id), json=payload)
        logger.info(f"Updated marketing event: {event_id}")

    def delete_event(self, event_id: str) -> None:
        """Delete a marketing event.

        Raises:
            MarketingEventsError: If the API call fails.
        """
        self._request("DELETE", self._event_path(event_id))
        logger.info(f"Deleted marketing event: {event_id}")

    def list_events(self) -> list[ExternalEventRecord]:
        """List every marketing event, following pagination to the end.

        Raises:
            MarketingEventsError: If any page fails to load.
        """
        records: list[ExternalEventRecord] = []
        params: dict[str, Any] = {"limit": LIST_PAGE_SIZE}

        while True:
            data = self._request("GET", "/events", params=params).json()
            records.extend(ExternalEventRecord.from_api(item) for item in data.get("results", []))

            after = (data.get("paging") or {}).get("next", {}).get("after")
            if not after:
                break
            params["after"] = after

        logger.debug(f"Listed {len(records)} marketing events")
        return records

    def batch_create_events(self, insights: Sequence[QualifiedInsight]) -> BatchCreateResult:
        """Create events for many insights, tolerating per-insight failures.

        Failures are logged and reported in the result; they never raise.
        """
        result = BatchCreateResult()
        for insight in insights:
            try:
                result.created.append(self.create_event(insight))
            except MarketingEventsError as e:
                logger.error(f"Failed to create event for insight {insight.id}: {e}")
                result.failures.append(
                    BatchCreateFailure(
                        insight_id=insight.id,
                        insight_name=insight.name,
                        error=str(e),
                    )
                )

        if result.is_partial:
            logger.warning(
                f"Batch create finished with {len(result.failures)} failures "
                f"out of {len(insights)} insights"
            )
        return result

    def sync_events(self, insights: Sequence[QualifiedInsight]) -> EventSyncResult:
        """Converge stored events onto exactly the given insights.

        Raises:
            MarketingEventsError: On the first failed call; remaining operations
                are not attempted.
        """
        try:
            existing = self.list_events()
            return reconcile(insights, existing, self)
        except MarketingEventsError:
            logger.exception("Error syncing marketing events")
            raise
