"""
Marketing events synthesis agent.

Coordinates a run end to end: ingest signals from every configured source,
synthesize qualified insights, then reconcile HubSpot marketing events onto
them.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import demandsynth.connectors.adapters  # noqa: F401
from demandsynth.agent.config import IntegrationConfig, validate_config
from demandsynth.connectors import BaseConnector, ConnectorConfig, ConnectorType
from demandsynth.connectors.registry import ConnectorRegistry, get_registry
from demandsynth.events.client import MarketingEventsClient
from demandsynth.events.reconcile import EventSyncResult, ExternalEventRecord
from demandsynth.signals.schema import QualifiedInsight, SignalBundle
from demandsynth.synthesis.analysis import SignalReport, build_signal_report
from demandsynth.synthesis.config import SynthesisConfig
from demandsynth.synthesis.engine import SynthesisEngine

logger = logging.getLogger(__name__)


@dataclass
class AgentRunResult:
    """Insights produced by a run and the event changes they caused."""

    insights: list[QualifiedInsight] = field(default_factory=list)
    events_synced: EventSyncResult = field(default_factory=EventSyncResult)

    def to_dict(self) -> dict[str, Any]:
        return {
            "insights": [insight.to_dict() for insight in self.insights],
            "events_synced": self.events_synced.to_dict(),
        }


class MarketingEventsSynthesisAgent:
    """
    Orchestrates ingestion, synthesis and marketing event sync.

    HubSpot lifecycle data and the marketing events store are always used.
    GA4, Search Console and Google Ads are read only when configured.

    Example:
        agent = MarketingEventsSynthesisAgent(
            load_integration_config(), load_synthesis_config()
        )
        try:
            result = await agent.run()
        finally:
            agent.close()
    """

    def __init__(
        self,
        integration_config: IntegrationConfig,
        synthesis_config: SynthesisConfig,
        registry: ConnectorRegistry | None = None,
        events_client: MarketingEventsClient | None = None,
    ):
        """Initialize the agent.

        Args:
            integration_config: Source credentials and identifiers.
            synthesis_config: Date range, thresholds and weights.
            registry: Connector registry (defaults to the global registry).
            events_client: Marketing events client (built from HubSpot settings
                when omitted).

        Raises:
            ConfigurationError: If required HubSpot settings are missing.
        """
        validate_config(integration_config)

        self.integration_config = integration_config
        self.synthesis_config = synthesis_config
        self.registry = registry or get_registry()
        self.engine = SynthesisEngine(synthesis_config)

        hubspot = integration_config.hubspot
        self.events_client = events_client or MarketingEventsClient(
            api_key=hubspot.api_key, app_id=hubspot.app_id
        )

        self.lifecycle_connector = self._create_connector(
            ConnectorType.HUBSPOT_LIFECYCLE,
            "HubSpot lifecycle",
            credentials={"access_token": hubspot.api_key},
        )

        self.ga4_events_connector: BaseConnector | None = None
        self.ga4_conversions_connector: BaseConnector | None = None
        if integration_config.ga4:
            ga4 = integration_config.ga4
            event_params: dict[str, Any] = {"property_id": ga4.property_id}
            if ga4.session_dimension:
                event_params["session_dimension"] = ga4.session_dimension
            self.ga4_events_connector = self._create_connector(
                ConnectorType.GA4_EVENTS,
                "GA4 events",
                credentials=ga4.credentials,
                connection_params=event_params,
            )
            conversion_params: dict[str, Any] = {"property_id": ga4.property_id}
            if ga4.currency:
                conversion_params["currency"] = ga4.currency
            self.ga4_conversions_connector = self._create_connector(
                ConnectorType.GA4_CONVERSIONS,
                "GA4 conversions",
                credentials=ga4.credentials,
                connection_params=conversion_params,
            )

        self.search_connector: BaseConnector | None = None
        if integration_config.search_console:
            self.search_connector = self._create_connector(
                ConnectorType.SEARCH_CONSOLE,
                "Search Console",
                credentials=integration_config.search_console.credentials,
                connection_params={"site_url": integration_config.search_console.site_url},
            )

        self.ads_connector: BaseConnector | None = None
        if integration_config.google_ads:
            google_ads = integration_config.google_ads
            ads_params: dict[str, Any] = {"customer_id": google_ads.customer_id}
            if google_ads.api_version:
                ads_params["api_version"] = google_ads.api_version
            self.ads_connector = self._create_connector(
                ConnectorType.GOOGLE_ADS,
                "Google Ads",
                credentials=google_ads.credentials,
                connection_params=ads_params,
            )

    def _create_connector(
        self,
        connector_type: ConnectorType,
        name: str,
        credentials: dict[str, Any] | None = None,
        connection_params: dict[str, Any] | None = None,
    ) -> BaseConnector:
        config = ConnectorConfig(
            connector_type=connector_type,
            name=name,
            credentials=dict(credentials or {}),
            connection_params=dict(connection_params or {}),
        )
        return self.registry.create(config)

    @property
    def connectors(self) -> list[BaseConnector]:
        """All connectors in use, in fetch order."""
        candidates = [
            self.ga4_events_connector,
            self.ga4_conversions_connector,
            self.lifecycle_connector,
            self.search_connector,
            self.ads_connector,
        ]
        return [connector for connector in candidates if connector is not None]

    async def _fetch(self, connector: BaseConnector, start: datetime, end: datetime) -> list[Any]:
        return await asyncio.to_thread(connector.fetch, start, end)

    async def ingest_data(self) -> SignalBundle:
        """Fetch signals from every configured source.

        GA4 events and conversions are fetched concurrently; the other
        sources follow one at a time.

        Returns:
            SignalBundle with None for each source that is not configured.

        Raises:
            ConnectorError: If any source fails; nothing partial is returned.
        """
        start = self.synthesis_config.date_range.start_date
        end = self.synthesis_config.date_range.end_date
        data = SignalBundle()

        try:
            if self.ga4_events_connector and self.ga4_conversions_connector:
                logger.info("Fetching GA4 data")
                data.ga4_events, data.conversions = await asyncio.gather(
                    self._fetch(self.ga4_events_connector, start, end),
                    self._fetch(self.ga4_conversions_connector, start, end),
                )
                logger.info(
                    f"Fetched {len(data.ga4_events)} GA4 events "
                    f"and {len(data.conversions)} conversions"
                )

            logger.info("Fetching HubSpot lifecycle events")
            data.lifecycle_events = await self._fetch(self.lifecycle_connector, start, end)
            logger.info(f"Fetched {len(data.lifecycle_events)} lifecycle events")

            if self.search_connector:
                logger.info("Fetching Search Console data")
                data.search_signals = await self._fetch(self.search_connector, start, end)
                logger.info(f"Fetched {len(data.search_signals)} search signals")

            if self.ads_connector:
                logger.info("Fetching Google Ads data")
                data.ads_performance = await self._fetch(self.ads_connector, start, end)
                logger.info(f"Fetched {len(data.ads_performance)} ads performance records")
        except Exception:
            logger.exception("Error ingesting data")
            raise

        return data

    async def run(self) -> AgentRunResult:
        """Ingest, synthesize and sync marketing events.

        Returns:
            AgentRunResult with the ranked insights and the sync outcome.

        Raises:
            ConnectorError: If ingestion fails; no events are touched.
            MarketingEventsError: If the sync fails part way.
        """
        logger.info("Starting marketing events synthesis run")

        data = await self.ingest_data()

        insights = self.engine.synthesize_insights(data)
        logger.info(f"Generated {len(insights)} qualified insights")

        events_synced = await asyncio.to_thread(self.events_client.sync_events, insights)
        logger.info(
            f"Events created: {len(events_synced.created)}, "
            f"updated: {len(events_synced.updated)}, "
            f"deleted: {len(events_synced.deleted)}"
        )

        return AgentRunResult(insights=insights, events_synced=events_synced)

    async def synthesize_only(self) -> list[QualifiedInsight]:
        """Ingest and synthesize without touching marketing events."""
        logger.info("Running synthesis only")
        data = await self.ingest_data()
        insights = self.engine.synthesize_insights(data)
        logger.info(f"Generated {len(insights)} qualified insights")
        return insights

    async def analyze_signals(self, conversion_value: float | None = None) -> SignalReport:
        """Ingest and run the per-source analysis helpers without touching marketing events.

        Query and keyword floors come from the synthesis thresholds.

        Args:
            conversion_value: Value of one conversion, for campaign ROI.
        """
        logger.info("Running signal analysis")
        data = await self.ingest_data()
        thresholds = self.synthesis_config.thresholds
        return build_signal_report(
            data,
            min_impressions=thresholds.min_impressions,
            min_conversions=thresholds.min_conversions,
            conversion_value=conversion_value,
        )

    async def get_current_events(self) -> list[ExternalEventRecord]:
        """List the marketing events currently stored in HubSpot."""
        return await asyncio.to_thread(self.events_client.list_events)

    def close(self) -> None:
        """Release connectors and the marketing events client."""
        for connector in self.connectors:
            connector.close()
        self.events_client.close()
