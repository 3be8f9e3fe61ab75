"""Shared pytest fixtures for demandsynth tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any

import pytest

from demandsynth.connectors.base import BaseConnector
from demandsynth.connectors.config import ConnectorConfig, ConnectorType
from demandsynth.connectors.registry import ConnectorRegistry
from demandsynth.signals.schema import (
    AdsPerformanceRow,
    AnalyticsConversion,
    AnalyticsEvent,
    InsightMetrics,
    InsightType,
    LifecycleTransition,
    QualifiedInsight,
    SearchDemandRow,
)
from demandsynth.synthesis.config import DateRange, SynthesisConfig

FIXED_NOW = datetime(2024, 6, 30, 12, 0, tzinfo=UTC)


class MockConnector(BaseConnector):
    """Connector returning preset records."""

    connector_type = ConnectorType.SEARCH_CONSOLE

    def __init__(self, config: ConnectorConfig):
        super().__init__(config)
        self._mock_records: list[Any] = []
        self.fetch_error: Exception | None = None
        self.closed = False

    def authenticate(self) -> None:
        """Mock authentication."""
        self._authenticated = True
        self._client = "mock_client"

    def fetch_records(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Generator[dict[str, Any], None, None]:
        """Yield mock records, or raise the configured error."""
        if self.fetch_error is not None:
            raise self.fetch_error
        yield from self._mock_records

    def normalize(self, raw_records: list[Any]) -> list[Any]:
        """Return records as-is for testing."""
        return raw_records

    def _cleanup_client(self) -> None:
        self.closed = True

    def set_mock_records(self, records: list[Any]) -> None:
        """Set mock records for testing."""
        self._mock_records = records


@pytest.fixture
def mock_connector_config() -> ConnectorConfig:
    """Configuration for MockConnector."""
    return ConnectorConfig(
        connector_type=ConnectorType.SEARCH_CONSOLE,
        name="Mock Search Console",
        credentials={"token": "secret-token"},
        connection_params={"site_url": "https://example.com/"},
    )


@pytest.fixture
def mock_connector(mock_connector_config: ConnectorConfig) -> MockConnector:
    """A MockConnector instance."""
    return MockConnector(mock_connector_config)


@pytest.fixture
def fresh_registry() -> Generator[ConnectorRegistry, None, None]:
    """A fresh registry instance; the global singleton is restored afterwards."""
    original = ConnectorRegistry._instance
    ConnectorRegistry._instance = None
    registry = ConnectorRegistry()
    yield registry
    ConnectorRegistry._instance = original


@pytest.fixture
def synthesis_config() -> SynthesisConfig:
    """Synthesis config with default thresholds and weights over a fixed window."""
    return SynthesisConfig(date_range=DateRange.last_days(30, now=FIXED_NOW))


@pytest.fixture
def make_search_row() -> Callable[..., SearchDemandRow]:
    """Factory for SearchDemandRow with overridable fields."""

    def _make(**overrides: Any) -> SearchDemandRow:
        values: dict[str, Any] = {
            "query": "test query",
            "page": "/page1",
            "impressions": 1000,
            "clicks": 50,
            "ctr": 0.05,
            "position": 5.0,
            "date": datetime(2024, 6, 15, tzinfo=UTC),
        }
        values.update(overrides)
        return SearchDemandRow(**values)

    return _make


@pytest.fixture
def make_ads_row() -> Callable[..., AdsPerformanceRow]:
    """Factory for AdsPerformanceRow with overridable fields."""

    def _make(**overrides: Any) -> AdsPerformanceRow:
        values: dict[str, Any] = {
            "campaign_id": "111",
            "campaign_name": "Spring Sale",
            "ad_group_id": "222",
            "ad_group_name": "Brand",
            "keyword": "crm software",
            "impressions": 5000,
            "clicks": 200,
            "conversions": 20.0,
            "cost": 400.0,
            "date": datetime(2024, 6, 15, tzinfo=UTC),
        }
        values.update(overrides)
        return AdsPerformanceRow(**values)

    return _make


@pytest.fixture
def make_transition() -> Callable[..., LifecycleTransition]:
    """Factory for LifecycleTransition with overridable fields."""

    def _make(**overrides: Any) -> LifecycleTransition:
        values: dict[str, Any] = {
            "contact_id": "contact-001",
            "from_stage": "lead",
            "to_stage": "marketingqualifiedlead",
            "timestamp": datetime(2024, 6, 15, tzinfo=UTC),
        }
        values.update(overrides)
        return LifecycleTransition(**values)

    return _make


@pytest.fixture
def make_event() -> Callable[..., AnalyticsEvent]:
    """Factory for AnalyticsEvent with overridable fields."""

    def _make(**overrides: Any) -> AnalyticsEvent:
        values: dict[str, Any] = {
            "event_name": "page_view",
            "timestamp": datetime(2024, 6, 15, tzinfo=UTC),
            "session_id": "session-1",
            "page": "/page1",
        }
        values.update(overrides)
        return AnalyticsEvent(**values)

    return _make


@pytest.fixture
def make_conversion() -> Callable[..., AnalyticsConversion]:
    """Factory for AnalyticsConversion with overridable fields."""

    def _make(**overrides: Any) -> AnalyticsConversion:
        values: dict[str, Any] = {
            "conversion_name": "generate_lead",
            "timestamp": datetime(2024, 6, 15, tzinfo=UTC),
            "source": "google",
            "medium": "cpc",
        }
        values.update(overrides)
        return AnalyticsConversion(**values)

    return _make


@pytest.fixture
def make_insight() -> Callable[..., QualifiedInsight]:
    """Factory for QualifiedInsight with overridable fields."""

    def _make(**overrides: Any) -> QualifiedInsight:
        values: dict[str, Any] = {
            "type": InsightType.QUERY,
            "name": "crm software",
            "score": 0.8,
            "metrics": InsightMetrics(total_impressions=1200, total_clicks=80),
            "recommendations": ("Create targeted marketing event for this query",),
            "synthesized_at": FIXED_NOW,
        }
        values.update(overrides)
        return QualifiedInsight(**values)

    return _make
