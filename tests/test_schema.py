"""Tests for signal and insight records."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime

import pytest

from demandsynth.signals.schema import (
    InsightMetrics,
    InsightSignals,
    InsightType,
    QualifiedInsight,
    SignalBundle,
    SignalFamily,
)


class TestEnums:
    """Tests for SignalFamily and InsightType."""

    def test_insight_types(self) -> None:
        """Test the insight taxonomy is fixed."""
        assert [t.value for t in InsightType] == ["query", "page", "journey", "message"]

    def test_signal_families(self) -> None:
        """Test the four signal families."""
        assert {f.value for f in SignalFamily} == {"ga4", "lifecycle", "search", "ads"}

    def test_enums_are_strings(self) -> None:
        """Test enum members compare equal to their values."""
        assert InsightType.JOURNEY == "journey"
        assert SignalFamily.ADS == "ads"


class TestSignalRecords:
    """Tests for raw signal records."""

    def test_records_are_immutable(self, make_search_row) -> None:
        """Test signal rows cannot be mutated."""
        row = make_search_row()
        with pytest.raises(dataclasses.FrozenInstanceError):
            row.clicks = 10  # type: ignore[misc]

    def test_search_row_to_dict(self, make_search_row) -> None:
        """Test SearchDemandRow serializes the date as ISO text."""
        data = make_search_row().to_dict()
        assert data["query"] == "test query"
        assert data["impressions"] == 1000
        assert data["date"] == "2024-06-15T00:00:00+00:00"

    def test_conversion_optional_fields(self, make_conversion) -> None:
        """Test optional conversion fields default to None."""
        conversion = make_conversion()
        assert conversion.user_id is None
        assert conversion.value is None
        assert conversion.currency is None
        assert conversion.campaign is None

    def test_event_params_copied(self, make_event) -> None:
        """Test to_dict returns a copy of the parameter map."""
        event = make_event(event_params={"event_count": 3})
        data = event.to_dict()
        data["event_params"]["event_count"] = 99
        assert event.event_params["event_count"] == 3

    def test_transition_to_dict(self, make_transition) -> None:
        """Test LifecycleTransition serialization."""
        data = make_transition(properties={"email": "a@example.com"}).to_dict()
        assert data["from_stage"] == "lead"
        assert data["to_stage"] == "marketingqualifiedlead"
        assert data["properties"] == {"email": "a@example.com"}


class TestSignalBundle:
    """Tests for SignalBundle."""

    def test_defaults_absent(self) -> None:
        """Test every family defaults to None."""
        bundle = SignalBundle()
        assert bundle.ga4_events is None
        assert bundle.conversions is None
        assert bundle.lifecycle_events is None
        assert bundle.search_signals is None
        assert bundle.ads_performance is None
        assert bundle.is_empty is True

    def test_empty_lists_are_empty(self) -> None:
        """Test fetched-but-empty sources still count as empty."""
        assert SignalBundle(search_signals=[], lifecycle_events=[]).is_empty is True

    def test_not_empty(self, make_search_row) -> None:
        """Test a bundle with rows is not empty."""
        assert SignalBundle(search_signals=[make_search_row()]).is_empty is False


class TestInsightMetrics:
    """Tests for InsightMetrics."""

    def test_optional_metrics_default_none(self) -> None:
        """Test optional metrics stay None rather than 0."""
        metrics = InsightMetrics()
        assert metrics.total_impressions == 0
        assert metrics.avg_position is None
        assert metrics.total_cost is None
        assert metrics.roi is None

    def test_to_dict(self) -> None:
        """Test metrics serialization keeps None values."""
        data = InsightMetrics(total_impressions=10, total_cost=0.0).to_dict()
        assert data["total_impressions"] == 10
        assert data["total_cost"] == 0.0
        assert data["roi"] is None


class TestQualifiedInsight:
    """Tests for QualifiedInsight."""

    def test_ids_are_unique(self) -> None:
        """Test each insight gets a fresh id."""
        first = QualifiedInsight(type=InsightType.QUERY, name="a", score=0.6)
        second = QualifiedInsight(type=InsightType.QUERY, name="a", score=0.6)
        assert first.id != second.id

    def test_synthesized_at_is_utc(self) -> None:
        """Test creation time is timezone-aware."""
        insight = QualifiedInsight(type=InsightType.PAGE, name="/", score=0.5)
        assert insight.synthesized_at.tzinfo is not None

    def test_immutable(self, make_insight) -> None:
        """Test insights cannot be mutated after creation."""
        insight = make_insight()
        with pytest.raises(dataclasses.FrozenInstanceError):
            insight.score = 0.1  # type: ignore[misc]

    def test_to_dict_without_signals(self, make_insight) -> None:
        """Test default serialization omits raw signals."""
        data = make_insight(id="insight-1").to_dict()
        assert data["id"] == "insight-1"
        assert data["type"] == "query"
        assert data["metrics"]["total_impressions"] == 1200
        assert data["recommendations"] == ["Create targeted marketing event for this query"]
        assert data["synthesized_at"] == "2024-06-30T12:00:00+00:00"
        assert "signals" not in data

    def test_to_dict_with_signals(self, make_insight, make_search_row) -> None:
        """Test signals serialization includes only present families."""
        row = make_search_row()
        insight = make_insight(signals=InsightSignals(search=(row,), conversions=()))
        signals = insight.to_dict(include_signals=True)["signals"]
        assert signals == {"search": [row.to_dict()], "conversions": []}

    def test_explicit_timestamp(self) -> None:
        """Test synthesized_at can be supplied."""
        when = datetime(2024, 1, 1, tzinfo=UTC)
        insight = QualifiedInsight(
            type=InsightType.MESSAGE, name="Spring Sale", score=1.0, synthesized_at=when
        )
        assert insight.synthesized_at == when
