"""
Signal schema - typed records for each marketing data source.

Inputs come from four independent signal families:
- Analytics (GA4 events and conversions)
- CRM lifecycle (HubSpot lifecycle stage transitions)
- Search demand (Search Console query/page rows)
- Paid ads (Google Ads keyword performance rows)

The output record is QualifiedInsight: one per group of signals that passed
the metric gate and the minimum composite score.

All records are immutable once created. Timestamps are timezone-aware UTC.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4


class SignalFamily(str, Enum):
    """Independent, optionally-absent signal sources used for scoring."""

    GA4 = "ga4"
    LIFECYCLE = "lifecycle"
    SEARCH = "search"
    ADS = "ads"


class InsightType(str, Enum):
    """Fixed insight taxonomy."""

    QUERY = "query"
    PAGE = "page"
    JOURNEY = "journey"
    MESSAGE = "message"


@dataclass(frozen=True)
class AnalyticsEvent:
    """A single GA4 event observation."""

    event_name: str
    timestamp: datetime
    session_id: str
    page: str
    user_id: str | None = None
    event_params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "event_name": self.event_name,
            "timestamp": self.timestamp.isoformat(),
            "user_id": self.user_id,
            "session_id": self.session_id,
            "page": self.page,
            "event_params": dict(self.event_params),
        }


@dataclass(frozen=True)
class AnalyticsConversion:
    """A GA4 key event (conversion) with its traffic attribution."""

    conversion_name: str
    timestamp: datetime
    source: str
    medium: str
    user_id: str | None = None
    value: float | None = None
    currency: str | None = None
    campaign: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "conversion_name": self.conversion_name,
            "timestamp": self.timestamp.isoformat(),
            "user_id": self.user_id,
            "value": self.value,
            "currency": self.currency,
            "source": self.source,
            "medium": self.medium,
            "campaign": self.campaign,
        }


@dataclass(frozen=True)
class LifecycleTransition:
    """A contact moving from one CRM lifecycle stage to another."""

    contact_id: str
    from_stage: str
    to_stage: str
    timestamp: datetime
    properties: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "contact_id": self.contact_id,
            "from_stage": self.from_stage,
            "to_stage": self.to_stage,
            "timestamp": self.timestamp.isoformat(),
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class SearchDemandRow:
    """A Search Console row for one query/page/date combination."""

    query: str
    page: str
    impressions: int
    clicks: int
    ctr: float
    position: float
    date: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "query": self.query,
            "page": self.page,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "ctr": self.ctr,
            "position": self.position,
            "date": self.date.isoformat(),
        }


@dataclass(frozen=True)
class AdsPerformanceRow:
    """Google Ads keyword performance for one day."""

    campaign_id: str
    campaign_name: str
    ad_group_id: str
    ad_group_name: str
    keyword: str
    impressions: int
    clicks: int
    conversions: float
    cost: float
    date: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "campaign_id": self.campaign_id,
            "campaign_name": self.campaign_name,
            "ad_group_id": self.ad_group_id,
            "ad_group_name": self.ad_group_name,
            "keyword": self.keyword,
            "impressions": self.impressions,
            "clicks": self.clicks,
            "conversions": self.conversions,
            "cost": self.cost,
            "date": self.date.isoformat(),
        }


@dataclass
class SignalBundle:
    """Raw signals gathered for one synthesis run.

    Each field is None when the source was not configured or not fetched,
    and an empty list when the source was fetched but returned no rows.
    """

    ga4_events: list[AnalyticsEvent] | None = None
    conversions: list[AnalyticsConversion] | None = None
    lifecycle_events: list[LifecycleTransition] | None = None
    search_signals: list[SearchDemandRow] | None = None
    ads_performance: list[AdsPerformanceRow] | None = None

    @property
    def is_empty(self) -> bool:
        """Return True if no source contributed any row."""
        return not any(
            (
                self.ga4_events,
                self.conversions,
                self.lifecycle_events,
                self.search_signals,
                self.ads_performance,
            )
        )


@dataclass(frozen=True)
class InsightMetrics:
    """Aggregated counters for a qualified insight.

    Optional metrics stay None when they were not computed. None is distinct
    from 0, which is a valid measured value.
    """

    total_impressions: int = 0
    total_clicks: int = 0
    total_conversions: float = 0
    avg_position: float | None = None
    total_cost: float | None = None
    roi: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "total_impressions": self.total_impressions,
            "total_clicks": self.total_clicks,
            "total_conversions": self.total_conversions,
            "avg_position": self.avg_position,
            "total_cost": self.total_cost,
            "roi": self.roi,
        }


@dataclass(frozen=True)
class InsightSignals:
    """The raw records that contributed to an insight, by family."""

    ga4: tuple[AnalyticsEvent, ...] | None = None
    conversions: tuple[AnalyticsConversion, ...] | None = None
    lifecycle: tuple[LifecycleTransition, ...] | None = None
    search: tuple[SearchDemandRow, ...] | None = None
    ads: tuple[AdsPerformanceRow, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert present families to lists of dictionaries."""
        families = {
            "ga4": self.ga4,
            "conversions": self.conversions,
            "lifecycle": self.lifecycle,
            "search": self.search,
            "ads": self.ads,
        }
        return {
            name: [record.to_dict() for record in records]
            for name, records in families.items()
            if records is not None
        }


@dataclass(frozen=True)
class QualifiedInsight:
    """
    A named, scored synthesis result that passed qualification.

    The id is generated at creation time and is used as the external key
    when reconciling against the marketing events store.

    Example:
        insight = QualifiedInsight(
            type=InsightType.QUERY,
            name="crm software",
            score=0.8,
            signals=InsightSignals(search=(row,)),
            metrics=InsightMetrics(total_impressions=1200, total_clicks=80),
            recommendations=("Create targeted marketing event for this query",),
        )
    """

    type: InsightType
    name: str
    score: float
    signals: InsightSignals = field(default_factory=InsightSignals)
    metrics: InsightMetrics = field(default_factory=InsightMetrics)
    recommendations: tuple[str, ...] = ()
    id: str = field(default_factory=lambda: str(uuid4()))
    synthesized_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self, include_signals: bool = False) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary.

        Args:
            include_signals: Include the contributing raw records.

        Returns:
            Dictionary representation of the insight.
        """
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "score": self.score,
            "metrics": self.metrics.to_dict(),
            "recommendations": list(self.recommendations),
            "synthesized_at": self.synthesized_at.isoformat(),
        }
        if include_signals:
            data["signals"] = self.signals.to_dict()
        return data
