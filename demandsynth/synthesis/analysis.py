"""
Analysis helpers over raw signal rows.

Small, pure aggregations used for reporting alongside synthesized insights:
- High-performing search queries and per-page search metrics
- Campaign ROI at a given conversion value, top keywords, campaign totals
- Lifecycle transition counts and GA4 event patterns

build_signal_report() combines them into the SignalReport that the
`demandsynth --analyze` command and the analyze_signals MCP tool return.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from demandsynth.signals.schema import (
    AdsPerformanceRow,
    AnalyticsEvent,
    LifecycleTransition,
    SearchDemandRow,
    SignalBundle,
)
from demandsynth.synthesis.grouping import group_by, journey_key, message_key, page_key

# CTR floor for high-performing queries
DEFAULT_MIN_CTR = 0.05


@dataclass
class PageMetrics:
    """Aggregate Search Console metrics for one page."""

    total_impressions: int
    total_clicks: int
    avg_position: float
    avg_ctr: float


@dataclass
class CampaignMetrics:
    """Aggregate Google Ads metrics for one campaign."""

    total_impressions: int
    total_clicks: int
    total_conversions: float
    total_cost: float
    avg_ctr: float


def identify_high_performing_queries(
    rows: Sequence[SearchDemandRow],
    min_impressions: int,
    min_ctr: float,
) -> list[SearchDemandRow]:
    """Rows meeting both the impression and CTR floors, in input order."""
    return [r for r in rows if r.impressions >= min_impressions and r.ctr >= min_ctr]


def aggregate_page_metrics(rows: Sequence[SearchDemandRow]) -> PageMetrics:
    """Totals and averages for a page's search rows.

    Raises:
        ValueError: If rows is empty.
    """
    if not rows:
        raise ValueError("Cannot aggregate metrics for an empty set of rows")
    return PageMetrics(
        total_impressions=sum(r.impressions for r in rows),
        total_clicks=sum(r.clicks for r in rows),
        avg_position=sum(r.position for r in rows) / len(rows),
        avg_ctr=sum(r.ctr for r in rows) / len(rows),
    )


def calculate_campaign_roi(rows: Sequence[AdsPerformanceRow], conversion_value: float) -> float:
    """(conversions * conversion_value - cost) / cost, or 0.0 without spend."""
    total_cost = sum(r.cost for r in rows)
    total_value = sum(r.conversions for r in rows) * conversion_value
    return (total_value - total_cost) / total_cost if total_cost > 0 else 0.0


def identify_top_keywords(
    rows: Sequence[AdsPerformanceRow],
    min_conversions: float,
) -> list[AdsPerformanceRow]:
    """Rows with at least ``min_conversions``, most conversions first."""
    qualifying = [r for r in rows if r.conversions >= min_conversions]
    return sorted(qualifying, key=lambda r: r.conversions, reverse=True)


def aggregate_campaign_metrics(rows: Sequence[AdsPerformanceRow]) -> CampaignMetrics:
    total_impressions = sum(r.impressions for r in rows)
    total_clicks = sum(r.clicks for r in rows)
    return CampaignMetrics(
        total_impressions=total_impressions,
        total_clicks=total_clicks,
        total_conversions=sum(r.conversions for r in rows),
        total_cost=sum(r.cost for r in rows),
        avg_ctr=total_clicks / total_impressions if total_impressions > 0 else 0.0,
    )


def transition_counts(
    transitions: Sequence[LifecycleTransition],
) -> dict[tuple[str, str], int]:
    """Number of transitions per (from_stage, to_stage) pair."""
    return {key: len(group) for key, group in group_by(transitions, journey_key).items()}


def group_event_patterns(
    events: Sequence[AnalyticsEvent],
) -> dict[tuple[str, str], list[AnalyticsEvent]]:
    """GA4 events grouped by (page, event_name)."""
    return group_by(events, lambda e: (e.page, e.event_name))


@dataclass
class SignalReport:
    """Per-source analysis of one ingested signal bundle.

    Sections for sources that were not fetched stay empty.
    """

    high_performing_queries: list[SearchDemandRow] = field(default_factory=list)
    pages: dict[str, PageMetrics] = field(default_factory=dict)
    top_keywords: list[AdsPerformanceRow] = field(default_factory=list)
    campaigns: dict[str, CampaignMetrics] = field(default_factory=dict)
    campaign_roi: dict[str, float] | None = None
    transitions: dict[tuple[str, str], int] = field(default_factory=dict)
    event_patterns: dict[tuple[str, str], int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dictionary."""
        return {
            "high_performing_queries": [row.to_dict() for row in self.high_performing_queries],
            "pages": {page: asdict(metrics) for page, metrics in self.pages.items()},
            "top_keywords": [row.to_dict() for row in self.top_keywords],
            "campaigns": {name: asdict(metrics) for name, metrics in self.campaigns.items()},
            "campaign_roi": dict(self.campaign_roi) if self.campaign_roi is not None else None,
            "transitions": [
                {"from_stage": from_stage, "to_stage": to_stage, "count": count}
                for (from_stage, to_stage), count in self.transitions.items()
            ],
            "event_patterns": [
                {"page": page, "event_name": event_name, "count": count}
                for (page, event_name), count in self.event_patterns.items()
            ],
        }


def build_signal_report(
    bundle: SignalBundle,
    min_impressions: float,
    min_conversions: float,
    min_ctr: float = DEFAULT_MIN_CTR,
    conversion_value: float | None = None,
) -> SignalReport:
    """Run every analysis helper over the sources present in a bundle.

    Args:
        bundle: Ingested signals.
        min_impressions: Impression floor for high-performing queries.
        min_conversions: Conversion floor for top keywords.
        min_ctr: CTR floor for high-performing queries.
        conversion_value: Value of one conversion; campaign ROI is computed
            only when given.
    """
    search = bundle.search_signals or []
    ads = bundle.ads_performance or []
    campaigns = group_by(ads, message_key)

    return SignalReport(
        high_performing_queries=identify_high_performing_queries(
            search, min_impressions=min_impressions, min_ctr=min_ctr
        ),
        pages={
            page: aggregate_page_metrics(rows) for page, rows in group_by(search, page_key).items()
        },
        top_keywords=identify_top_keywords(ads, min_conversions=min_conversions),
        campaigns={name: aggregate_campaign_metrics(rows) for name, rows in campaigns.items()},
        campaign_roi=(
            {
                name: calculate_campaign_roi(rows, conversion_value)
                for name, rows in campaigns.items()
            }
            if conversion_value is not None
            else None
        ),
        transitions=transition_counts(bundle.lifecycle_events or []),
        event_patterns={
            key: len(events)
            for key, events in group_event_patterns(bundle.ga4_events or []).items()
        },
    )
