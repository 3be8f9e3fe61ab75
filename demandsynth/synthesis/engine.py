"""
SynthesisEngine - turns raw signal bundles into ranked qualified insights.

For each insight type the pipeline is:
1. Group raw rows (query text, page path, lifecycle stage pair, campaign name)
2. Aggregate metrics and apply the type's metric gate, if any
3. Score the group over its relevant signal families and apply min_score

Rejected groups are dropped for the run. Accepted insights from all types
are concatenated (query, page, journey, message) and sorted by score,
descending; ties keep that concatenation order.
"""

from __future__ import annotations

import logging

from demandsynth.signals.schema import (
    AdsPerformanceRow,
    AnalyticsConversion,
    AnalyticsEvent,
    InsightSignals,
    InsightType,
    LifecycleTransition,
    QualifiedInsight,
    SearchDemandRow,
    SignalBundle,
)
from demandsynth.synthesis import recommendations
from demandsynth.synthesis.config import SynthesisConfig
from demandsynth.synthesis.grouping import (
    ads_metrics,
    group_by_journey,
    group_by_message,
    group_by_page,
    group_by_query,
    journey_metrics,
    journey_name,
    search_metrics,
)
from demandsynth.synthesis.scoring import ScoringSignals, calculate_score

logger = logging.getLogger(__name__)


def find_related_conversions(
    conversions: list[AnalyticsConversion] | None,
    query: str,
) -> list[AnalyticsConversion]:
    """Conversions whose campaign contains the query text, case-insensitively."""
    if not conversions:
        return []
    needle = query.lower()
    return [c for c in conversions if c.campaign and needle in c.campaign.lower()]


def rank_insights(insights: list[QualifiedInsight]) -> list[QualifiedInsight]:
    """Sort by score descending. The sort is stable, so ties keep input order."""
    return sorted(insights, key=lambda insight: insight.score, reverse=True)


class SynthesisEngine:
    """
    Synthesize qualified insights from all signal sources.

    Example:
        engine = SynthesisEngine(SynthesisConfig())
        insights = engine.synthesize_insights(
            SignalBundle(search_signals=rows, lifecycle_events=transitions)
        )
        for insight in insights:
            print(insight.type.value, insight.name, round(insight.score, 2))
    """

    def __init__(self, config: SynthesisConfig):
        self.config = config
        self._weights = config.weights.by_family()

    def synthesize_insights(self, data: SignalBundle | None = None) -> list[QualifiedInsight]:
        """Synthesize and rank insights from a signal bundle.

        Args:
            data: Raw signals for the run. None or an empty bundle yields [].

        Returns:
            Qualified insights sorted by score, highest first.
        """
        data = data or SignalBundle()
        insights: list[QualifiedInsight] = []

        if data.search_signals:
            insights.extend(self.generate_query_insights(data.search_signals, data))
            insights.extend(self.generate_page_insights(data.search_signals, data))

        if data.lifecycle_events:
            insights.extend(self.generate_journey_insights(data.lifecycle_events))

        if data.ads_performance:
            insights.extend(self.generate_message_insights(data.ads_performance))

        ranked = rank_insights(insights)
        logger.debug(f"Synthesized {len(ranked)} qualified insights")
        return ranked

    def _score(self, signals: ScoringSignals) -> float:
        return calculate_score(signals, self._weights)

    def generate_query_insights(
        self,
        search_signals: list[SearchDemandRow],
        data: SignalBundle,
    ) -> list[QualifiedInsight]:
        """One insight per query whose impressions and score qualify."""
        thresholds = self.config.thresholds
        insights = []

        for query, rows in group_by_query(search_signals).items():
            metrics = search_metrics(rows)
            if metrics.total_impressions < thresholds.min_impressions:
                continue

            score = self._score(ScoringSignals(search=rows))
            if score < thresholds.min_score:
                continue

            related = find_related_conversions(data.conversions, query)
            insights.append(
                QualifiedInsight(
                    type=InsightType.QUERY,
                    name=query,
                    score=score,
                    signals=InsightSignals(search=tuple(rows), conversions=tuple(related)),
                    metrics=metrics,
                    recommendations=tuple(recommendations.query_recommendations(metrics)),
                )
            )

        return insights

    def generate_page_insights(
        self,
        search_signals: list[SearchDemandRow],
        data: SignalBundle,
    ) -> list[QualifiedInsight]:
        """One insight per page, scored on search plus that page's GA4 events."""
        thresholds = self.config.thresholds
        insights = []

        for page, rows in group_by_page(search_signals).items():
            metrics = search_metrics(rows)
            if metrics.total_impressions < thresholds.min_impressions:
                continue

            page_events: list[AnalyticsEvent] | None = None
            if data.ga4_events is not None:
                page_events = [e for e in data.ga4_events if e.page == page]

            score = self._score(ScoringSignals(search=rows, ga4=page_events))
            if score < thresholds.min_score:
                continue

            insights.append(
                QualifiedInsight(
                    type=InsightType.PAGE,
                    name=page,
                    score=score,
                    signals=InsightSignals(
                        search=tuple(rows),
                        ga4=tuple(page_events) if page_events is not None else None,
                    ),
                    metrics=metrics,
                    recommendations=tuple(recommendations.page_recommendations(metrics)),
                )
            )

        return insights

    def generate_journey_insights(
        self,
        lifecycle_events: list[LifecycleTransition],
    ) -> list[QualifiedInsight]:
        """One insight per lifecycle stage pair. There is no metric gate."""
        insights = []

        for key, transitions in group_by_journey(lifecycle_events).items():
            score = self._score(ScoringSignals(lifecycle=transitions))
            if score < self.config.thresholds.min_score:
                continue

            insights.append(
                QualifiedInsight(
                    type=InsightType.JOURNEY,
                    name=journey_name(key),
                    score=score,
                    signals=InsightSignals(lifecycle=tuple(transitions)),
                    metrics=journey_metrics(transitions),
                    recommendations=tuple(recommendations.journey_recommendations()),
                )
            )

        return insights

    def generate_message_insights(
        self,
        ads_performance: list[AdsPerformanceRow],
    ) -> list[QualifiedInsight]:
        """One insight per campaign whose conversions and score qualify."""
        thresholds = self.config.thresholds
        insights = []

        for campaign, rows in group_by_message(ads_performance).items():
            metrics = ads_metrics(rows)
            if metrics.total_conversions < thresholds.min_conversions:
                continue

            score = self._score(ScoringSignals(ads=rows))
            if score < thresholds.min_score:
                continue

            insights.append(
                QualifiedInsight(
                    type=InsightType.MESSAGE,
                    name=campaign,
                    score=score,
                    signals=InsightSignals(ads=tuple(rows)),
                    metrics=metrics,
                    recommendations=tuple(recommendations.message_recommendations(metrics)),
                )
            )

        return insights
