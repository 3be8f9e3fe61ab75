"""
Demand Synth Signals - typed records for every marketing signal source.

Provides:
- Signal records for analytics, CRM lifecycle, search and paid-ads data
- A fully-optional bundle holding one field per source family
- The qualified insight output record and its metrics

Usage:
    from demandsynth.signals import SearchDemandRow, SignalBundle

    bundle = SignalBundle(search_signals=[
        SearchDemandRow(query="crm software", page="/crm", impressions=1200,
                        clicks=80, ctr=0.066, position=4.2, date=datetime.now(UTC)),
    ])
"""

from demandsynth.signals.schema import (
    AdsPerformanceRow,
    AnalyticsConversion,
    AnalyticsEvent,
    InsightMetrics,
    InsightSignals,
    InsightType,
    LifecycleTransition,
    QualifiedInsight,
    SearchDemandRow,
    SignalBundle,
    SignalFamily,
)

__all__ = [
    # Signal records
    "AnalyticsEvent",
    "AnalyticsConversion",
    "LifecycleTransition",
    "SearchDemandRow",
    "AdsPerformanceRow",
    "SignalBundle",
    "SignalFamily",
    # Insights
    "InsightType",
    "InsightMetrics",
    "InsightSignals",
    "QualifiedInsight",
]
