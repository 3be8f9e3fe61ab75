"""
Demand Synth Synthesis - the insight synthesis engine.

Provides:
- Deterministic grouping and metric aggregation of raw signals
- Weighted composite scoring over the signal families present
- Threshold qualification and ranking of query, page, journey and message insights
- Per-source analysis helpers and the combined SignalReport

Usage:
    from demandsynth.synthesis import SynthesisConfig, SynthesisEngine

    engine = SynthesisEngine(SynthesisConfig())
    insights = engine.synthesize_insights(bundle)
"""

from demandsynth.synthesis.analysis import (
    CampaignMetrics,
    PageMetrics,
    SignalReport,
    aggregate_campaign_metrics,
    aggregate_page_metrics,
    build_signal_report,
    calculate_campaign_roi,
    group_event_patterns,
    identify_high_performing_queries,
    identify_top_keywords,
    transition_counts,
)
from demandsynth.synthesis.config import (
    DateRange,
    SynthesisConfig,
    Thresholds,
    Weights,
)
from demandsynth.synthesis.engine import SynthesisEngine, rank_insights
from demandsynth.synthesis.scoring import (
    FAMILY_CAPACITY,
    ScoringSignals,
    calculate_score,
)

__all__ = [
    # Analysis
    "CampaignMetrics",
    "PageMetrics",
    "SignalReport",
    "aggregate_campaign_metrics",
    "aggregate_page_metrics",
    "build_signal_report",
    "calculate_campaign_roi",
    "group_event_patterns",
    "identify_high_performing_queries",
    "identify_top_keywords",
    "transition_counts",
    # Config
    "DateRange",
    "SynthesisConfig",
    "Thresholds",
    "Weights",
    # Engine
    "SynthesisEngine",
    "rank_insights",
    # Scoring
    "FAMILY_CAPACITY",
    "ScoringSignals",
    "calculate_score",
]
