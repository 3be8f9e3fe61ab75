"""
Composite scoring across signal families.

Each present family contributes min(raw / capacity, 1) scaled by its weight.
The score is the weighted average over present families only, so an insight
type that structurally lacks a family is not penalized for it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from demandsynth.signals.schema import (
    AdsPerformanceRow,
    AnalyticsEvent,
    LifecycleTransition,
    SearchDemandRow,
    SignalFamily,
)

# Raw magnitude that saturates each family's normalized score
FAMILY_CAPACITY: dict[SignalFamily, float] = {
    SignalFamily.GA4: 100,  # event count
    SignalFamily.LIFECYCLE: 50,  # transition count
    SignalFamily.SEARCH: 100,  # sum of clicks
    SignalFamily.ADS: 20,  # sum of conversions
}


@dataclass(frozen=True)
class ScoringSignals:
    """Signals passed to the scorer. Absent or empty families are skipped."""

    ga4: Sequence[AnalyticsEvent] | None = None
    lifecycle: Sequence[LifecycleTransition] | None = None
    search: Sequence[SearchDemandRow] | None = None
    ads: Sequence[AdsPerformanceRow] | None = None


def normalize(value: float, capacity: float) -> float:
    """Scale a raw magnitude into [0, 1]."""
    return max(0.0, min(value / capacity, 1.0))


def family_magnitudes(signals: ScoringSignals) -> dict[SignalFamily, float]:
    """Raw magnitude for every family present (non-empty) in ``signals``."""
    magnitudes: dict[SignalFamily, float] = {}
    if signals.ga4:
        magnitudes[SignalFamily.GA4] = len(signals.ga4)
    if signals.lifecycle:
        magnitudes[SignalFamily.LIFECYCLE] = len(signals.lifecycle)
    if signals.search:
        magnitudes[SignalFamily.SEARCH] = sum(s.clicks for s in signals.search)
    if signals.ads:
        magnitudes[SignalFamily.ADS] = sum(a.conversions for a in signals.ads)
    return magnitudes


def calculate_score(
    signals: ScoringSignals,
    weights: dict[SignalFamily, float],
) -> float:
    """Weighted composite score in [0, 1].

    Args:
        signals: Signals grouped by family.
        weights: Non-negative weight per family. They need not sum to 1.

    Returns:
        Weighted average of the normalized family scores over the present
        families, or 0.0 when no family is present or all present weights
        are zero.
    """
    score = 0.0
    total_weight = 0.0

    for family, raw in family_magnitudes(signals).items():
        weight = weights.get(family, 0.0)
        score += weight * normalize(raw, FAMILY_CAPACITY[family])
        total_weight += weight

    return score / total_weight if total_weight > 0 else 0.0
