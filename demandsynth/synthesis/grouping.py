"""
Grouping and aggregation of raw signal rows.

Groups are insertion-ordered: keys appear in the order they are first seen
and rows keep their input order within each group. Every input row lands in
exactly one group.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import TypeVar

from demandsynth.signals.schema import (
    AdsPerformanceRow,
    InsightMetrics,
    LifecycleTransition,
    SearchDemandRow,
)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

JOURNEY_SEPARATOR = " → "


def group_by(rows: Iterable[T], key: Callable[[T], K]) -> dict[K, list[T]]:
    """Partition rows into groups keyed by ``key(row)``.

    Args:
        rows: Signal rows to group.
        key: Function returning the group key for a row.

    Returns:
        Mapping of key to the rows sharing it, in first-seen key order.
    """
    groups: dict[K, list[T]] = {}
    for row in rows:
        groups.setdefault(key(row), []).append(row)
    return groups


def query_key(row: SearchDemandRow) -> str:
    """Group key for query insights (case-sensitive, untrimmed)."""
    return row.query


def page_key(row: SearchDemandRow) -> str:
    """Group key for page insights."""
    return row.page


def journey_key(transition: LifecycleTransition) -> tuple[str, str]:
    """Group key for journey insights: the (from, to) stage pair."""
    return (transition.from_stage, transition.to_stage)


def message_key(row: AdsPerformanceRow) -> str:
    """Group key for message insights."""
    return row.campaign_name


def journey_name(key: tuple[str, str]) -> str:
    """Render a journey group key as a display name."""
    from_stage, to_stage = key
    return f"{from_stage}{JOURNEY_SEPARATOR}{to_stage}"


def group_by_query(rows: Iterable[SearchDemandRow]) -> dict[str, list[SearchDemandRow]]:
    return group_by(rows, query_key)


def group_by_page(rows: Iterable[SearchDemandRow]) -> dict[str, list[SearchDemandRow]]:
    return group_by(rows, page_key)


def group_by_journey(
    transitions: Iterable[LifecycleTransition],
) -> dict[tuple[str, str], list[LifecycleTransition]]:
    return group_by(transitions, journey_key)


def group_by_message(rows: Iterable[AdsPerformanceRow]) -> dict[str, list[AdsPerformanceRow]]:
    return group_by(rows, message_key)


def search_metrics(rows: Sequence[SearchDemandRow]) -> InsightMetrics:
    """Aggregate search rows into metrics.

    Search rows carry no conversion count, so total_conversions is 0.
    avg_position is None for an empty group.
    """
    avg_position = sum(r.position for r in rows) / len(rows) if rows else None
    return InsightMetrics(
        total_impressions=sum(r.impressions for r in rows),
        total_clicks=sum(r.clicks for r in rows),
        total_conversions=0,
        avg_position=avg_position,
    )


def ads_metrics(rows: Sequence[AdsPerformanceRow]) -> InsightMetrics:
    """Aggregate ads rows into metrics.

    roi is (conversions * 100 - cost) / cost, and None when cost is not
    positive.
    """
    total_cost = sum(r.cost for r in rows)
    total_conversions = sum(r.conversions for r in rows)
    roi = (total_conversions * 100 - total_cost) / total_cost if total_cost > 0 else None
    return InsightMetrics(
        total_impressions=sum(r.impressions for r in rows),
        total_clicks=sum(r.clicks for r in rows),
        total_conversions=total_conversions,
        total_cost=total_cost,
        roi=roi,
    )


def journey_metrics(transitions: Sequence[LifecycleTransition]) -> InsightMetrics:
    """Journey metrics: each transition counts as one conversion."""
    return InsightMetrics(
        total_impressions=0,
        total_clicks=0,
        total_conversions=len(transitions),
    )
