"""Deterministic recommendation text for each insight type."""

from __future__ import annotations

from demandsynth.signals.schema import InsightMetrics

OPTIMIZE_RANKING = "Optimize content to improve search ranking"
IMPROVE_CTR = "Improve meta descriptions and titles to increase CTR"
CREATE_QUERY_EVENT = "Create targeted marketing event for this query"
LANDING_PAGE_CAMPAIGN = "Create landing page optimization campaign"
AB_TESTING = "Set up A/B testing for conversion optimization"
NURTURE_CAMPAIGN = "Create nurture campaign for this lifecycle transition"
COMMON_TOUCHPOINTS = "Identify common touchpoints in successful journeys"
SCALE_CAMPAIGN = "Scale this high-performing campaign"
APPLY_MESSAGING = "Apply messaging insights to other channels"


def query_recommendations(metrics: InsightMetrics) -> list[str]:
    recommendations = []
    if metrics.avg_position is not None and metrics.avg_position > 10:
        recommendations.append(OPTIMIZE_RANKING)
    if metrics.total_impressions > 1000 and metrics.total_clicks < 50:
        recommendations.append(IMPROVE_CTR)
    recommendations.append(CREATE_QUERY_EVENT)
    return recommendations


def page_recommendations(metrics: InsightMetrics) -> list[str]:
    recommendations = [LANDING_PAGE_CAMPAIGN]
    if metrics.total_clicks > 100:
        recommendations.append(AB_TESTING)
    return recommendations


def journey_recommendations() -> list[str]:
    return [NURTURE_CAMPAIGN, COMMON_TOUCHPOINTS]


def message_recommendations(metrics: InsightMetrics) -> list[str]:
    recommendations = []
    if metrics.roi is not None and metrics.roi > 2:
        recommendations.append(SCALE_CAMPAIGN)
    recommendations.append(APPLY_MESSAGING)
    return recommendations
