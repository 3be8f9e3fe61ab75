"""
Mapping from qualified insights to HubSpot marketing event payloads.

The payload is a pure function of the insight. externalEventId is always the
insight id, which is what reconciliation matches existing events on.
"""

from __future__ import annotations

import json
from datetime import timedelta
from typing import Any

from demandsynth.signals.schema import InsightType, QualifiedInsight

DEFAULT_APP_ID = "demand-synthesis-agent"

EVENT_WINDOW = timedelta(days=30)

EVENT_TYPES: dict[InsightType, str] = {
    InsightType.QUERY: "SEMINAR",
    InsightType.PAGE: "WEBINAR",
    InsightType.JOURNEY: "WORKSHOP",
    InsightType.MESSAGE: "CONFERENCE",
}


def event_name(insight: QualifiedInsight) -> str:
    """Event name such as "Query Campaign: crm software"."""
    return f"{insight.type.value.capitalize()} Campaign: {insight.name}"


def event_description(insight: QualifiedInsight) -> str:
    """Human-readable summary of score, metrics and recommendations."""
    metrics = insight.metrics
    parts = [
        f"Qualified {insight.type.value} insight with score {insight.score:.2f}",
        f"Metrics: {metrics.total_impressions} impressions, "
        f"{metrics.total_clicks} clicks, {metrics.total_conversions} conversions",
    ]
    if insight.recommendations:
        parts.append(f"Recommendations: {'; '.join(insight.recommendations)}")
    return ". ".join(parts)


def insight_to_marketing_event(
    insight: QualifiedInsight,
    app_id: str = DEFAULT_APP_ID,
) -> dict[str, Any]:
    """Build the create/update payload for an insight.

    The event window starts when the insight was synthesized and lasts 30 days.

    Args:
        insight: The qualified insight.
        app_id: Organizer recorded on the event.

    Returns:
        JSON-serializable marketing event payload.
    """
    start = insight.synthesized_at
    return {
        "eventName": event_name(insight),
        "eventType": EVENT_TYPES.get(insight.type, "SEMINAR"),
        "startDateTime": start.isoformat(),
        "endDateTime": (start + EVENT_WINDOW).isoformat(),
        "eventDescription": event_description(insight),
        "eventOrganizer": app_id,
        "externalEventId": insight.id,
        "customProperties": {
            "insightType": insight.type.value,
            "insightScore": str(insight.score),
            "totalImpressions": str(insight.metrics.total_impressions),
            "totalClicks": str(insight.metrics.total_clicks),
            "totalConversions": str(insight.metrics.total_conversions),
            "recommendations": json.dumps(list(insight.recommendations)),
        },
    }
