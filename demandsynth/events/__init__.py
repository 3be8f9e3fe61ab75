"""
Demand Synth Events - marketing event store client and reconciliation.

Provides:
- HubSpot Marketing Events API client (list, create, update, delete)
- Insight to marketing event payload mapping
- Reconciliation of desired insights against stored events

Usage:
    from demandsynth.events import MarketingEventsClient

    with MarketingEventsClient(api_key=api_key) as client:
        result = client.sync_events(insights)
"""

from demandsynth.events.client import (
    BatchCreateFailure,
    BatchCreateResult,
    MarketingEventsClient,
)
from demandsynth.events.exceptions import MarketingEventsError
from demandsynth.events.mapping import insight_to_marketing_event
from demandsynth.events.reconcile import (
    EventStore,
    EventSyncResult,
    ExternalEventRecord,
    ReconciliationPlan,
    plan_reconciliation,
    reconcile,
)

__all__ = [
    # Client
    "MarketingEventsClient",
    "BatchCreateResult",
    "BatchCreateFailure",
    "MarketingEventsError",
    # Mapping
    "insight_to_marketing_event",
    # Reconciliation
    "EventStore",
    "EventSyncResult",
    "ExternalEventRecord",
    "ReconciliationPlan",
    "plan_reconciliation",
    "reconcile",
]
