"""
Reconciliation of desired insights against stored marketing events.

The desired insight set is the full target state. Existing events are matched
on their external key (the originating insight id):
- desired insight with a matching event -> update that event
- desired insight without a match -> create a new event
- existing event whose key is not desired -> delete it

Operations run one at a time: updates and creates in desired order, then
deletes in listing order. The first failing call propagates and aborts the
rest; already-applied changes are not rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from demandsynth.signals.schema import QualifiedInsight

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExternalEventRecord:
    """A marketing event as listed by the store.

    Only id and external_event_id are interpreted; the payload is kept as
    returned.
    """

    id: str
    external_event_id: str | None
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ExternalEventRecord:
        """Build a record from a marketing events API result.

        Raises:
            ValueError: If the result has no id.
        """
        if "id" not in data:
            raise ValueError("Marketing event is missing required field: id")
        return cls(
            id=str(data["id"]),
            external_event_id=data.get("externalEventId"),
            payload=data,
        )


@dataclass
class EventSyncResult:
    """Identifiers touched by a reconciliation run."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "created": list(self.created),
            "updated": list(self.updated),
            "deleted": list(self.deleted),
        }


@dataclass
class ReconciliationPlan:
    """Operations needed to converge the store onto the desired insights."""

    updates: list[tuple[str, QualifiedInsight]] = field(default_factory=list)
    creates: list[QualifiedInsight] = field(default_factory=list)
    deletes: list[str] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not (self.updates or self.creates or self.deletes)


class EventStore(Protocol):
    """Write operations reconciliation needs from the event store."""

    def create_event(self, insight: QualifiedInsight) -> str: ...

    def update_event(self, event_id: str, insight: QualifiedInsight) -> None: ...

    def delete_event(self, event_id: str) -> None: ...


def plan_reconciliation(
    desired: Sequence[QualifiedInsight],
    existing: Sequence[ExternalEventRecord],
) -> ReconciliationPlan:
    """Diff desired insights against existing events.

    When several events share an external key, the last one listed is the
    match and the earlier ones are deleted as stale copies.

    Args:
        desired: Insights that should exist after reconciliation.
        existing: Complete snapshot of the store's events.

    Returns:
        The update, create and delete operations, in execution order.
    """
    existing_by_key: dict[str | None, str] = {}
    for record in existing:
        existing_by_key[record.external_event_id] = record.id

    desired_ids = {insight.id for insight in desired}
    plan = ReconciliationPlan()

    for insight in desired:
        event_id = existing_by_key.get(insight.id)
        if event_id is not None:
            plan.updates.append((event_id, insight))
        else:
            plan.creates.append(insight)

    # Listing order; a record survives only as the desired key's final match
    plan.deletes.extend(
        record.id
        for record in existing
        if record.external_event_id not in desired_ids
        or existing_by_key[record.external_event_id] != record.id
    )
    return plan


def reconcile(
    desired: Sequence[QualifiedInsight],
    existing: Sequence[ExternalEventRecord],
    store: EventStore,
) -> EventSyncResult:
    """Converge the store onto the desired insights.

    Args:
        desired: Insights that should exist after reconciliation.
        existing: Complete snapshot of the store's events.
        store: Store used to apply each operation.

    Returns:
        EventSyncResult with created (new ids), updated and deleted event ids.

    Raises:
        Exception: Whatever the store raises; the remaining operations are skipped.
    """
    plan = plan_reconciliation(desired, existing)
    result = EventSyncResult()

    # Updates and creates interleave in desired order
    pending_updates = {insight.id: event_id for event_id, insight in plan.updates}
    for insight in desired:
        event_id = pending_updates.get(insight.id)
        if event_id is not None:
            store.update_event(event_id, insight)
            result.updated.append(event_id)
        else:
            result.created.append(store.create_event(insight))

    for event_id in plan.deletes:
        store.delete_event(event_id)
        result.deleted.append(event_id)

    logger.info(
        f"Reconciled marketing events: {len(result.created)} created, "
        f"{len(result.updated)} updated, {len(result.deleted)} deleted"
    )
    return result
