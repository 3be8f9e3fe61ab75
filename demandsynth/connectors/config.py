"""Configuration models for signal-source connectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ConnectorType(str, Enum):
    """Supported connector types."""

    # Google Analytics 4
    GA4_EVENTS = "ga4_events"
    GA4_CONVERSIONS = "ga4_conversions"

    # CRM
    HUBSPOT_LIFECYCLE = "hubspot_lifecycle"

    # Search
    SEARCH_CONSOLE = "search_console"

    # Paid ads
    GOOGLE_ADS = "google_ads"


@dataclass
class ConnectorConfig:
    """Configuration for a signal-source connector."""

    connector_type: ConnectorType
    name: str  # Human-readable name for this connection

    # Authentication (repr=False to prevent credential exposure in logs)
    credentials: dict[str, Any] = field(default_factory=dict, repr=False)

    # Connection settings (property id, site url, customer id, ...)
    connection_params: dict[str, Any] = field(default_factory=dict)
