"""Demand Synth Signal Connectors.

This package provides connector adapters for the marketing signal sources:
- Google Analytics 4 (events and key-event conversions)
- HubSpot CRM (contact lifecycle stage transitions)
- Google Search Console (query/page demand rows)
- Google Ads (keyword performance)

Example:
    import demandsynth.connectors.adapters  # noqa: F401
    from demandsynth.connectors import ConnectorConfig, ConnectorType, get_registry

    config = ConnectorConfig(
        connector_type=ConnectorType.SEARCH_CONSOLE,
        name="Search Console",
        connection_params={"site_url": "sc-domain:example.com"},
    )

    with get_registry().create(config) as connector:
        rows = connector.fetch(start, end)
    print(f"Fetched {len(rows)} search rows")
"""

from demandsynth.connectors.base import BaseConnector
from demandsynth.connectors.config import ConnectorConfig, ConnectorType
from demandsynth.connectors.exceptions import (
    AuthenticationError,
    ConnectorError,
    FetchError,
)
from demandsynth.connectors.registry import ConnectorRegistry, get_registry

__all__ = [
    # Base
    "BaseConnector",
    # Config
    "ConnectorConfig",
    "ConnectorType",
    # Exceptions
    "AuthenticationError",
    "ConnectorError",
    "FetchError",
    # Registry
    "ConnectorRegistry",
    "get_registry",
]
