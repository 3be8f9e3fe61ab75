"""Signal-source connector adapters.

Import this module to auto-register all available connectors.

Example:
    # Import adapters module to register all connectors
    import demandsynth.connectors.adapters  # noqa: F401

    # Or import specific connectors
    from demandsynth.connectors.adapters.ga4 import GA4EventsConnector
    from demandsynth.connectors.adapters.search_console import SearchConsoleConnector
"""

from __future__ import annotations

# Importing each adapter registers it with the global registry
from demandsynth.connectors.adapters.ga4 import (
    GA4ConversionsConnector as GA4ConversionsConnector,
)
from demandsynth.connectors.adapters.ga4 import GA4EventsConnector as GA4EventsConnector
from demandsynth.connectors.adapters.google_ads import (
    GoogleAdsConnector as GoogleAdsConnector,
)
from demandsynth.connectors.adapters.hubspot_lifecycle import (
    HubSpotLifecycleConnector as HubSpotLifecycleConnector,
)
from demandsynth.connectors.adapters.search_console import (
    SearchConsoleConnector as SearchConsoleConnector,
)

__all__ = [
    "GA4EventsConnector",
    "GA4ConversionsConnector",
    "GoogleAdsConnector",
    "HubSpotLifecycleConnector",
    "SearchConsoleConnector",
]
