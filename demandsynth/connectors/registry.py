"""
Connector registry.

Maps each ConnectorType to the adapter class that reads that signal source.
There is one registry per process: adapters add themselves when
demandsynth.connectors.adapters is imported, and the agent builds every
connector it uses through create().
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from demandsynth.connectors.config import ConnectorConfig, ConnectorType

if TYPE_CHECKING:
    from demandsynth.connectors.base import BaseConnector

logger = logging.getLogger(__name__)


class ConnectorRegistry:
    """Process-wide table of signal-source adapters.

    Example:
        registry = get_registry()
        registry.register(SearchConsoleConnector)

        connector = registry.create(
            ConnectorConfig(
                connector_type=ConnectorType.SEARCH_CONSOLE,
                name="Search Console",
                connection_params={"site_url": "https://example.com/"},
            )
        )
    """

    _instance: ConnectorRegistry | None = None
    _adapters: dict[ConnectorType, type[BaseConnector]]

    def __new__(cls) -> ConnectorRegistry:
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._adapters = {}
            cls._instance = instance
        return cls._instance

    def __contains__(self, connector_type: ConnectorType) -> bool:
        return connector_type in self._adapters

    def register(self, adapter: type[BaseConnector]) -> type[BaseConnector]:
        """Register an adapter under its declared connector_type.

        Registering a second adapter for the same source replaces the first.

        Returns:
            The adapter class, unchanged.
        """
        source = adapter.connector_type
        previous = self._adapters.get(source)
        if previous is not None and previous is not adapter:
            logger.warning(
                f"Replacing {previous.__name__} with {adapter.__name__} for {source.value}"
            )
        self._adapters[source] = adapter
        logger.debug(f"Registered {adapter.__name__} for {source.value}")
        return adapter

    def unregister(self, connector_type: ConnectorType) -> None:
        """Remove the adapter for a source, if any."""
        self._adapters.pop(connector_type, None)

    def adapter_for(self, connector_type: ConnectorType) -> type[BaseConnector]:
        """Return the adapter class for a source.

        Raises:
            ValueError: If no adapter is registered for the source.
        """
        try:
            return self._adapters[connector_type]
        except KeyError as e:
            raise ValueError(
                f"No connector registered for {connector_type.value}; "
                "import demandsynth.connectors.adapters to register the built-in sources"
            ) from e

    def create(self, config: ConnectorConfig) -> BaseConnector:
        """Instantiate the adapter for config.connector_type.

        Raises:
            ValueError: If no adapter is registered for the source.
        """
        connector = self.adapter_for(config.connector_type)(config)
        logger.debug(f"Created {type(connector).__name__} connector: {config.name}")
        return connector

    def sources(self) -> list[ConnectorType]:
        """Registered sources, in registration order."""
        return list(self._adapters)


def get_registry() -> ConnectorRegistry:
    """Return the process-wide registry."""
    return ConnectorRegistry()
