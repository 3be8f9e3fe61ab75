"""
Connector base class.

A connector reads one signal source over a date range and returns typed
signal records. Adapters supply three steps:
- authenticate(): build the API client from config.credentials
- fetch_records(): yield the source's raw rows for the range
- normalize(): turn those rows into signal records

fetch() runs the steps in order and is the only method the agent calls.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Generator
from datetime import datetime
from typing import Any, ClassVar

from demandsynth.connectors.config import ConnectorConfig, ConnectorType
from demandsynth.connectors.exceptions import ConnectorError, FetchError

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """Abstract signal-source connector.

    Concrete adapters declare which source they read via the connector_type
    class attribute; abstract intermediates (declared with ABC as a direct
    base) may leave it unset.

    Example:
        with SearchConsoleConnector(config) as connector:
            rows = connector.fetch(start, end)
    """

    connector_type: ClassVar[ConnectorType]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if ABC in cls.__bases__:
            return
        if getattr(cls, "connector_type", None) is None:
            raise TypeError(f"Connector {cls.__name__} does not declare a connector_type")

    def __init__(self, config: ConnectorConfig):
        self.config = config
        self._client: Any = None
        self._authenticated = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.config.name!r})"

    def __enter__(self) -> BaseConnector:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    @abstractmethod
    def authenticate(self) -> None:
        """Build the API client and mark the connector authenticated.

        Raises:
            AuthenticationError: If the credentials are rejected or unusable.
        """

    @abstractmethod
    def fetch_records(
        self,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Generator[dict[str, Any], None, None]:
        """Yield raw source rows observed between since and until."""

    @abstractmethod
    def normalize(self, raw_records: list[dict[str, Any]]) -> list[Any]:
        """Convert raw source rows to signal records."""

    def _cleanup_client(self) -> None:  # noqa: B027
        """Release the API client. Adapters holding a closable client override this."""

    def test_connection(self) -> bool:
        """Return True if authentication succeeds; failures are logged."""
        try:
            self.authenticate()
        except Exception as e:
            logger.warning(f"Connection test failed for {self.config.name}: {e}")
            return False
        return True

    def fetch(self, start: datetime, end: datetime) -> list[Any]:
        """Return every signal record for [start, end].

        No data is an empty list. Authentication and transport failures
        raise; they never degrade to an empty result.

        Raises:
            ValueError: If start is not before end.
            AuthenticationError: If authentication fails.
            FetchError: If the source cannot be read.
        """
        if start >= end:
            raise ValueError(
                f"{self.config.name}: start ({start.isoformat()}) must be before "
                f"end ({end.isoformat()})"
            )

        if not self._authenticated:
            self.authenticate()

        logger.info(f"Fetching {self.config.name} for {start.date()} to {end.date()}")
        try:
            raw_records = list(self.fetch_records(since=start, until=end))
        except ConnectorError:
            raise
        except Exception as e:
            raise FetchError(f"Failed to read {self.config.name}: {e}") from e

        records = self.normalize(raw_records)
        logger.info(
            f"{self.config.name}: {len(records)} records",
            extra={"connector_type": self.connector_type.value, "raw_count": len(raw_records)},
        )
        return records

    def close(self) -> None:
        """Release the client and reset authentication."""
        logger.debug(f"Closing connector: {self.config.name}")
        self._cleanup_client()
        self._client = None
        self._authenticated = False
