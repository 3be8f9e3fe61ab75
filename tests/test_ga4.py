"""Tests for the GA4 connectors."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest

from demandsynth.connectors.adapters.ga4 import GA4ConversionsConnector, GA4EventsConnector
from demandsynth.connectors.config import ConnectorConfig, ConnectorType
from demandsynth.connectors.exceptions import AuthenticationError

START = datetime(2024, 6, 1, tzinfo=UTC)
END = datetime(2024, 6, 30, tzinfo=UTC)


def _row(dimensions: list[str], metrics: list[str]) -> dict:
    return {
        "dimensionValues": [{"value": value} for value in dimensions],
        "metricValues": [{"value": value} for value in metrics],
    }


def _service(*responses: dict) -> MagicMock:
    """Analytics Data API service mock returning the given runReport pages."""
    service = MagicMock()
    service.properties.return_value.runReport.return_value.execute.side_effect = list(responses)
    return service


@pytest.fixture
def events_config() -> ConnectorConfig:
    """GA4 events connector configuration."""
    return ConnectorConfig(
        connector_type=ConnectorType.GA4_EVENTS,
        name="GA4 events",
        credentials={"type": "service_account", "private_key": "-----BEGIN..."},
        connection_params={"property_id": "123456789"},
    )


@pytest.fixture
def conversions_config() -> ConnectorConfig:
    """GA4 conversions connector configuration."""
    return ConnectorConfig(
        connector_type=ConnectorType.GA4_CONVERSIONS,
        name="GA4 conversions",
        connection_params={"property_id": "123456789", "currency": "USD"},
    )


class TestGA4Authentication:
    """Tests for GA4 authentication."""

    def test_authenticate(self, events_config) -> None:
        """Test the Analytics Data API client is built with loaded credentials."""
        with (
            patch("demandsynth.connectors.adapters.ga4.load_google_credentials") as mock_load,
            patch("demandsynth.connectors.adapters.ga4.build") as mock_build,
        ):
            connector = GA4EventsConnector(events_config)
            connector.authenticate()

        assert connector.is_authenticated is True
        mock_load.assert_called_once_with(
            events_config.credentials, ["https://www.googleapis.com/auth/analytics.readonly"]
        )
        mock_build.assert_called_once_with(
            "analyticsdata", "v1beta", credentials=mock_load.return_value, cache_discovery=False
        )

    def test_missing_property(self) -> None:
        """Test a property id is required."""
        config = ConnectorConfig(connector_type=ConnectorType.GA4_EVENTS, name="GA4")
        with pytest.raises(AuthenticationError, match="property_id"):
            GA4EventsConnector(config).authenticate()

    def test_credential_failure(self, events_config) -> None:
        """Test credential errors become AuthenticationError."""
        with (
            patch(
                "demandsynth.connectors.adapters.ga4.load_google_credentials",
                side_effect=ValueError("bad key"),
            ),
            pytest.raises(AuthenticationError, match="bad key"),
        ):
            GA4EventsConnector(events_config).authenticate()


class TestGA4EventsConnector:
    """Tests for GA4EventsConnector."""

    def test_fetch(self, events_config) -> None:
        """Test rows become AnalyticsEvent records."""
        service = _service(
            {
                "rows": [
                    _row(["page_view", "202406151030", "/pricing"], ["3"]),
                    _row(["click", "202406151045", "/blog"], ["1"]),
                ],
                "rowCount": 2,
            }
        )
        with (
            patch("demandsynth.connectors.adapters.ga4.load_google_credentials"),
            patch("demandsynth.connectors.adapters.ga4.build", return_value=service),
        ):
            events = GA4EventsConnector(events_config).fetch(START, END)

        assert len(events) == 2
        assert events[0].event_name == "page_view"
        assert events[0].timestamp == datetime(2024, 6, 15, 10, 30, tzinfo=UTC)
        assert events[0].page == "/pricing"
        assert events[0].session_id == ""
        assert events[0].event_params == {"event_count": 3}
        assert events[1].session_id == ""
        assert events[1].user_id is None

        call = service.properties.return_value.runReport.call_args
        assert call.kwargs["property"] == "properties/123456789"
        body = call.kwargs["body"]
        assert body["dateRanges"] == [{"startDate": "2024-06-01", "endDate": "2024-06-30"}]
        assert [d["name"] for d in body["dimensions"]] == [
            "eventName",
            "dateHourMinute",
            "pagePath",
        ]

    def test_session_dimension(self, events_config) -> None:
        """Test a configured session dimension is requested and populates session_id."""
        events_config.connection_params["session_dimension"] = "customEvent:ga_session_id"
        service = _service(
            {
                "rows": [
                    _row(["page_view", "202406151030", "/pricing", "s-1"], ["3"]),
                    _row(["click", "202406151045", "/blog", "(not set)"], ["1"]),
                ],
                "rowCount": 2,
            }
        )
        with (
            patch("demandsynth.connectors.adapters.ga4.load_google_credentials"),
            patch("demandsynth.connectors.adapters.ga4.build", return_value=service),
        ):
            events = GA4EventsConnector(events_config).fetch(START, END)

        assert [event.session_id for event in events] == ["s-1", ""]
        body = service.properties.return_value.runReport.call_args.kwargs["body"]
        assert body["dimensions"][-1] == {"name": "customEvent:ga_session_id"}

    def test_user_dimension(self, events_config) -> None:
        """Test an optional user dimension populates user_id."""
        events_config.connection_params["user_dimension"] = "customUser:crm_id"
        service = _service(
            {"rows": [_row(["sign_up", "202406151030", "/", "u-9"], ["1"])], "rowCount": 1}
        )
        with (
            patch("demandsynth.connectors.adapters.ga4.load_google_credentials"),
            patch("demandsynth.connectors.adapters.ga4.build", return_value=service),
        ):
            [event] = GA4EventsConnector(events_config).fetch(START, END)

        assert event.user_id == "u-9"

    def test_pagination(self, events_config) -> None:
        """Test report pages are requested until rowCount is reached."""
        service = _service(
            {"rows": [_row(["a", "202406150000", "/", "s"], ["1"])], "rowCount": 2},
            {"rows": [_row(["b", "202406150000", "/", "s"], ["1"])], "rowCount": 2},
        )
        with (
            patch("demandsynth.connectors.adapters.ga4.load_google_credentials"),
            patch("demandsynth.connectors.adapters.ga4.build", return_value=service),
        ):
            connector = GA4EventsConnector(events_config)
            connector.authenticate()
            records = list(connector.fetch_records(START, END))

        assert [r["eventName"] for r in records] == ["a", "b"]
        run_report = service.properties.return_value.runReport
        assert run_report.return_value.execute.call_count == 2

    def test_no_rows(self, events_config) -> None:
        """Test an empty report yields no events."""
        service = _service({"rowCount": 0})
        with (
            patch("demandsynth.connectors.adapters.ga4.load_google_credentials"),
            patch("demandsynth.connectors.adapters.ga4.build", return_value=service),
        ):
            assert GA4EventsConnector(events_config).fetch(START, END) == []


class TestGA4ConversionsConnector:
    """Tests for GA4ConversionsConnector."""

    def test_fetch(self, conversions_config) -> None:
        """Test key event rows become AnalyticsConversion records."""
        service = _service(
            {
                "rows": [
                    _row(
                        ["generate_lead", "202406151030", "google", "cpc", "crm software"],
                        ["2", "50.5"],
                    ),
                    _row(["page_view", "202406151030", "google", "organic", "(not set)"], ["0", "0"]),
                    _row(["purchase", "202406160900", "newsletter", "email", "(not set)"], ["1", ""]),
                ],
                "rowCount": 3,
            }
        )
        with (
            patch("demandsynth.connectors.adapters.ga4.load_google_credentials"),
            patch("demandsynth.connectors.adapters.ga4.build", return_value=service),
        ):
            conversions = GA4ConversionsConnector(conversions_config).fetch(START, END)

        assert [c.conversion_name for c in conversions] == ["generate_lead", "purchase"]
        lead, purchase = conversions
        assert lead.source == "google"
        assert lead.medium == "cpc"
        assert lead.campaign == "crm software"
        assert lead.value == 50.5
        assert lead.currency == "USD"
        assert purchase.campaign is None
        assert purchase.value is None
