"""
Agent configuration - integration credentials and synthesis settings.

Both are loaded from environment variables (a .env file is read by the
entry points). HubSpot is required; GA4, Search Console and Google Ads are
enabled only when their identifying variable is set.
"""

from __future__ import annotations

import json
import os
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from demandsynth.events.mapping import DEFAULT_APP_ID
from demandsynth.synthesis.config import (
    DEFAULT_DAYS_BACK,
    DateRange,
    SynthesisConfig,
    Thresholds,
    Weights,
)


class ConfigurationError(ValueError):
    """Raised when required configuration is missing or malformed."""

    pass


class HubSpotSettings(BaseModel):
    """HubSpot credentials (required)."""

    api_key: str = Field(default="", repr=False)
    portal_id: str = ""
    app_id: str = DEFAULT_APP_ID


class GA4Settings(BaseModel):
    """GA4 property settings.

    session_dimension names a custom dimension holding the session id (for
    example customEvent:ga_session_id). Set it only when that dimension is
    registered on the property; otherwise GA4 rejects the report.
    """

    property_id: str
    credentials: dict[str, Any] | None = Field(default=None, repr=False)
    currency: str | None = None
    session_dimension: str | None = None


class SearchConsoleSettings(BaseModel):
    site_url: str
    credentials: dict[str, Any] | None = Field(default=None, repr=False)


class GoogleAdsSettings(BaseModel):
    customer_id: str
    api_version: str | None = None
    credentials: dict[str, Any] | None = Field(default=None, repr=False)


class IntegrationConfig(BaseModel):
    """Which signal sources are configured, with their credentials."""

    hubspot: HubSpotSettings = Field(default_factory=HubSpotSettings)
    ga4: GA4Settings | None = None
    search_console: SearchConsoleSettings | None = None
    google_ads: GoogleAdsSettings | None = None


def _env_json(name: str) -> dict[str, Any] | None:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{name} must be valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ConfigurationError(f"{name} must be a JSON object")
    return value


def _env_number(name: str, default: float, cast: type = float) -> Any:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return cast(default)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def load_integration_config() -> IntegrationConfig:
    """Load integration settings from environment variables.

    Variables:
        HUBSPOT_API_KEY, HUBSPOT_PORTAL_ID, HUBSPOT_APP_ID
        GA4_PROPERTY_ID, GA4_CREDENTIALS (JSON), GA4_CURRENCY, GA4_SESSION_DIMENSION
        GSC_SITE_URL, GSC_CREDENTIALS (JSON)
        GOOGLE_ADS_CUSTOMER_ID, GOOGLE_ADS_CREDENTIALS (JSON), GOOGLE_ADS_API_VERSION

    Raises:
        ConfigurationError: If a credentials variable is not a JSON object.
    """
    ga4 = None
    if os.getenv("GA4_PROPERTY_ID"):
        ga4 = GA4Settings(
            property_id=os.environ["GA4_PROPERTY_ID"],
            credentials=_env_json("GA4_CREDENTIALS"),
            currency=os.getenv("GA4_CURRENCY"),
            session_dimension=os.getenv("GA4_SESSION_DIMENSION") or None,
        )

    search_console = None
    if os.getenv("GSC_SITE_URL"):
        search_console = SearchConsoleSettings(
            site_url=os.environ["GSC_SITE_URL"],
            credentials=_env_json("GSC_CREDENTIALS"),
        )

    google_ads = None
    if os.getenv("GOOGLE_ADS_CUSTOMER_ID"):
        google_ads = GoogleAdsSettings(
            customer_id=os.environ["GOOGLE_ADS_CUSTOMER_ID"],
            api_version=os.getenv("GOOGLE_ADS_API_VERSION") or None,
            credentials=_env_json("GOOGLE_ADS_CREDENTIALS"),
        )

    return IntegrationConfig(
        hubspot=HubSpotSettings(
            api_key=os.getenv("HUBSPOT_API_KEY", ""),
            portal_id=os.getenv("HUBSPOT_PORTAL_ID", ""),
            app_id=os.getenv("HUBSPOT_APP_ID") or DEFAULT_APP_ID,
        ),
        ga4=ga4,
        search_console=search_console,
        google_ads=google_ads,
    )


def load_synthesis_config(now: datetime | None = None) -> SynthesisConfig:
    """Load synthesis settings from environment variables, with defaults.

    Variables:
        DAYS_BACK (30), MIN_IMPRESSIONS (100), MIN_CONVERSIONS (1),
        MIN_SCORE (0.5), WEIGHT_GA4 (0.25), WEIGHT_LIFECYCLE (0.35),
        WEIGHT_SEARCH (0.20), WEIGHT_ADS (0.20)

    Raises:
        ConfigurationError: If a value is not numeric or out of range.
    """
    days_back = _env_number("DAYS_BACK", DEFAULT_DAYS_BACK, int)
    try:
        return SynthesisConfig(
            date_range=DateRange.last_days(days_back, now=now or datetime.now(UTC)),
            thresholds=Thresholds(
                min_impressions=_env_number("MIN_IMPRESSIONS", 100, int),
                min_conversions=_env_number("MIN_CONVERSIONS", 1, int),
                min_score=_env_number("MIN_SCORE", 0.5),
            ),
            weights=Weights(
                ga4=_env_number("WEIGHT_GA4", 0.25),
                lifecycle=_env_number("WEIGHT_LIFECYCLE", 0.35),
                search=_env_number("WEIGHT_SEARCH", 0.20),
                ads=_env_number("WEIGHT_ADS", 0.20),
            ),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid synthesis configuration: {e}") from e


def validate_config(config: IntegrationConfig) -> None:
    """Check required settings before any network activity.

    Raises:
        ConfigurationError: If HubSpot credentials are missing.
    """
    if not config.hubspot.api_key:
        raise ConfigurationError("HUBSPOT_API_KEY is required")
    if not config.hubspot.portal_id:
        raise ConfigurationError("HUBSPOT_PORTAL_ID is required")
