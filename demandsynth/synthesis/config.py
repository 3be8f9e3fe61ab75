"""Synthesis configuration: date range, qualification thresholds, family weights."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field, model_validator

from demandsynth.signals.schema import SignalFamily

DEFAULT_DAYS_BACK = 30


class DateRange(BaseModel):
    """Inclusive time window for signal fetches."""

    model_config = {"frozen": True}

    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def _check_order(self) -> DateRange:
        if self.end_date <= self.start_date:
            raise ValueError(
                f"end_date ({self.end_date}) must be after start_date ({self.start_date})"
            )
        return self

    @classmethod
    def last_days(cls, days: int = DEFAULT_DAYS_BACK, now: datetime | None = None) -> DateRange:
        """Window covering the ``days`` days up to ``now``."""
        end = now or datetime.now(UTC)
        return cls(start_date=end - timedelta(days=days), end_date=end)


class Thresholds(BaseModel):
    """Qualification gates."""

    model_config = {"frozen": True}

    min_impressions: float = 100
    min_conversions: float = 1
    min_score: float = 0.5


class Weights(BaseModel):
    """Per-family scoring weights. They are not required to sum to 1."""

    model_config = {"frozen": True}

    ga4: float = Field(default=0.25, ge=0)
    lifecycle: float = Field(default=0.35, ge=0)
    search: float = Field(default=0.20, ge=0)
    ads: float = Field(default=0.20, ge=0)

    def by_family(self) -> dict[SignalFamily, float]:
        """Return weights keyed by SignalFamily."""
        return {
            SignalFamily.GA4: self.ga4,
            SignalFamily.LIFECYCLE: self.lifecycle,
            SignalFamily.SEARCH: self.search,
            SignalFamily.ADS: self.ads,
        }


class SynthesisConfig(BaseModel):
    """Configuration for one synthesis run. Read-only for the run's duration."""

    model_config = {"frozen": True}

    date_range: DateRange = Field(default_factory=DateRange.last_days)
    thresholds: Thresholds = Field(default_factory=Thresholds)
    weights: Weights = Field(default_factory=Weights)
