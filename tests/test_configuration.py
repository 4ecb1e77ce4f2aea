"""Mini README: Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from roadledger.configuration import RoadLedgerSettings


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROADLEDGER_FUEL_DISCOUNT_PER_GALLON", "0.45")
    monkeypatch.setenv("ROADLEDGER_LOG_LEVEL", "debug")
    settings = RoadLedgerSettings()
    assert settings.fuel_discount_per_gallon == pytest.approx(0.45)
    assert settings.log_level == "DEBUG"
    assert settings.app_id == "default-budget-app"


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        RoadLedgerSettings(log_level="chatty")
    with pytest.raises(ValidationError):
        RoadLedgerSettings(fuel_discount_per_gallon=-1)
