"""Mini README: Centralised configuration for RoadLedger.

Structure:
    * RoadLedgerSettings - Pydantic settings model read from the environment.
    * get_settings - cached accessor so validation runs once per process.

Usage:
    Variables use the ``ROADLEDGER_`` prefix, for example
    ``ROADLEDGER_FUEL_DISCOUNT_PER_GALLON=0.45`` or
    ``ROADLEDGER_LOG_LEVEL=debug``. A local ``.env`` file is honoured.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class RoadLedgerSettings(BaseSettings):
    """Runtime configuration for the RoadLedger services."""

    environment: str = Field(
        "development",
        description="Environment label controlling reload and logging defaults.",
    )
    app_id: str = Field(
        "default-budget-app",
        description="Namespace under which user documents are stored.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the JSON API to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the JSON API exposes.",
        ge=1,
        le=65535,
    )
    fuel_discount_per_gallon: float = Field(
        0.60,
        description="Flat fleet-card discount subtracted from diesel per gallon.",
        ge=0,
    )
    settings_write_delay_seconds: float = Field(
        1.0,
        description="Quiet period before coalesced settings edits are saved.",
        ge=0,
    )
    log_level: str = Field(
        "INFO",
        description="Root logging level name.",
    )

    class Config:
        env_prefix = "ROADLEDGER_"
        env_file = ".env"
        case_sensitive = False

    @validator("log_level", pre=True)
    def _normalise_log_level(cls, value: object) -> str:
        """Accept any casing but reject names logging does not know."""

        name = str(value).strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown logging level: {value}")
        return name


@lru_cache()
def get_settings() -> RoadLedgerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return RoadLedgerSettings()
