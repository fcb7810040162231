"""Configuration management for the labour cost engine."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from labour_cost.calculators.types import PayrollConfig


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment.

    The payroll fields are organization defaults, used when a request does
    not carry its own payroll configuration.
    """

    engine_version: str
    host: str
    port: int
    debug: bool
    log_level: str

    default_hourly_rate: Decimal
    holiday_accrual_ratio: Decimal
    employee_ni_threshold: Decimal
    employee_ni_rate: Decimal
    employee_ni_upper_threshold: Decimal | None
    employee_ni_upper_rate: Decimal
    employer_ni_threshold: Decimal
    employer_ni_rate: Decimal
    weeks_per_month: Decimal
    break_calculation_mode: str

    @property
    def HOST(self) -> str:
        """Alias for host."""
        return self.host

    @property
    def PORT(self) -> int:
        """Alias for port."""
        return self.port

    @property
    def DEBUG(self) -> bool:
        """Alias for debug."""
        return self.debug

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        upper_threshold = os.getenv("EMPLOYEE_NI_UPPER_THRESHOLD", "4189.67")

        return cls(
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            default_hourly_rate=Decimal(os.getenv("DEFAULT_HOURLY_RATE", "10.00")),
            holiday_accrual_ratio=Decimal(os.getenv("HOLIDAY_ACCRUAL_RATIO", "0.1207")),
            employee_ni_threshold=Decimal(os.getenv("EMPLOYEE_NI_THRESHOLD", "1048.67")),
            employee_ni_rate=Decimal(os.getenv("EMPLOYEE_NI_RATE", "0.08")),
            employee_ni_upper_threshold=Decimal(upper_threshold) if upper_threshold else None,
            employee_ni_upper_rate=Decimal(os.getenv("EMPLOYEE_NI_UPPER_RATE", "0.02")),
            employer_ni_threshold=Decimal(os.getenv("EMPLOYER_NI_THRESHOLD", "758.33")),
            employer_ni_rate=Decimal(os.getenv("EMPLOYER_NI_RATE", "0.138")),
            weeks_per_month=Decimal(os.getenv("WEEKS_PER_MONTH", "4.33")),
            break_calculation_mode=os.getenv("BREAK_CALCULATION_MODE", "PER_SHIFT").upper(),
        )

    def payroll_config(self) -> PayrollConfig:
        """Organization defaults as a PayrollConfig (no break rules)."""
        from labour_cost.calculators.types import (
            BreakCalculationMode,
            NIContribution,
            PayrollConfig,
        )

        return PayrollConfig(
            break_calculation_mode=BreakCalculationMode(self.break_calculation_mode),
            break_rules=(),
            employee_ni=NIContribution(
                threshold=self.employee_ni_threshold,
                rate=self.employee_ni_rate,
                upper_threshold=self.employee_ni_upper_threshold,
                upper_rate=self.employee_ni_upper_rate,
            ),
            employer_ni=NIContribution(
                threshold=self.employer_ni_threshold,
                rate=self.employer_ni_rate,
            ),
            holiday_accrual_ratio=self.holiday_accrual_ratio,
            default_hourly_rate=self.default_hourly_rate,
            weeks_per_month=self.weeks_per_month,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
