# settings.py — app configuration (env vars prefixed MRR_GAP_, optional .env)
"""
Settings for the calculator page: sidebar defaults, page title and logging.

The fee, tax and reserve assumptions are not configurable; they live as
constants in mrr_gap.calculator.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mrr_gap.calculator import PROCESSORS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MRR_GAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        # MRR_GAP_DEFAULT_MRR=none starts the page with an empty field
        env_parse_none_str="none",
    )

    # --- Page ---
    page_title: str = "MRR vs Bank Account Calculator"

    # --- Sidebar defaults (ranges match the widgets) ---
    default_mrr: Optional[float] = Field(default=10_000.0, ge=0.0, le=10_000_000.0)
    default_processor: Optional[str] = "stripe"
    default_refund_rate: float = Field(default=2.0, ge=0.0, le=10.0)
    default_chargeback_rate: float = Field(default=0.5, ge=0.0, le=5.0)
    default_eu_uk_sales_percent: float = Field(default=30.0, ge=0.0, le=100.0)
    default_us_sales_percent: float = Field(default=50.0, ge=0.0, le=100.0)
    default_new_stripe_account: bool = False

    # --- Logging ---
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("default_processor")
    @classmethod
    def validate_processor(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.lower()
        if v not in PROCESSORS:
            raise ValueError(f"Unknown processor {v!r}; expected one of {', '.join(PROCESSORS)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level {v!r}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
