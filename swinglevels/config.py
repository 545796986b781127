"""Configuration module for the level engine.

Thresholds used by the guardrail validator and the structural target ladders
are read from environment variables (prefix ``SWING_LEVELS_``) or a ``.env``
file through Pydantic's ``BaseSettings``. The defaults are the production rule
set; overriding them is meant for research runs, not for live scans.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SWING_LEVELS_",
        case_sensitive=False,
        extra="ignore",
    )

    tick_size: float = Field(default=0.05, gt=0)
    max_risk_pct: float = Field(default=8.0, gt=0)
    min_risk_pct: float = Field(default=0.5, ge=0)
    min_reward_pct: float = Field(default=2.0, ge=0)
    max_reward_pct: float = Field(default=15.0, gt=0)
    min_rr: float = Field(default=1.2, gt=0)
    structural_min_rr: float = Field(default=1.5, gt=0)
    pullback_min_rr: float = Field(default=1.2, gt=0)
    verify_invariants: bool = False
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("SWING_LEVELS_LOG_LEVEL", "LOG_LEVEL"),
    )
    log_json: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the engine settings."""

    return Settings()


# Buffers of the daily (ATR) family, expressed in ATR multiples.
BREAKOUT_ENTRY_ATR: float = 0.2
BREAKOUT_STOP_ATR: float = 0.1
BREAKOUT_ZONE_FLOOR: float = 0.97
MOMENTUM_ENTRY_ATR: float = 0.15
MOMENTUM_EMA_STOP_ATR: float = 0.1
MOMENTUM_MAX_STOP_ATR: float = 1.2
MOMENTUM_NEAR_HIGH_PCT: float = 0.98
CONSOLIDATION_ENTRY_ATR: float = 0.1
CONSOLIDATION_STOP_ATR: float = 0.1
A_PLUS_ENTRY_ATR: float = 0.15
A_PLUS_EMA_STOP_ATR: float = 0.2
A_PLUS_MAX_STOP_ATR: float = 1.5
PULLBACK_ENTRY_ATR: float = 0.1
PULLBACK_STOP_ATR: float = 0.6
PULLBACK_MAX_DIP_PCT: float = 0.003
PULLBACK_HEALTHY_DISTANCE_ATR: float = 0.4
PULLBACK_MAX_VOLUME_RATIO: float = 1.3
PULLBACK_MIN_RSI: float = 45.0
ENTRY_RANGE_ATR: float = 0.3
CONSOLIDATION_RANGE_ATR: float = 0.2

# 52-week breakout extension ladder.
NEAR_52W_HIGH_PCT: float = 0.995
ATR_EXTENSION_T2: float = 2.5
ATR_EXTENSION_T3: float = 4.0

# Weekly (percentage) family.
WEEKLY_BREAKOUT_ENTRY_PCT: float = 1.005
WEEKLY_PULLBACK_ENTRY_PCT: float = 1.001
WEEKLY_STOP_BUFFER_PCT: float = 0.997
WEEKLY_MAX_STOP_PCT: float = 0.985
WEEKLY_BREAKOUT_RANGE_PCT: float = 1.01
WEEKLY_PULLBACK_RANGE_PCT: float = 1.005
WEEKLY_T2_FALLBACK_PCT: float = 1.03
WEEKLY_T3_FALLBACK_PCT: float = 1.05

# Partial booking band around entry / main target.
T1_MIN_ABOVE_ENTRY_PCT: float = 1.02
T1_MAX_BELOW_TARGET_PCT: float = 0.95
