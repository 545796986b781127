"""Input/output schemas for the level engine."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class Archetype(str, Enum):
    """Scan classification that selects the entry/stop/target formula set."""

    BREAKOUT = "breakout"
    PULLBACK = "pullback"
    MOMENTUM = "momentum"
    CONSOLIDATION_BREAKOUT = "consolidation_breakout"
    A_PLUS_MOMENTUM = "a_plus_momentum"
    BREAKOUT_52W = "52w_breakout"


def parse_archetype(value: Archetype | str | None) -> Archetype | None:
    """Return the matching archetype, or ``None`` for an unknown token."""

    if isinstance(value, Archetype):
        return value
    token = (str(value) if value is not None else "").strip().lower().replace("-", "_")
    if not token:
        return None
    try:
        return Archetype(token)
    except ValueError:
        return None


EntryType = Literal["buy_above", "limit"]
Family = Literal["daily", "weekly"]
RejectionKind = Literal["no_data", "economic", "configuration"]


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class MarketSnapshot(BaseModel):
    """Price/indicator bag for one symbol at the close of the last session.

    Every indicator is optional. Non-numeric, NaN and infinite inputs are stored
    as ``None`` so a missing value never masquerades as zero.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    symbol: str | None = None

    open: float | None = Field(default=None, validation_alias=_alias("open", "fridayOpen"))
    high: float | None = Field(default=None, validation_alias=_alias("high", "fridayHigh"))
    low: float | None = Field(default=None, validation_alias=_alias("low", "fridayLow"))
    close: float | None = Field(default=None, validation_alias=_alias("close", "fridayClose", "last"))
    volume: float | None = Field(default=None, validation_alias=_alias("volume", "fridayVolume"))
    avg_volume20: float | None = Field(
        default=None, validation_alias=_alias("avg_volume20", "avgVolume20", "volume_20avg")
    )

    ema20: float | None = None
    ema50: float | None = None
    sma200: float | None = None
    atr: float | None = Field(default=None, validation_alias=_alias("atr", "atr14"))
    rsi: float | None = Field(default=None, validation_alias=_alias("rsi", "rsi14"))

    high_10d: float | None = Field(default=None, validation_alias=_alias("high_10d", "high10D"))
    low_10d: float | None = Field(default=None, validation_alias=_alias("low_10d", "low10D"))
    high_20d: float | None = Field(default=None, validation_alias=_alias("high_20d", "high20D"))
    high_52w: float | None = Field(default=None, validation_alias=_alias("high_52w", "high52W"))

    daily_pivot: float | None = Field(default=None, validation_alias=_alias("daily_pivot", "dailyPivot"))
    daily_r1: float | None = Field(default=None, validation_alias=_alias("daily_r1", "dailyR1"))
    daily_r2: float | None = Field(default=None, validation_alias=_alias("daily_r2", "dailyR2"))
    daily_s1: float | None = Field(default=None, validation_alias=_alias("daily_s1", "dailyS1"))
    weekly_pivot: float | None = Field(default=None, validation_alias=_alias("weekly_pivot", "weeklyPivot"))
    weekly_r1: float | None = Field(default=None, validation_alias=_alias("weekly_r1", "weeklyR1"))
    weekly_r2: float | None = Field(default=None, validation_alias=_alias("weekly_r2", "weeklyR2"))
    weekly_s1: float | None = Field(default=None, validation_alias=_alias("weekly_s1", "weeklyS1"))

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any, info: ValidationInfo) -> Any:
        if info.field_name == "symbol":
            return value
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return number


class _LevelsModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase document handed to persistence/notification collaborators."""

        return self.model_dump(by_alias=True, exclude_none=True)


class TimeRules(_LevelsModel):
    entry_confirmation: Literal["close_above", "touch"]
    entry_window_days: int
    max_hold_days: int
    week_end_rule: Literal["trail_or_exit", "exit_if_no_t1", "hold_if_above_entry"]
    t1_booking_pct: int = 50
    post_t1_stop: Literal["move_to_entry"] = "move_to_entry"


class TradeLevels(_LevelsModel):
    valid: Literal[True] = True
    family: Family
    scan_type: str
    mode: str
    archetype: str
    entry: float
    entry_basis: str | None = None
    entry_range: tuple[float, float]
    stop: float
    target1: float
    target1_basis: str
    target2: float
    target2_basis: str
    target3: float | None = None
    target3_basis: str | None = None
    daily_r1_check: float | None = None
    entry_type: EntryType
    risk_reward: float
    risk_percent: float
    reward_percent: float
    time_rules: TimeRules
    reason: str
    adjustments: list[str] = Field(default_factory=list)


class RejectionResult(_LevelsModel):
    valid: Literal[False] = False
    reason: str
    kind: RejectionKind = "economic"
    no_data: bool | None = None
    suggested_action: str | None = None
    current_rr: float | None = None
    suggested_target: float | None = None
    risk_percent: float | None = None
    reward_percent: float | None = None
    scan_type: str | None = None
    mode: str | None = None
    original_reason: str | None = None

    @classmethod
    def missing(cls, reason: str) -> "RejectionResult":
        """Required inputs were absent or invalid."""

        return cls(reason=reason, kind="no_data", no_data=True)

    @classmethod
    def unknown_archetype(cls, value: Any) -> "RejectionResult":
        return cls(reason=f"Unknown scan type: {value}", kind="configuration", scan_type=str(value))


LevelsResult = Union[TradeLevels, RejectionResult]


__all__ = [
    "Archetype",
    "EntryType",
    "Family",
    "LevelsResult",
    "MarketSnapshot",
    "RejectionKind",
    "RejectionResult",
    "TimeRules",
    "TradeLevels",
    "parse_archetype",
]
