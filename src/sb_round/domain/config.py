"""Game configuration — one shared engine, two variant presets.

The two variants differ only in numeric tuning (timings, tier widths, curve
constants, history size). Anything not given as an override comes from the
variant preset.

Usage:
    config = load_game_config("aviator", countdown_seconds=5)
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.sb_common.enums import GameType
from src.sb_common.errors import ConfigurationError


class TierConfig(BaseModel):
    """One band of the crash-point distribution: uniform in [low, high)."""

    model_config = ConfigDict(frozen=True)

    probability: float = Field(..., gt=0, le=1)
    low: float = Field(..., ge=1.0)
    high: float


class GameConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    game_type: GameType
    countdown_seconds: float = Field(..., gt=0)
    settle_seconds: float = Field(..., gt=0)
    tick_interval_ms: int = Field(..., gt=0)
    min_bet: int = Field(25, ge=1)
    max_bet_multiplier_of_balance: float = Field(1.0, gt=0, le=1)
    history_capacity: int = Field(..., ge=1)
    bet_retention_rounds: int = Field(100, ge=1)  # settled rounds whose bets stay queryable
    distribution_tiers: tuple[TierConfig, ...]
    curve_base: float = Field(..., gt=1)
    curve_scale: float = Field(..., gt=0)

    @property
    def tick_interval_seconds(self) -> float:
        return self.tick_interval_ms / 1000


def _tiers(*bands: tuple[float, float, float]) -> tuple[TierConfig, ...]:
    return tuple(TierConfig(probability=p, low=lo, high=hi) for p, lo, hi in bands)


# Crash: 1.05 ** t (t in seconds), long tail up to 100x
CRASH_PRESET = GameConfig(
    game_type=GameType.CRASH,
    countdown_seconds=5,
    settle_seconds=3,
    tick_interval_ms=100,
    history_capacity=7,
    distribution_tiers=_tiers(
        (0.40, 1.0, 2.0),
        (0.30, 2.0, 5.0),
        (0.20, 5.0, 15.0),
        (0.10, 15.0, 100.0),
    ),
    curve_base=1.05,
    curve_scale=1.0,
)

# Aviator: 1.0024 ** (100 t), ~0.24% compounding per 10ms
AVIATOR_PRESET = GameConfig(
    game_type=GameType.AVIATOR,
    countdown_seconds=7,
    settle_seconds=4,
    tick_interval_ms=50,
    history_capacity=10,
    distribution_tiers=_tiers(
        (0.40, 1.0, 2.0),
        (0.30, 2.0, 5.0),
        (0.20, 5.0, 10.0),
        (0.10, 10.0, 50.0),
    ),
    curve_base=1.0024,
    curve_scale=100.0,
)

VARIANT_PRESETS: dict[GameType, GameConfig] = {
    GameType.CRASH: CRASH_PRESET,
    GameType.AVIATOR: AVIATOR_PRESET,
}


def load_game_config(variant: str | GameType, **overrides: Any) -> GameConfig:
    """Merge a variant preset with overrides.

    Raises ConfigurationError for an unknown variant or any invalid option.
    Tier shape (probabilities, bounds) is checked by CrashPointGenerator.
    """
    try:
        game_type = GameType(variant)
    except ValueError:
        raise ConfigurationError(
            f"unknown game variant {variant!r}, expected one of {[g.value for g in GameType]}"
        ) from None

    data = VARIANT_PRESETS[game_type].model_dump()
    data.update(overrides)
    data["game_type"] = game_type
    try:
        return GameConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
