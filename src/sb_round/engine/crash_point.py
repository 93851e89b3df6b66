"""CrashPointGenerator — tiered crash-point distribution.

One draw picks the tier by cumulative probability band, a second draw
interpolates uniformly inside the tier's [low, high) range:

    r = rng.random()                     # 0.55
    bands: [0, .40) [.40, .70) [.70, .90) [.90, 1.0)
    -> tier 2, uniform in [2.00, 5.00)
"""

import math
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from src.sb_common.errors import ConfigurationError
from src.sb_round.domain.config import TierConfig

_PROBABILITY_TOLERANCE = 1e-9


class RandomSource(Protocol):
    """Anything with random() -> float in [0, 1). random.Random(seed) in tests."""

    def random(self) -> float: ...


@dataclass(frozen=True)
class DistributionTier:
    probability: float
    low: float
    high: float
    upper_band: float  # cumulative probability at the end of this tier


def build_tiers(tiers: Sequence[TierConfig]) -> tuple[DistributionTier, ...]:
    """Validate tier configs and attach cumulative bands. Fails fast."""
    if not tiers:
        raise ConfigurationError("at least one distribution tier is required")

    built: list[DistributionTier] = []
    cumulative = 0.0
    for i, tier in enumerate(tiers, start=1):
        if not tier.probability > 0:
            raise ConfigurationError(f"tier {i}: probability must be > 0")
        if tier.low < 1.0:
            raise ConfigurationError(f"tier {i}: low bound {tier.low} is below 1.00")
        if not tier.high > tier.low:
            raise ConfigurationError(
                f"tier {i}: high bound {tier.high} must exceed low bound {tier.low}"
            )
        cumulative += tier.probability
        built.append(DistributionTier(tier.probability, tier.low, tier.high, cumulative))

    if not math.isclose(cumulative, 1.0, abs_tol=_PROBABILITY_TOLERANCE):
        raise ConfigurationError(f"tier probabilities sum to {cumulative}, expected 1.0")
    return tuple(built)


class CrashPointGenerator:
    def __init__(
        self, tiers: Sequence[TierConfig], rng: RandomSource | None = None
    ) -> None:
        self._tiers = build_tiers(tiers)
        self._rng: RandomSource = rng or random.SystemRandom()

    @property
    def tiers(self) -> tuple[DistributionTier, ...]:
        return self._tiers

    def select_tier(self, r: float) -> int:
        """Index of the tier whose cumulative band contains r."""
        for index, tier in enumerate(self._tiers):
            if r < tier.upper_band:
                return index
        # r beyond the last band only through float rounding of the sum
        return len(self._tiers) - 1

    def sample(self) -> float:
        tier = self._tiers[self.select_tier(self._rng.random())]
        value = tier.low + self._rng.random() * (tier.high - tier.low)
        return max(1.0, value)
