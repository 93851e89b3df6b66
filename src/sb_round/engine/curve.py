from dataclasses import dataclass

from src.sb_common.errors import ConfigurationError


@dataclass(frozen=True)
class MultiplierCurve:
    """m(t) = base ** (t * scale), t = seconds since RUNNING began.

    Always evaluated from t, never accumulated tick over tick, so irregular
    tick spacing cannot drift the multiplier.
    """

    base: float
    scale: float

    def __post_init__(self) -> None:
        if not self.base > 1:
            raise ConfigurationError(f"curve base must be > 1, got {self.base}")
        if not self.scale > 0:
            raise ConfigurationError(f"curve scale must be > 0, got {self.scale}")

    def __call__(self, elapsed: float) -> float:
        return self.base ** (max(elapsed, 0.0) * self.scale)
