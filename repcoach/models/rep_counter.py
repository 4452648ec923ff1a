# rep_counter.py
"""
Two-threshold repetition counter.
A rep is one full UP -> DOWN -> UP cycle of the primary joint angle; the gap
between the two thresholds absorbs jitter around a single boundary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from repcoach.errors import ConfigurationError
from repcoach.utils.logging_utils import logger


class RepPhase(Enum):
    """Hysteresis state of the primary joint"""
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class ThresholdConfig:
    up_threshold: float
    down_threshold: float

    def __post_init__(self):
        if not self.down_threshold < self.up_threshold:
            raise ConfigurationError(
                f"down_threshold ({self.down_threshold}) must be below up_threshold ({self.up_threshold})"
            )


class RepCounter:
    """
    Counts repetitions from one primary angle per frame.
    on_rep(count) is called synchronously on every DOWN -> UP transition.
    """

    def __init__(self, config: ThresholdConfig, on_rep: Optional[Callable[[int], None]] = None):
        if not isinstance(config, ThresholdConfig):
            raise ConfigurationError(f"Expected ThresholdConfig, got {type(config).__name__}")
        self.config = config
        self.on_rep = on_rep
        self.phase = RepPhase.UP
        self.count = 0

    def update(self, angle: float) -> int:
        """Feed one primary angle sample. Returns the current count."""
        if self.phase == RepPhase.UP:
            if angle <= self.config.down_threshold:
                self.phase = RepPhase.DOWN
                logger.debug(f"DOWN at {angle:.1f}° (threshold: {self.config.down_threshold}°)")

        elif self.phase == RepPhase.DOWN:
            if angle >= self.config.up_threshold:
                self.phase = RepPhase.UP
                self.count += 1
                logger.info(f"REP #{self.count} completed! UP at {angle:.1f}°")
                if self.on_rep:
                    self.on_rep(self.count)

        return self.count

    def reset(self):
        """Back to UP with zero reps"""
        self.phase = RepPhase.UP
        self.count = 0
