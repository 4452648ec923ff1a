# workout_counter.py
"""
Main workout counter that manages exercise-specific counters.
Uses composition: each exercise measures its own angles and owns its feedback
rules, while repetition counting is delegated to a shared RepCounter.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Type, Union

from repcoach.config import config
from repcoach.errors import ConfigurationError
from repcoach.models.feedback import AngleSet, FeedbackRule, classify
from repcoach.models.landmarks import Landmark, LandmarkFrame
from repcoach.models.rep_counter import RepCounter, RepPhase, ThresholdConfig
from repcoach.utils.logging_utils import logger


class ExerciseKind(str, Enum):
    SQUAT = "squat"
    PUSHUP = "pushup"


@dataclass
class FrameAnalysis:
    """Outcome of one frame. detected is False when required joints were missing."""
    count: int
    phase: RepPhase
    detected: bool
    angles: AngleSet = field(default_factory=dict)
    feedback: Optional[str] = None


class ExerciseCounter(ABC):
    """
    Abstract base class for exercise-specific counters.
    Subclasses declare which joints they need, how to turn them into named
    angles, which angle drives counting, and their feedback rule table.
    """

    kind: ExerciseKind
    joints: Tuple[str, ...] = ()
    sides: Tuple[str, ...] = ("right", "left")
    primary_angle: str = ""
    feedback_rules: Sequence[FeedbackRule] = ()

    def __init__(self, thresholds: Optional[ThresholdConfig] = None,
                 on_rep: Optional[Callable[[int], None]] = None):
        self.thresholds = thresholds or self.default_thresholds()
        self.rep_counter = RepCounter(self.thresholds, on_rep=on_rep)
        self.frame_count = 0

    @classmethod
    def default_thresholds(cls) -> ThresholdConfig:
        values = config.thresholds_for(cls.kind.value)
        return ThresholdConfig(up_threshold=values["up"], down_threshold=values["down"])

    @abstractmethod
    def measure_angles(self, joints: Dict[str, Landmark]) -> AngleSet:
        """Compute named angles from one side's joints"""

    @property
    def count(self) -> int:
        return self.rep_counter.count

    @property
    def phase(self) -> RepPhase:
        return self.rep_counter.phase

    def select_side(self, landmarks: LandmarkFrame) -> Optional[Dict[str, Landmark]]:
        """Joints of the first body side where every required joint was detected."""
        for side in self.sides:
            picked = {}
            for joint in self.joints:
                point = landmarks.get(f"{side}_{joint}")
                if point is None or not point.is_valid():
                    break
                picked[joint] = point
            else:
                return picked
        return None

    def analyze_pose(self, landmarks: Optional[LandmarkFrame]) -> FrameAnalysis:
        """
        Measure angles, classify form and advance the rep counter for one frame.
        A frame without a complete side is a detection gap: nothing changes.
        """
        self.frame_count += 1

        joints = self.select_side(landmarks or {})
        if joints is None:
            return FrameAnalysis(count=self.count, phase=self.phase, detected=False)

        angles = self.measure_angles(joints)
        feedback = classify(self.kind, angles)
        self.rep_counter.update(angles[self.primary_angle])

        return FrameAnalysis(
            count=self.count,
            phase=self.phase,
            detected=True,
            angles=angles,
            feedback=feedback,
        )

    def reset(self):
        """Reset counter to initial state"""
        self.rep_counter.reset()
        self.frame_count = 0

    def get_status(self) -> Dict[str, Any]:
        """Get current counter status for debugging"""
        return {
            "count": self.count,
            "phase": self.phase.value,
            "frame_count": self.frame_count,
            "thresholds": {
                "up": self.thresholds.up_threshold,
                "down": self.thresholds.down_threshold,
            },
        }


def counter_class_for(mode: Union[str, ExerciseKind]) -> Type[ExerciseCounter]:
    """
    Map an exercise to its counter class.
    Imports are done locally to avoid circular import issues.
    """
    from repcoach.models.push_up_counter import PushUpCounter
    from repcoach.models.squat_counter import SquatCounter

    counters = {
        ExerciseKind.SQUAT: SquatCounter,
        ExerciseKind.PUSHUP: PushUpCounter,
    }

    try:
        kind = ExerciseKind(mode)
    except ValueError:
        raise ConfigurationError(f"Unsupported exercise: {mode}") from None
    return counters[kind]


class WorkoutCounter:
    """
    Workout coordinator that delegates to an exercise-specific counter.
    The exercise is fixed at construction; one interface for all exercises.
    """

    def __init__(self, mode: Union[str, ExerciseKind] = ExerciseKind.SQUAT,
                 thresholds: Optional[ThresholdConfig] = None,
                 on_rep: Optional[Callable[[int], None]] = None):
        self.counter: ExerciseCounter = counter_class_for(mode)(thresholds, on_rep=on_rep)
        self.mode = self.counter.kind
        logger.info(f"WorkoutCounter initialized with mode: {self.mode.value}")

    @property
    def count(self) -> int:
        """Get current repetition count"""
        return self.counter.count

    @property
    def phase(self) -> RepPhase:
        return self.counter.phase

    @property
    def frame_count(self) -> int:
        return self.counter.frame_count

    def update(self, landmarks: Optional[LandmarkFrame]) -> FrameAnalysis:
        """Process one detector frame through the exercise-specific counter."""
        return self.counter.analyze_pose(landmarks)

    def reset(self):
        """Reset current counter state to initial values"""
        self.counter.reset()
        logger.info(f"Reset {self.mode.value} counter")

    def get_status(self) -> Dict[str, Any]:
        """Get comprehensive workout status for debugging"""
        status = self.counter.get_status()
        status["mode"] = self.mode.value
        return status
