# push_up_counter.py
"""
Push-up counter driven by the elbow angle, viewed from the side.
"""

from typing import Dict

from repcoach.models.feedback import AngleSet, FeedbackRule, always
from repcoach.models.geometry import calculate_angle
from repcoach.models.landmarks import Landmark
from repcoach.models.workout_counter import ExerciseCounter, ExerciseKind

# Shoulder-hip-ankle line below this is a sagging or piking body
BODY_STRAIGHT_MIN = 150.0

ARMS_LOCKED = 160.0
BOTTOM_ELBOW = 90.0


PUSHUP_RULES = (
    FeedbackRule("Keep your body straight", lambda a: a["body"] < BODY_STRAIGHT_MIN),
    FeedbackRule("Lower your body", lambda a: a["elbow"] > ARMS_LOCKED),
    FeedbackRule("Going down...", lambda a: a["elbow"] > BOTTOM_ELBOW),
    FeedbackRule("Push up! 🔥", always),
)


class PushUpCounter(ExerciseCounter):
    """
    Push-up counter using the shoulder-elbow-wrist angle.
    Arms extended is UP, chest at the floor is DOWN.
    """

    kind = ExerciseKind.PUSHUP
    joints = ("shoulder", "elbow", "wrist", "hip", "ankle")
    primary_angle = "elbow"
    feedback_rules = PUSHUP_RULES

    def measure_angles(self, joints: Dict[str, Landmark]) -> AngleSet:
        return {
            "elbow": calculate_angle(joints["shoulder"], joints["elbow"], joints["wrist"]),
            "body": calculate_angle(joints["shoulder"], joints["hip"], joints["ankle"]),
        }
