# squat_counter.py
"""
Squat counter driven by the knee angle.
Hip and back angles only feed form feedback.
"""

from typing import Dict

from repcoach.models.feedback import AngleSet, FeedbackRule, always
from repcoach.models.geometry import calculate_angle
from repcoach.models.landmarks import Landmark, vertical_reference
from repcoach.models.workout_counter import ExerciseCounter, ExerciseKind

# Degrees of torso lean from vertical
BACK_LEAN_LIMIT = 35.0
BACK_LEAN_GOOD = 25.0

# Knee angle bands
STANDING_KNEE = 160.0
SHALLOW_KNEE = 120.0
TARGET_KNEE = 110.0


SQUAT_RULES = (
    FeedbackRule("Keep your chest upright", lambda a: a["back"] > BACK_LEAN_LIMIT),
    FeedbackRule("Stand straight and begin squat", lambda a: a["knee"] > STANDING_KNEE),
    FeedbackRule("Go deeper", lambda a: a["knee"] > SHALLOW_KNEE),
    FeedbackRule("Great form 🔥", lambda a: a["knee"] <= TARGET_KNEE and a["back"] <= BACK_LEAN_GOOD),
    FeedbackRule("Control your movement", always),
)


class SquatCounter(ExerciseCounter):
    """
    Squat repetition counter using knee angle measurements.
    Standing is UP, the bottom of the squat is DOWN.
    """

    kind = ExerciseKind.SQUAT
    joints = ("shoulder", "hip", "knee", "ankle")
    primary_angle = "knee"
    feedback_rules = SQUAT_RULES

    def measure_angles(self, joints: Dict[str, Landmark]) -> AngleSet:
        shoulder, hip = joints["shoulder"], joints["hip"]
        knee, ankle = joints["knee"], joints["ankle"]
        return {
            "knee": calculate_angle(hip, knee, ankle),
            "hip": calculate_angle(shoulder, hip, knee),
            "back": calculate_angle(shoulder, hip, vertical_reference(hip)),
        }
