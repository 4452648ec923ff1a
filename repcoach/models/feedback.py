# feedback.py
"""
Ordered form-feedback rules.
Each exercise owns a rule table; rules are checked top to bottom and the first
match wins, so safety cues sit above encouragement.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Sequence

AngleSet = Dict[str, float]


@dataclass(frozen=True)
class FeedbackRule:
    message: str
    predicate: Callable[[AngleSet], bool]

    def matches(self, angles: AngleSet) -> bool:
        return bool(self.predicate(angles))


def always(_angles: AngleSet) -> bool:
    return True


def first_match(rules: Sequence[FeedbackRule], angles: AngleSet, default: str = "") -> str:
    """Message of the first rule whose predicate holds."""
    for rule in rules:
        if rule.matches(angles):
            return rule.message
    return default


def classify(exercise: str, angles: AngleSet) -> str:
    """Map one frame's angle set to a coaching message for the given exercise."""
    # Local import, workout_counter imports this module
    from repcoach.models.workout_counter import counter_class_for

    return first_match(counter_class_for(exercise).feedback_rules, angles)
