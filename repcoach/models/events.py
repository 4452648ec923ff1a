import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EventType(str, Enum):
    WORKOUT_STARTED = "workout_started"
    REP_COMPLETED = "rep_completed"
    WORKOUT_STOPPED = "workout_stopped"


@dataclass
class WorkoutEvent:
    type: EventType
    exercise: str
    count: int = 0
    duration_seconds: int = 0
    session_id: Optional[str] = None
    ts: float = field(default_factory=time.time)


def rep_completed(exercise: str, count: int, duration_seconds: int,
                  session_id: Optional[str] = None) -> WorkoutEvent:
    return WorkoutEvent(EventType.REP_COMPLETED, exercise, count, duration_seconds, session_id)
