# schemas.py
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from repcoach.models.landmarks import Landmark


class SessionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class Session(BaseModel):
    """
    Workout session record as kept by the remote store.
    reps and duration_seconds mirror local counters; the store owns history.
    """
    session_id: str
    exercise: str
    reps: int = 0
    duration_seconds: int = 0
    status: SessionStatus = SessionStatus.PENDING

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "Session":
        """Accept both session_id and sessionId keys from the store."""
        data = dict(payload)
        if "session_id" not in data and "sessionId" in data:
            data["session_id"] = data.pop("sessionId")
        return cls.model_validate(data)


class LandmarkIn(BaseModel):
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None

    def to_landmark(self) -> Landmark:
        return Landmark(x=self.x, y=self.y, z=self.z, visibility=self.visibility)


class StartRequest(BaseModel):
    exercise: str = "squat"


class FrameRequest(BaseModel):
    """One detector frame: joint name -> position, null for undetected joints"""
    landmarks: Dict[str, Optional[LandmarkIn]] = Field(default_factory=dict)

    def to_frame(self) -> Dict[str, Optional[Landmark]]:
        return {name: (point.to_landmark() if point else None) for name, point in self.landmarks.items()}


class WorkoutState(BaseModel):
    """
    Pydantic model representing the live workout state returned to clients.
    """
    exercise: Optional[str] = None              # Active exercise mode
    repCount: int = 0                           # Current repetition count
    phase: str = "up"                           # Hysteresis phase of the primary angle
    angles: Dict[str, float] = Field(default_factory=dict)  # Named joint angles (degrees)
    feedback: Optional[str] = None              # Coaching message for the last detected frame
    detected: bool = False                      # Whether all required joints were found
    durationSeconds: int = 0                    # Elapsed workout time
    sessionId: Optional[str] = None             # Remote session, None while pending or degraded
    degraded: bool = False                      # Remote session could not be created
    isWorkoutActive: bool = False
    framesSent: int = 0                         # Total frames processed in this workout


class WorkoutSummary(BaseModel):
    exercise: str
    reps: int
    durationSeconds: int
    sessionId: Optional[str] = None
    degraded: bool = False
