"""
Workout lifecycle: one handle per active workout owning its counter, duration
timer and session synchronizer. Frames and timer ticks both mutate the handle,
so every mutation goes through the handle's lock.
"""

import threading
from concurrent.futures import Future
from typing import Callable, Optional

from repcoach.config import config
from repcoach.errors import RepCoachError
from repcoach.models.events import EventType, WorkoutEvent, rep_completed
from repcoach.models.landmarks import LandmarkFrame
from repcoach.models.rep_counter import ThresholdConfig
from repcoach.models.schemas import WorkoutState, WorkoutSummary
from repcoach.models.workout_counter import FrameAnalysis, WorkoutCounter
from repcoach.services.session_client import SessionClient
from repcoach.services.session_sync import SessionSynchronizer
from repcoach.services.timer import DurationTimer
from repcoach.utils.logging_utils import logger

EventSink = Callable[[WorkoutEvent], None]


class WorkoutHandle:
    """A single workout from start() to stop(). Not reusable after stop()."""

    def __init__(self, exercise: str,
                 synchronizer: Optional[SessionSynchronizer] = None,
                 thresholds: Optional[ThresholdConfig] = None,
                 tick_interval: Optional[float] = None,
                 event_sink: Optional[EventSink] = None):
        self.counter = WorkoutCounter(exercise, thresholds, on_rep=self._on_rep)
        self.exercise = self.counter.mode.value
        self.sync = synchronizer or SessionSynchronizer()
        self.timer = DurationTimer(tick_interval or config.tick_interval, self._on_tick)
        self.event_sink = event_sink

        self.duration_seconds = 0
        self.active = False
        self.stopped = False
        self.last_analysis: Optional[FrameAnalysis] = None
        # detection result of the most recent frame, last_analysis keeps the last good one
        self.last_detected = False
        self.sync_result: Optional[Future] = None
        self._lock = threading.RLock()

    @property
    def reps(self) -> int:
        return self.counter.count

    def _emit(self, event: WorkoutEvent):
        if self.event_sink is None:
            return
        try:
            self.event_sink(event)
        except Exception as e:
            logger.error(f"Event sink failed for {event.type.value}: {e}")

    def start(self, auth_token: Optional[str] = None):
        with self._lock:
            if self.active or self.stopped:
                raise RepCoachError("Workout handle already used")
            self.counter.reset()
            self.duration_seconds = 0
            self.active = True
            self.sync.start(self.exercise, auth_token=auth_token)
            self.timer.start()
        logger.info(f"Workout started: {self.exercise}")
        self._emit(WorkoutEvent(EventType.WORKOUT_STARTED, self.exercise))

    def process_frame(self, landmarks: Optional[LandmarkFrame]) -> Optional[FrameAnalysis]:
        """Run one detector frame. Frames arriving after stop() are ignored."""
        with self._lock:
            if not self.active:
                return None
            analysis = self.counter.update(landmarks)
            self.last_detected = analysis.detected
            if analysis.detected:
                self.last_analysis = analysis
            return analysis

    def _on_rep(self, count: int):
        # runs inside process_frame, lock held
        self.sync.update(count, self.duration_seconds)
        self._emit(rep_completed(self.exercise, count, self.duration_seconds, self.sync.session_id))

    def _on_tick(self):
        with self._lock:
            if not self.active:
                return
            self.duration_seconds += 1
            reps, duration = self.reps, self.duration_seconds
        self.sync.update(reps, duration)

    def stop(self) -> WorkoutSummary:
        """
        Stop ticking, stop taking frames and hand the final counters to the
        synchronizer. Returns immediately; sync_result resolves later.
        """
        # Timer first and outside our lock, a tick may be waiting on it
        self.timer.stop()
        with self._lock:
            if not self.active:
                raise RepCoachError("Workout is not active")
            self.active = False
            self.stopped = True
            reps, duration = self.reps, self.duration_seconds
            self.sync_result = self.sync.complete(reps, duration)

        logger.info(f"Workout stopped: {self.exercise} reps={reps}, duration={duration}s")
        self._emit(WorkoutEvent(EventType.WORKOUT_STOPPED, self.exercise, reps, duration, self.sync.session_id))
        return WorkoutSummary(
            exercise=self.exercise,
            reps=reps,
            durationSeconds=duration,
            sessionId=self.sync.session_id,
            degraded=self.sync.degraded,
        )

    def state(self) -> WorkoutState:
        with self._lock:
            last = self.last_analysis
            return WorkoutState(
                exercise=self.exercise,
                repCount=self.reps,
                phase=self.counter.phase.value,
                angles={k: round(v, 1) for k, v in last.angles.items()} if last else {},
                feedback=last.feedback if last else None,
                detected=self.last_detected,
                durationSeconds=self.duration_seconds,
                sessionId=self.sync.session_id,
                degraded=self.sync.degraded,
                isWorkoutActive=self.active,
                framesSent=self.counter.frame_count,
            )


class WorkoutService:
    """
    Hosts the single active workout for the HTTP layer.
    Starting a new workout stops the previous one.
    """

    def __init__(self, client: Optional[SessionClient] = None, event_sink: Optional[EventSink] = None):
        self.client = client
        self.event_sink = event_sink
        self.active: Optional[WorkoutHandle] = None
        self._lock = threading.Lock()

    def start(self, exercise: str, auth_token: Optional[str] = None) -> WorkoutHandle:
        # Raises ConfigurationError for an unknown exercise, current workout untouched
        client = self.client or SessionClient()
        handle = WorkoutHandle(exercise, SessionSynchronizer(client), event_sink=self.event_sink)

        with self._lock:
            previous, self.active = self.active, None
        if previous is not None and previous.active:
            logger.info(f"Stopping current {previous.exercise} workout before starting {handle.exercise}")
            previous.stop()

        handle.start(auth_token=auth_token)
        with self._lock:
            self.active = handle
        return handle

    def process_frame(self, landmarks: Optional[LandmarkFrame]) -> Optional[WorkoutState]:
        handle = self.active
        if handle is None:
            return None
        handle.process_frame(landmarks)
        return handle.state()

    def stop(self) -> Optional[WorkoutSummary]:
        with self._lock:
            handle, self.active = self.active, None
        if handle is None or not handle.active:
            return None
        return handle.stop()

    def state(self) -> WorkoutState:
        handle = self.active
        if handle is None:
            return WorkoutState()
        return handle.state()

# Global service instance
workout_service = WorkoutService()
