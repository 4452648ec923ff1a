"""
Keeps the remote session record in step with the local workout.

Local counters are the source of truth while a workout runs. Store requests
run one at a time on a background worker so the frame and timer callbacks
never wait on the network, and a failed request is never retried; the only
substitution is the session-less save when start or complete fails.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Optional, Tuple

from repcoach.errors import RepCoachError, SessionStoreError
from repcoach.services.session_client import SessionClient
from repcoach.utils.logging_utils import logger


class SyncPhase(Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"


class SyncOutcome(str, Enum):
    SYNCED = "synced"                  # complete request accepted
    FALLBACK_SAVED = "fallback_saved"  # stored through the session-less save
    LOST = "lost"                      # fallback save failed too


class SessionSynchronizer:

    def __init__(self, client: Optional[SessionClient] = None):
        self.client = client or SessionClient()
        self.phase = SyncPhase.NOT_STARTED
        self.degraded = False
        self.session_id: Optional[str] = None
        self.exercise: Optional[str] = None
        self.outcome: Optional[SyncOutcome] = None

        self._auth_token: Optional[str] = None
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="session-sync")
        self._last_future: Optional[Future] = None
        self._closed = False
        self._latest: Tuple[int, int] = (0, 0)
        self._update_queued = False

    def _submit(self, fn, *args) -> Future:
        # caller holds self._lock
        self._last_future = self._executor.submit(fn, *args)
        return self._last_future

    def start(self, exercise: str, auth_token: Optional[str] = None) -> Future:
        """Queue the create request. The returned future yields the session id or None."""
        with self._lock:
            if self.phase != SyncPhase.NOT_STARTED:
                raise RepCoachError(f"Session sync already {self.phase.value}")
            self.phase = SyncPhase.ACTIVE
            self.exercise = exercise
            self._auth_token = auth_token
            return self._submit(self._create)

    def _create(self) -> Optional[str]:
        try:
            session = self.client.create_session(self.exercise, auth_token=self._auth_token)
        except SessionStoreError as e:
            logger.warning(f"Start session failed, counting locally only: {e}")
            with self._lock:
                self.degraded = True
            return None

        with self._lock:
            self.session_id = session.session_id
        logger.info(f"Session started: {session.session_id} ({self.exercise})")
        return session.session_id

    def update(self, reps: int, duration_seconds: int):
        """
        Mirror the absolute counters to the store without waiting.
        While an update is still queued, newer counters replace its payload.
        """
        with self._lock:
            if self.phase != SyncPhase.ACTIVE or self._closed:
                return
            self._latest = (reps, duration_seconds)
            if self._update_queued:
                return
            self._update_queued = True
            self._submit(self._push_update)

    def _push_update(self):
        with self._lock:
            self._update_queued = False
            reps, duration_seconds = self._latest
            session_id = self.session_id
        if session_id is None:
            return

        try:
            self.client.update_session(
                session_id, reps=reps, duration_seconds=duration_seconds, auth_token=self._auth_token
            )
        except SessionStoreError as e:
            logger.warning(f"Update session {session_id} failed: {e}")

    def complete(self, reps: int, duration_seconds: int) -> Future:
        """
        Queue the final write and release the worker once it has run.
        The returned future yields a SyncOutcome; nothing waits on it here.
        """
        with self._lock:
            if self.phase == SyncPhase.NOT_STARTED:
                raise RepCoachError("Cannot complete a session that was never started")
            if self._closed:
                raise RepCoachError("Session sync already completed")
            self._closed = True
            self._latest = (reps, duration_seconds)
            future = self._submit(self._finish, reps, duration_seconds)
        self._executor.shutdown(wait=False)
        return future

    def _finish(self, reps: int, duration_seconds: int) -> SyncOutcome:
        session_id = self.session_id
        if session_id:
            try:
                self.client.complete_session(
                    session_id, reps, duration_seconds, auth_token=self._auth_token
                )
                logger.info(f"Session completed: {session_id} reps={reps}, duration={duration_seconds}s")
                outcome = SyncOutcome.SYNCED
            except SessionStoreError as e:
                logger.warning(f"Complete session {session_id} failed, falling back to plain save: {e}")
                outcome = self._fallback_save(reps, duration_seconds)
        else:
            outcome = self._fallback_save(reps, duration_seconds)

        with self._lock:
            self.phase = SyncPhase.COMPLETED
            self.outcome = outcome
        return outcome

    def _fallback_save(self, reps: int, duration_seconds: int) -> SyncOutcome:
        try:
            self.client.save_workout(self.exercise, reps, duration_seconds, auth_token=self._auth_token)
        except SessionStoreError as e:
            logger.error(f"Could not save {self.exercise} workout (reps={reps}, duration={duration_seconds}s): {e}")
            return SyncOutcome.LOST
        return SyncOutcome.FALLBACK_SAVED

    def wait(self, timeout: Optional[float] = None):
        """Block until every queued request has run. Meant for shutdown and tests."""
        with self._lock:
            future = self._last_future
        if future is not None:
            future.result(timeout=timeout)
