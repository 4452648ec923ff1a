from typing import Any, Dict, Optional

import requests

from repcoach.config import config
from repcoach.errors import SessionStoreError
from repcoach.models.schemas import Session
from repcoach.utils.logging_utils import logger


class SessionClient:
    """
    Thin JSON client for the remote workout session store.
    Every failure, transport or HTTP status, surfaces as SessionStoreError.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 http: Optional[requests.Session] = None):
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.http = http or requests.Session()

    @staticmethod
    def auth_headers(auth_token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"
        return headers

    def _request(self, method: str, path: str, body: Dict[str, Any],
                 auth_token: Optional[str]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(
                method, url, json=body, headers=self.auth_headers(auth_token), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise SessionStoreError(f"{method} {path} failed: {e}") from e

        if not resp.ok:
            raise SessionStoreError(f"{method} {path} returned {resp.status_code}", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError:
            # Some stores answer 200/201 with an empty body
            return {}

    def create_session(self, exercise: str, auth_token: Optional[str] = None) -> Session:
        data = self._request("POST", config.session_route, {"exercise": exercise}, auth_token)
        try:
            return Session.from_response(data)
        except ValueError as e:
            raise SessionStoreError(f"Malformed session response: {data!r}") from e

    def update_session(self, session_id: str, reps: Optional[int] = None,
                       duration_seconds: Optional[int] = None,
                       auth_token: Optional[str] = None) -> Dict[str, Any]:
        body = {}
        if reps is not None:
            body["reps"] = reps
        if duration_seconds is not None:
            body["duration_seconds"] = duration_seconds
        return self._request("PATCH", f"{config.session_route}/{session_id}", body, auth_token)

    def complete_session(self, session_id: str, reps: int, duration_seconds: int,
                         auth_token: Optional[str] = None) -> Dict[str, Any]:
        body = {"reps": reps, "duration_seconds": duration_seconds}
        return self._request("POST", f"{config.session_route}/{session_id}/complete", body, auth_token)

    def save_workout(self, exercise: str, reps: int, duration_seconds: int,
                     auth_token: Optional[str] = None) -> Dict[str, Any]:
        """Session-less save, used when the lifecycle calls are unavailable."""
        body = {"exercise": exercise, "reps": reps, "duration_seconds": duration_seconds}
        logger.info(f"Saving {exercise} workout without a session: reps={reps}, duration={duration_seconds}s")
        return self._request("POST", config.workout_route, body, auth_token)
