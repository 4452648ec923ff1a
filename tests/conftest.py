import math
import re
import threading
import time
import uuid
from typing import Dict, Optional
from urllib.parse import urlparse

import pytest
import requests

from repcoach.models.landmarks import Landmark
from repcoach.services.session_client import SessionClient

STORE_URL = "http://store.test"


class FakeResponse:
    def __init__(self, status_code: int, payload=None):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class FakeStore:
    """
    In-memory session store speaking the same routes as the real one.
    Add an operation name to `failing` for a 503 or to `offline` for a connection error.
    """

    def __init__(self):
        self.sessions: Dict[str, dict] = {}
        self.workouts = []
        self.calls = []
        self.failing = set()
        self.offline = set()
        self._lock = threading.Lock()

    def route(self, method, path):
        if method == "POST" and path == "/session":
            return "create", None
        m = re.fullmatch(r"/session/([^/]+)", path)
        if method == "PATCH" and m:
            return "update", m.group(1)
        m = re.fullmatch(r"/session/([^/]+)/complete", path)
        if method == "POST" and m:
            return "complete", m.group(1)
        if method == "POST" and path == "/workout":
            return "save", None
        return None, None

    def request(self, method, url, json=None, headers=None, timeout=None):
        path = urlparse(url).path
        op, session_id = self.route(method, path)
        with self._lock:
            self.calls.append({"op": op, "path": path, "json": json, "headers": headers or {}})
        if op in self.offline:
            raise requests.ConnectionError("store offline")
        if op in self.failing:
            return FakeResponse(503, {"error": "unavailable"})
        if op is None:
            return FakeResponse(404, {"error": "not found"})

        with self._lock:
            if op == "create":
                sid = uuid.uuid4().hex
                self.sessions[sid] = {
                    "session_id": sid, "exercise": json["exercise"],
                    "reps": 0, "duration_seconds": 0, "status": "active",
                }
                return FakeResponse(201, dict(self.sessions[sid]))
            record = self.sessions.get(session_id)
            if op in ("update", "complete") and record is None:
                return FakeResponse(404, {"error": "unknown session"})
            if op == "update":
                record.update({k: v for k, v in json.items() if k in ("reps", "duration_seconds")})
                return FakeResponse(200, dict(record))
            if op == "complete":
                record.update(json)
                record["status"] = "completed"
                return FakeResponse(200, dict(record))
            self.workouts.append(dict(json))
            return FakeResponse(201, dict(json))

    def ops(self):
        return [call["op"] for call in self.calls]


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client(store):
    return SessionClient(base_url=STORE_URL, timeout=1.0, http=store)


def squat_frame(knee: float, back: float = 0.0, side: str = "right") -> Dict[str, Optional[Landmark]]:
    """Side-view squat pose with the given knee angle and torso lean from vertical."""
    hip = Landmark(0.5, 0.5)
    knee_pt = Landmark(0.5, 0.7)
    rad = math.radians(knee)
    ankle = Landmark(knee_pt.x + 0.2 * math.sin(rad), knee_pt.y - 0.2 * math.cos(rad))
    lean = math.radians(back)
    shoulder = Landmark(hip.x + 0.2 * math.sin(lean), hip.y - 0.2 * math.cos(lean))
    return {
        f"{side}_shoulder": shoulder,
        f"{side}_hip": hip,
        f"{side}_knee": knee_pt,
        f"{side}_ankle": ankle,
    }


def pushup_frame(elbow: float, body: float = 180.0) -> Dict[str, Optional[Landmark]]:
    """Side-view push-up pose with the given elbow and shoulder-hip-ankle angles."""
    shoulder = Landmark(0.3, 0.5)
    elbow_pt = Landmark(0.3, 0.65)
    rad = math.radians(elbow)
    wrist = Landmark(elbow_pt.x + 0.15 * math.sin(rad), elbow_pt.y - 0.15 * math.cos(rad))
    hip = Landmark(0.6, 0.5)
    bend = math.radians(180.0 - body)
    ankle = Landmark(hip.x + 0.3 * math.cos(bend), hip.y + 0.3 * math.sin(bend))
    return {
        "right_shoulder": shoulder,
        "right_elbow": elbow_pt,
        "right_wrist": wrist,
        "right_hip": hip,
        "right_ankle": ankle,
    }
