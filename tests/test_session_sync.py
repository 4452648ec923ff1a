import threading

import pytest

from repcoach.errors import RepCoachError
from repcoach.services.session_sync import SessionSynchronizer, SyncOutcome, SyncPhase


@pytest.fixture
def sync(client):
    return SessionSynchronizer(client)


def test_lifecycle_happy_path(sync, store):
    assert sync.phase == SyncPhase.NOT_STARTED
    sid = sync.start("squat", auth_token="tok").result(timeout=2)
    assert sync.phase == SyncPhase.ACTIVE
    assert sid == sync.session_id
    assert not sync.degraded

    sync.update(1, 3)
    sync.wait(timeout=2)
    outcome = sync.complete(1, 4).result(timeout=2)

    assert outcome == SyncOutcome.SYNCED
    assert sync.phase == SyncPhase.COMPLETED
    record = store.sessions[sid]
    assert record["status"] == "completed"
    assert (record["reps"], record["duration_seconds"]) == (1, 4)
    assert all(call["headers"]["Authorization"] == "Bearer tok" for call in store.calls)
    assert store.workouts == []


def test_updates_carry_absolute_counters(sync, store):
    sid = sync.start("pushup").result(timeout=2)
    for reps, duration in [(1, 1), (1, 2), (2, 2)]:
        sync.update(reps, duration)
        sync.wait(timeout=2)
    updates = [call["json"] for call in store.calls if call["op"] == "update"]
    assert updates == [
        {"reps": 1, "duration_seconds": 1},
        {"reps": 1, "duration_seconds": 2},
        {"reps": 2, "duration_seconds": 2},
    ]
    assert store.sessions[sid]["reps"] == 2


def test_failed_start_degrades_and_falls_back_once(sync, store):
    store.failing.add("create")
    assert sync.start("squat").result(timeout=2) is None
    assert sync.degraded
    assert sync.phase == SyncPhase.ACTIVE

    sync.update(2, 5)
    outcome = sync.complete(3, 9).result(timeout=2)

    assert outcome == SyncOutcome.FALLBACK_SAVED
    assert "update" not in store.ops()
    assert store.ops().count("save") == 1
    assert store.workouts == [{"exercise": "squat", "reps": 3, "duration_seconds": 9}]


def test_failed_complete_falls_back(sync, store):
    sync.start("squat").result(timeout=2)
    store.offline.add("complete")
    outcome = sync.complete(4, 12).result(timeout=2)
    assert outcome == SyncOutcome.FALLBACK_SAVED
    assert store.workouts == [{"exercise": "squat", "reps": 4, "duration_seconds": 12}]


def test_lost_when_fallback_fails_too(sync, store):
    store.failing.update({"create", "save"})
    sync.start("squat")
    outcome = sync.complete(1, 2).result(timeout=2)
    assert outcome == SyncOutcome.LOST
    assert sync.outcome == SyncOutcome.LOST
    assert store.ops().count("save") == 1


def test_update_failure_is_not_retried(sync, store):
    sync.start("squat").result(timeout=2)
    store.failing.add("update")
    sync.update(1, 1)
    sync.wait(timeout=2)
    assert store.ops().count("update") == 1
    store.failing.clear()
    assert sync.complete(1, 2).result(timeout=2) == SyncOutcome.SYNCED


def test_complete_right_after_start_waits_for_create(sync, store):
    sync.start("squat")
    outcome = sync.complete(0, 1).result(timeout=2)
    assert outcome == SyncOutcome.SYNCED
    assert store.ops() == ["create", "complete"]


def test_queued_updates_coalesce_to_latest(client, store):
    gate = threading.Event()
    original = store.request

    def slow_request(method, url, **kwargs):
        if method == "POST" and url.endswith("/session"):
            gate.wait(timeout=2)
        return original(method, url, **kwargs)

    store.request = slow_request
    sync = SessionSynchronizer(client)
    sync.start("squat")
    for duration in range(1, 6):
        sync.update(0, duration)
    gate.set()
    sync.wait(timeout=2)

    updates = [call["json"] for call in store.calls if call["op"] == "update"]
    assert updates == [{"reps": 0, "duration_seconds": 5}]


def test_updates_ignored_before_start_and_after_complete(sync, store):
    sync.update(1, 1)
    sync.start("squat").result(timeout=2)
    sync.complete(1, 1).result(timeout=2)
    sync.update(2, 2)
    assert "update" not in store.ops()


def test_misuse_raises(sync):
    with pytest.raises(RepCoachError):
        sync.complete(0, 0)
    sync.start("squat")
    with pytest.raises(RepCoachError):
        sync.start("squat")
    sync.complete(0, 0)
    with pytest.raises(RepCoachError):
        sync.complete(0, 0)
