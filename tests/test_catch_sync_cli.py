import json

import pytest

import catch_sync
from app.offline import ConnectivityMonitor


@pytest.fixture
def queue_env(tmp_path, monkeypatch):
    monkeypatch.setenv("CATCHLOG_OFFLINE_DB", str(tmp_path / "offline.db"))
    monkeypatch.setenv("CATCHLOG_SERVER_URL", "http://127.0.0.1:9")
    monkeypatch.setenv("CATCHLOG_AUTO_SYNC", "0")
    monkeypatch.setattr(ConnectivityMonitor, "is_online", lambda self: False)
    return tmp_path


def _last_json(capsys):
    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    return [json.loads(line) for line in lines]


def test_enqueue_then_status(queue_env, capsys):
    assert catch_sync.main(["enqueue", "Bass", "--size", "41.5", "--lake", "Mirror Lake"]) == 0
    assert catch_sync.main(["enqueue", "Pike"]) == 0
    capsys.readouterr()

    assert catch_sync.main(["status"]) == 0

    status = _last_json(capsys)[-1]
    assert status["total"] == 2
    assert status["unsynced"] == 2


def test_list_prints_records_in_queue_order(queue_env, capsys):
    catch_sync.main(["enqueue", "Bass"])
    catch_sync.main(["enqueue", "Pike"])
    capsys.readouterr()

    assert catch_sync.main(["list", "--state", "pending"]) == 0

    rows = _last_json(capsys)
    assert [row["catch"]["species"] for row in rows] == ["Bass", "Pike"]
    assert all(row["state"] == "pending" for row in rows)


def test_flush_offline_exits_non_zero(queue_env, capsys):
    catch_sync.main(["enqueue", "Bass"])
    capsys.readouterr()

    assert catch_sync.main(["flush"]) == 1

    summary = _last_json(capsys)[-1]
    assert summary == {
        "success": False,
        "synced": 0,
        "failed": 0,
        "message": "Cannot sync while offline",
        "requeued": 0,
    }


def test_flush_online_and_prune(queue_env, capsys, monkeypatch):
    from app.offline import CatchApiClient

    monkeypatch.setattr(ConnectivityMonitor, "is_online", lambda self: True)
    monkeypatch.setattr(CatchApiClient, "submit_catch", lambda self, payload: (True, None))
    catch_sync.main(["enqueue", "Bass"])
    capsys.readouterr()

    assert catch_sync.main(["flush"]) == 0
    assert _last_json(capsys)[-1]["synced"] == 1

    assert catch_sync.main(["prune"]) == 0
    catch_sync.main(["status"])
    assert _last_json(capsys)[-1]["total"] == 0
