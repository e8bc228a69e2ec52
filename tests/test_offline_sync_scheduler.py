from datetime import datetime, timedelta, timezone

from app.offline import OfflineCatchQueue, OfflineCatchStore, OfflineSyncScheduler
from app.offline.sync_scheduler import CONNECTIVITY_JOB_ID, FLUSH_JOB_ID


class _Connectivity:
    def __init__(self, online=True):
        self.online = online

    def is_online(self):
        return self.online


class _AcceptAllClient:
    def __init__(self):
        self.submitted = []

    def submit_catch(self, payload):
        self.submitted.append(payload)
        return True, None


class _FakeScheduler:
    def __init__(self):
        self.jobs = []
        self.running = False

    def add_job(self, **kwargs):
        self.jobs.append(kwargs)

    def start(self):
        self.running = True

    def shutdown(self, wait=True):
        self.running = False


class _Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _build(tmp_path, online=True, debounce=5.0):
    queue = OfflineCatchQueue(
        store=OfflineCatchStore(str(tmp_path / "offline.db")),
        client=_AcceptAllClient(),
        connectivity=_Connectivity(online),
    )
    clock = _Clock()
    fake = _FakeScheduler()
    scheduler = OfflineSyncScheduler(
        queue, poll_seconds=15, debounce_seconds=debounce, scheduler=fake, clock=clock
    )
    return queue, scheduler, fake, clock


def _flush_jobs(fake):
    return [job for job in fake.jobs if job.get("id") == FLUSH_JOB_ID]


def test_start_registers_connectivity_watch_and_initial_sync(tmp_path):
    _, scheduler, fake, _ = _build(tmp_path)

    scheduler.start()

    watch = [job for job in fake.jobs if job.get("id") == CONNECTIVITY_JOB_ID]
    assert watch and watch[0]["trigger"] == "interval" and watch[0]["seconds"] == 15
    assert watch[0]["max_instances"] == 1
    assert len(_flush_jobs(fake)) == 1
    assert fake.running is True

    scheduler.stop()
    assert fake.running is False


def test_request_sync_defers_requests_inside_debounce_window(tmp_path):
    _, scheduler, fake, clock = _build(tmp_path, debounce=5.0)

    assert scheduler.request_sync("a") is True
    clock.now += 1
    before = datetime.now(timezone.utc)
    assert scheduler.request_sync("b") is True
    clock.now += 1
    assert scheduler.request_sync("c") is False
    clock.now += 10
    assert scheduler.request_sync("d") is True

    jobs = _flush_jobs(fake)
    assert len(jobs) == 3
    assert "run_date" not in jobs[0]
    assert timedelta(seconds=4) <= jobs[1]["run_date"] - before < timedelta(seconds=5)
    assert "run_date" not in jobs[2]
    assert all(job["trigger"] == "date" for job in jobs)
    assert all(job["replace_existing"] and job["max_instances"] == 1 for job in jobs)


def test_reconnect_inside_debounce_window_still_flushes(tmp_path):
    queue, scheduler, fake, clock = _build(tmp_path, online=False, debounce=5.0)
    scheduler.check_connectivity()
    queue.enqueue({"species": "Bass"})
    assert scheduler.run_flush().message == "Cannot sync while offline"

    clock.now += 2
    queue.connectivity.online = True
    assert scheduler.check_connectivity() is True
    clock.now += 60
    scheduler.check_connectivity()

    jobs = _flush_jobs(fake)
    assert len(jobs) == 2
    assert "run_date" in jobs[1]

    summary = scheduler.run_flush()

    assert summary.synced == 1
    assert queue.has_unsynced() is False



def test_enqueue_goes_through_scheduler(tmp_path):
    queue, _, fake, _ = _build(tmp_path)

    queue.enqueue({"species": "Bass"})

    assert len(_flush_jobs(fake)) == 1


def test_reconnect_triggers_sync_and_status_changes(tmp_path):
    queue, scheduler, fake, clock = _build(tmp_path, online=False)

    assert scheduler.check_connectivity() is False
    assert queue.get_sync_status() == "offline"
    assert _flush_jobs(fake) == []

    queue.connectivity.online = True
    clock.now += 60
    assert scheduler.check_connectivity() is True

    assert queue.get_sync_status() == "online"
    assert len(_flush_jobs(fake)) == 1


def test_rapid_flapping_collapses_into_one_trailing_flush(tmp_path):
    queue, scheduler, fake, clock = _build(tmp_path, online=False, debounce=10.0)

    for _ in range(3):
        queue.connectivity.online = False
        scheduler.check_connectivity()
        clock.now += 1
        queue.connectivity.online = True
        scheduler.check_connectivity()
        clock.now += 1

    jobs = _flush_jobs(fake)
    assert len(jobs) == 2
    assert "run_date" not in jobs[0]
    assert "run_date" in jobs[1]



def test_run_flush_reports_job_metric(tmp_path, monkeypatch):
    queue, scheduler, _, _ = _build(tmp_path)
    queue.enqueue({"species": "Bass"})
    statuses = []

    def fake_log_job_metric(*, job_name, status, snapshot):
        statuses.append((job_name, status))

    monkeypatch.setattr("app.offline.sync_scheduler.log_job_metric", fake_log_job_metric)

    summary = scheduler.run_flush()

    assert summary.synced == 1
    assert statuses == [("offline_flush", "success")]


def test_run_flush_reports_skipped_when_offline(tmp_path, monkeypatch):
    _, scheduler, _, _ = _build(tmp_path, online=False)
    statuses = []
    monkeypatch.setattr(
        "app.offline.sync_scheduler.log_job_metric",
        lambda *, job_name, status, snapshot: statuses.append(status),
    )

    scheduler.run_flush()

    assert statuses == ["skipped"]
