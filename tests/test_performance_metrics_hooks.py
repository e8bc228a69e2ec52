def test_metrics_timer_records_elapsed_ms():
    from app.core.metrics import measure_ms

    with measure_ms("unit-test-metric") as snapshot:
        pass

    assert snapshot.elapsed_ms >= 0


def test_api_metric_is_logged_per_request(client, monkeypatch):
    calls = []

    def fake_log_api_metric(*, path, method, status_code, snapshot):
        calls.append((path, method, status_code))

    monkeypatch.setattr("app.main.log_api_metric", fake_log_api_metric)

    client.get("/api/status")

    assert ("/api/status", "GET", 200) in calls


def test_job_metric_is_silent_unless_enabled(monkeypatch):
    from app.core import metrics

    messages = []
    monkeypatch.setattr(metrics.logger, "info", lambda *args: messages.append(args))
    monkeypatch.delenv("ENABLE_JOB_METRIC_LOG", raising=False)

    with metrics.measure_ms("job") as snapshot:
        pass
    metrics.log_job_metric(job_name="offline_flush", status="success", snapshot=snapshot)
    assert messages == []

    monkeypatch.setenv("ENABLE_JOB_METRIC_LOG", "1")
    metrics.log_job_metric(job_name="offline_flush", status="success", snapshot=snapshot)
    assert len(messages) == 1
