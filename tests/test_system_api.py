def test_status_endpoint_reports_online(client):
    r = client.get("/api/status")
    assert r.status_code == 200
    assert r.json() == {"status": "online"}


def test_logs_endpoint_returns_list(client):
    r = client.get("/api/logs", params={"lines": 5})
    assert r.status_code == 200
    assert isinstance(r.json()["logs"], list)


def test_clear_logs_requires_admin_token(client, monkeypatch):
    monkeypatch.setenv("CATCHLOG_ADMIN_TOKEN", "secret")

    assert client.delete("/api/logs").status_code == 401
    assert client.delete("/api/logs", headers={"X-Admin-Token": "wrong"}).status_code == 401
    assert client.delete("/api/logs", headers={"X-Admin-Token": "secret"}).status_code == 200


def test_database_stats_counts_tables(client, register_user):
    register_user("anna")

    r = client.get("/api/database/stats")

    assert r.status_code == 200
    body = r.json()
    assert body["users"] == 1
    assert body["catches"] == 0


def test_logs_can_be_filtered_by_level(client):
    from app.logger import logger

    logger.error("渔获提交失败: unit-test-marker")
    logger.info("普通日志: unit-test-marker")

    r = client.get("/api/logs", params={"lines": 50, "level": "error"})

    logs = r.json()["logs"]
    assert any("unit-test-marker" in line for line in logs)
    assert all("| ERROR |" in line for line in logs)
