import os
import tempfile

# 日志目录需在导入 app 之前指定
os.environ.setdefault("CATCHLOG_LOG_DIR", tempfile.mkdtemp(prefix="catchlog-logs-"))

import pytest
from fastapi.testclient import TestClient

from app.main import app


def _client():
    return TestClient(app)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "catchlog.db"
    monkeypatch.setenv("CATCHLOG_DB_PATH", str(path))
    monkeypatch.delenv("CATCHLOG_ADMIN_TOKEN", raising=False)
    monkeypatch.delenv("CATCHLOG_BOOTSTRAP_ADMIN_EMAIL", raising=False)
    return path


@pytest.fixture
def db(db_path):
    from app.database import Database

    return Database(str(db_path))


@pytest.fixture
def client(db_path):
    with _client() as c:
        yield c


@pytest.fixture
def register_user(client):
    def _register(username, email=None, password="secret123"):
        r = client.post(
            "/api/auth/register",
            json={"username": username, "email": email or f"{username}@example.com", "password": password},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register
