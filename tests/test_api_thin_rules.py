from pathlib import Path

import pytest

API_FILES = [
    "app/api/admin_api.py",
    "app/api/auth_api.py",
    "app/api/catches_api.py",
    "app/api/comments_api.py",
    "app/api/lakes_api.py",
    "app/api/leaderboard_api.py",
    "app/api/system_api.py",
    "app/api/users_api.py",
]


@pytest.mark.parametrize("path", API_FILES)
def test_api_module_has_no_run_in_executor_logic(path):
    text = Path(path).read_text(encoding="utf-8")
    assert "run_in_executor" not in text


@pytest.mark.parametrize("path", API_FILES)
def test_api_module_does_not_use_repositories_or_sql(path):
    text = Path(path).read_text(encoding="utf-8")
    assert "app.repositories" not in text
    assert "_get_connection" not in text
    assert "cursor.execute" not in text


def test_leaderboard_queries_live_in_one_repository():
    hits = [
        str(p)
        for p in Path("app").rglob("*.py")
        if "COUNT(DISTINCT c.species)" in p.read_text(encoding="utf-8")
    ]
    assert hits == [str(Path("app/repositories/leaderboard_repository.py"))]
