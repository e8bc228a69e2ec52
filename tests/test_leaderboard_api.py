import sqlite3


def _log_catches(client, headers, species_list, lake_id=None, size=None):
    for species in species_list:
        body = {"species": species}
        if lake_id is not None:
            body["lake_id"] = lake_id
        if size is not None:
            body["size"] = size
        r = client.post("/api/catches", json=body, headers=headers)
        assert r.status_code == 201, r.text


def test_leaderboard_total_catches_ranks_users(client, register_user):
    anna, anna_headers = register_user("anna")
    bert, bert_headers = register_user("bert")
    register_user("carl")
    _log_catches(client, anna_headers, ["Bass"] * 5)
    _log_catches(client, bert_headers, ["Pike"] * 3)

    r = client.get("/api/leaderboard", params={"criterion": "total_catches", "scope": "global", "limit": 2})

    assert r.status_code == 200
    rows = r.json()
    assert [(row["username"], row["metric_value"]) for row in rows] == [("anna", 5), ("bert", 3)]
    assert rows[0]["user_id"] == anna["id"]
    assert rows[1]["rank"] == 2


def test_leaderboard_largest_catch_returns_catch_snapshot(client, register_user):
    _, headers = register_user("anna")
    _log_catches(client, headers, ["Musky"], size=110.5)
    _log_catches(client, headers, ["Perch"])

    r = client.get("/api/leaderboard", params={"criterion": "largest_catch"})

    assert r.status_code == 200
    rows = r.json()
    assert len(rows) == 1
    assert rows[0]["metric_value"]["species"] == "Musky"
    assert rows[0]["metric_value"]["size"] == 110.5


def test_leaderboard_rejects_invalid_criterion(client):
    r = client.get("/api/leaderboard", params={"criterion": "heaviest"})
    assert r.status_code == 400


def test_leaderboard_rejects_invalid_scope_and_limit(client):
    assert client.get("/api/leaderboard", params={"criterion": "total_catches", "scope": "abc"}).status_code == 400
    assert client.get("/api/leaderboard", params={"criterion": "total_catches", "limit": 0}).status_code == 400


def test_leaderboard_empty_store_returns_empty_array(client):
    r = client.get("/api/leaderboard", params={"criterion": "unique_species"})
    assert r.status_code == 200
    assert r.json() == []


def test_legacy_lake_route_uses_same_aggregator(client, register_user):
    _, anna_headers = register_user("anna")
    _, bert_headers = register_user("bert")
    lake = client.post(
        "/api/lakes", json={"name": "Mirror Lake", "latitude": 45.0, "longitude": -75.0}, headers=anna_headers
    ).json()
    _log_catches(client, anna_headers, ["Bass", "Pike"], lake_id=lake["id"])
    _log_catches(client, bert_headers, ["Bass", "Bass", "Bass"])

    r = client.get(f"/api/leaderboard/lake/{lake['id']}", params={"criteria": "species"})

    assert r.status_code == 200
    assert [(row["username"], row["metric_value"]) for row in r.json()] == [("anna", 2)]

    r = client.get("/api/leaderboard/global", params={"criteria": "catches"})
    assert [(row["username"], row["metric_value"]) for row in r.json()] == [("bert", 3), ("anna", 2)]


def test_leaderboard_storage_failure_returns_500(client, monkeypatch):
    from app.services.leaderboard_service import LeaderboardService

    def _boom(self, db, query):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(LeaderboardService, "compute", _boom)

    r = client.get("/api/leaderboard", params={"criterion": "total_catches"})

    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to fetch leaderboard data"
