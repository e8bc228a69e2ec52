def test_register_returns_token_and_profile(client):
    r = client.post(
        "/api/auth/register",
        json={"username": "anna", "email": "Anna@Example.com", "password": "secret123"},
    )

    assert r.status_code == 201
    body = r.json()
    assert body["token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "anna"
    assert body["user"]["email"] == "anna@example.com"
    assert body["user"]["role"] == "user"
    assert "password_hash" not in body["user"]


def test_register_rejects_duplicates(client, register_user):
    register_user("anna")

    r = client.post(
        "/api/auth/register",
        json={"username": "other", "email": "anna@example.com", "password": "secret123"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Email already in use"

    r = client.post(
        "/api/auth/register",
        json={"username": "anna", "email": "new@example.com", "password": "secret123"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Username already taken"


def test_login_and_current_user(client, register_user):
    register_user("anna", password="hunter22")

    bad = client.post("/api/auth/login", json={"email": "anna@example.com", "password": "wrong"})
    assert bad.status_code == 401

    r = client.post("/api/auth/login", json={"email": "anna@example.com", "password": "hunter22"})
    assert r.status_code == 200
    token = r.json()["token"]

    me = client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "anna"


def test_current_user_requires_valid_token(client):
    assert client.get("/api/auth/user").status_code == 401
    r = client.get("/api/auth/user", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_bootstrap_admin_email_gets_admin_role(client, monkeypatch):
    monkeypatch.setenv("CATCHLOG_BOOTSTRAP_ADMIN_EMAIL", "boss@example.com")

    r = client.post(
        "/api/auth/register",
        json={"username": "boss", "email": "boss@example.com", "password": "secret123"},
    )

    assert r.json()["user"]["role"] == "admin"


def test_user_profile_me_alias_and_email_visibility(client, register_user):
    anna, anna_headers = register_user("anna")
    bert, _ = register_user("bert")

    me = client.get("/api/users/me", headers=anna_headers)
    assert me.status_code == 200
    assert me.json()["id"] == anna["id"]
    assert me.json()["email"] == "anna@example.com"

    other = client.get(f"/api/users/{bert['id']}", headers=anna_headers)
    assert other.status_code == 200
    assert other.json()["email"] is None

    assert client.get("/api/users/me").status_code == 401
    assert client.get("/api/users/does-not-exist").status_code == 404


def test_user_stats_and_breakdowns(client, register_user):
    anna, headers = register_user("anna")
    _, bert_headers = register_user("bert")
    for body in (
        {"species": "Bass", "size": 30.0, "lake_name": "Mirror Lake"},
        {"species": "Bass", "size": 45.0, "lake_name": "Mirror Lake"},
        {"species": "Pike", "size": 80.0},
    ):
        assert client.post("/api/catches", json=body, headers=headers).status_code == 201
    catches = client.get(f"/api/users/{anna['id']}/catches").json()
    pike = next(c for c in catches if c["species"] == "Pike")
    client.post(f"/api/catches/{pike['id']}/like", headers=bert_headers)

    stats = client.get(f"/api/users/{anna['id']}/stats").json()
    assert stats["total_catches"] == 3
    assert stats["unique_species"] == 2
    assert stats["total_likes"] == 1
    assert stats["largest_catch"]["species"] == "Pike"

    species = client.get(f"/api/users/{anna['id']}/species").json()
    assert species == [{"species": "Bass", "count": 2}, {"species": "Pike", "count": 1}]

    lakes = client.get(f"/api/users/{anna['id']}/lakes").json()
    assert lakes == [{"lake": "Mirror Lake", "count": 2}, {"lake": "Unknown Location", "count": 1}]


def test_follow_flow(client, register_user):
    anna, anna_headers = register_user("anna")
    bert, _ = register_user("bert")

    assert client.post(f"/api/users/{bert['id']}/follow", headers=anna_headers).status_code == 200
    assert client.post(f"/api/users/{bert['id']}/follow", headers=anna_headers).status_code == 200

    assert client.get(f"/api/users/{bert['id']}/is-following", headers=anna_headers).json() == {"following": True}
    followers = client.get(f"/api/users/{bert['id']}/followers").json()
    assert [u["id"] for u in followers] == [anna["id"]]
    following = client.get("/api/users/me/following", headers=anna_headers).json()
    assert [u["id"] for u in following] == [bert["id"]]

    assert client.delete(f"/api/users/{bert['id']}/follow", headers=anna_headers).status_code == 200
    assert client.get(f"/api/users/{bert['id']}/followers").json() == []


def test_follow_rejects_self_unknown_and_anonymous(client, register_user):
    anna, headers = register_user("anna")

    assert client.post(f"/api/users/{anna['id']}/follow", headers=headers).status_code == 400
    assert client.post("/api/users/ghost/follow", headers=headers).status_code == 404
    assert client.post(f"/api/users/{anna['id']}/follow").status_code == 401
