def _catch(client, headers, species="Bass"):
    r = client.post("/api/catches", json={"species": species}, headers=headers)
    assert r.status_code == 201
    return r.json()["id"]


def test_comments_require_authentication(client, register_user):
    _, headers = register_user("anna")
    catch_id = _catch(client, headers)

    assert client.post(f"/api/catches/{catch_id}/comments", json={"content": "hi"}).status_code == 401
    assert client.get(f"/api/catches/{catch_id}/comments").status_code == 401


def test_add_and_list_comments_in_posting_order(client, register_user):
    anna, anna_headers = register_user("anna")
    bob, bob_headers = register_user("bob")
    catch_id = _catch(client, anna_headers)

    first = client.post(f"/api/catches/{catch_id}/comments", json={"content": " Nice fish! "}, headers=bob_headers)
    second = client.post(f"/api/catches/{catch_id}/comments", json={"content": "Thanks"}, headers=anna_headers)

    assert first.status_code == 201
    assert first.json()["content"] == "Nice fish!"
    assert first.json()["user"]["username"] == "bob"
    assert second.status_code == 201

    listed = client.get(f"/api/catches/{catch_id}/comments", headers=anna_headers).json()
    assert [c["content"] for c in listed] == ["Nice fish!", "Thanks"]
    assert [c["user_id"] for c in listed] == [bob["id"], anna["id"]]


def test_empty_comment_and_unknown_catch(client, register_user):
    _, headers = register_user("anna")
    catch_id = _catch(client, headers)

    blank = client.post(f"/api/catches/{catch_id}/comments", json={"content": "   "}, headers=headers)
    assert blank.status_code == 400
    assert blank.json()["detail"] == "Comment content cannot be empty"

    assert client.post("/api/catches/9999/comments", json={"content": "hi"}, headers=headers).status_code == 404
    assert client.get("/api/catches/9999/comments", headers=headers).status_code == 404


def test_only_author_can_edit_or_delete_comment(client, register_user):
    _, anna_headers = register_user("anna")
    _, bob_headers = register_user("bob")
    catch_id = _catch(client, anna_headers)
    comment_id = client.post(
        f"/api/catches/{catch_id}/comments", json={"content": "Great"}, headers=bob_headers
    ).json()["id"]

    assert client.put(f"/api/comments/{comment_id}", json={"content": "Mine now"}, headers=anna_headers).status_code == 403
    assert client.delete(f"/api/comments/{comment_id}", headers=anna_headers).status_code == 403
    assert client.put(f"/api/comments/{comment_id}", json={"content": ""}, headers=bob_headers).status_code == 400

    edited = client.put(f"/api/comments/{comment_id}", json={"content": "Great catch"}, headers=bob_headers)
    assert edited.status_code == 200
    assert edited.json()["content"] == "Great catch"

    deleted = client.delete(f"/api/comments/{comment_id}", headers=bob_headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Comment deleted successfully"
    assert client.delete(f"/api/comments/{comment_id}", headers=bob_headers).status_code == 404
    assert client.put("/api/comments/9999", json={"content": "x"}, headers=bob_headers).status_code == 404
    assert client.get(f"/api/catches/{catch_id}/comments", headers=anna_headers).json() == []


def test_deleting_catch_removes_its_comments(client, register_user, db):
    _, headers = register_user("anna")
    catch_id = _catch(client, headers)
    client.post(f"/api/catches/{catch_id}/comments", json={"content": "Nice"}, headers=headers)
    assert db.get_database_stats()["comments"] == 1

    assert client.delete(f"/api/catches/{catch_id}", headers=headers).status_code == 200

    assert db.get_database_stats()["comments"] == 0
