def test_list_users_admin_only(client, headers, admin, author, reader):
    assert client.get("/api/users", headers=headers(author)).status_code == 403
    assert client.get("/api/users").status_code == 401

    resp = client.get("/api/users", headers=headers(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert {u["email"] for u in body["users"]} == {admin.email, author.email, reader.email}
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 3, "total_pages": 1}


def test_list_users_filters(client, headers, admin, author, reader):
    by_role = client.get("/api/users", params={"role": "READER"}, headers=headers(admin)).json()
    assert [u["id"] for u in by_role["users"]] == [str(reader.id)]

    by_email = client.get(
        "/api/users", params={"search": author.email.upper()}, headers=headers(admin)
    ).json()
    assert [u["id"] for u in by_email["users"]] == [str(author.id)]

    assert client.get("/api/users", params={"limit": 101}, headers=headers(admin)).status_code == 422


def test_get_user_with_counts(client, headers, admin, author):
    client.post("/api/posts", json={"title": "One", "content": "c"}, headers=headers(author))

    resp = client.get(f"/api/users/{author.id}", headers=headers(admin))
    assert resp.status_code == 200
    assert resp.json()["posts_count"] == 1
    assert resp.json()["comments_count"] == 0

    missing = client.get("/api/users/00000000-0000-0000-0000-000000000000", headers=headers(admin))
    assert missing.status_code == 404


def test_set_role(client, headers, admin, reader):
    url = f"/api/users/{reader.id}/role"

    assert client.patch(url, json={"role": "AUTHOR"}, headers=headers(reader)).status_code == 403
    assert client.patch(url, json={"role": "OWNER"}, headers=headers(admin)).status_code == 422

    resp = client.patch(url, json={"role": "AUTHOR"}, headers=headers(admin))
    assert resp.status_code == 200
    assert resp.json()["role"] == "AUTHOR"

    # The promoted user can now write posts.
    created = client.post("/api/posts", json={"title": "T", "content": "c"}, headers=headers(reader))
    assert created.status_code == 201


def test_admin_cannot_change_own_role(client, headers, admin):
    resp = client.patch(f"/api/users/{admin.id}/role", json={"role": "READER"}, headers=headers(admin))
    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid_state"
