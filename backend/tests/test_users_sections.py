from tests.conftest import auth_headers


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_login_and_me(client, seed_users):
    resp = client.post("/api/auth/login", json={"login_id": "parent001"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "parent"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["child_name"] == "Minji Park"


def test_login_unknown_user(client, seed_users):
    resp = client.post("/api/auth/login", json={"login_id": "nobody"})
    assert resp.status_code == 401


def test_invalid_token_is_rejected(client, seed_users):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_admin_creates_parent_with_rfid(client, seed_users):
    headers = auth_headers(client, "admin001")
    resp = client.post(
        "/api/users",
        json={
            "login_id": "parent003",
            "name": "Parent Lee",
            "role": "Parent",
            "child_name": "Seoyun Lee",
            "rfid_tag": "  RFID-0003 ",
        },
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["role"] == "parent"
    assert resp.json()["rfid_tag"] == "RFID-0003"


def test_user_conflicts_and_validation(client, seed_users):
    headers = auth_headers(client, "admin001")
    base = {"login_id": "parent009", "name": "Someone", "role": "parent"}

    assert client.post("/api/users", json={**base, "role": "guest"}, headers=headers).status_code == 400
    assert client.post("/api/users", json={**base, "login_id": "parent001"}, headers=headers).status_code == 409
    assert client.post("/api/users", json={**base, "rfid_tag": "RFID-0001"}, headers=headers).status_code == 409

    resp = client.patch(
        f"/api/users/{seed_users['other_parent'].user_id}",
        json={"rfid_tag": "RFID-0001"},
        headers=headers,
    )
    assert resp.status_code == 409


def test_only_admin_manages_users(client, seed_users):
    teacher = auth_headers(client, "teacher001")
    assert client.get("/api/users", headers=teacher).status_code == 200
    resp = client.post(
        "/api/users",
        json={"login_id": "x", "name": "X", "role": "parent"},
        headers=teacher,
    )
    assert resp.status_code == 403
    assert client.get("/api/users", headers=auth_headers(client, "parent001")).status_code == 403


def test_deactivate_user_releases_rfid(client, seed_users):
    headers = auth_headers(client, "admin001")
    assert client.delete(f"/api/users/{seed_users['admin'].user_id}", headers=headers).status_code == 400

    resp = client.delete(f"/api/users/{seed_users['other_parent'].user_id}", headers=headers)
    assert resp.status_code == 204
    assert client.post("/api/auth/login", json={"login_id": "parent002"}).status_code == 401

    reuse = client.patch(
        f"/api/users/{seed_users['parent'].user_id}",
        json={"rfid_tag": "RFID-0002"},
        headers=headers,
    )
    assert reuse.status_code == 200, reuse.text
    assert reuse.json()["rfid_tag"] == "RFID-0002"


def test_create_section_with_students(client, seed_users):
    headers = auth_headers(client, "admin001")
    resp = client.post(
        "/api/sections",
        json={
            "name": "Tulip",
            "teacher_id": seed_users["teacher"].user_id,
            "student_ids": [seed_users["other_parent"].user_id],
        },
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["student_ids"] == [seed_users["other_parent"].user_id]

    dup = client.post("/api/sections", json={"name": "Tulip"}, headers=headers)
    assert dup.status_code == 409

    bad_teacher = client.post(
        "/api/sections",
        json={"name": "Rose", "teacher_id": seed_users["parent"].user_id},
        headers=headers,
    )
    assert bad_teacher.status_code == 400


def test_set_section_students(client, seed_users, seed_section):
    headers = auth_headers(client, "admin001")
    url = f"/api/sections/{seed_section.section_id}/students"
    both = [seed_users["parent"].user_id, seed_users["other_parent"].user_id]

    resp = client.put(url, json={"student_ids": both}, headers=headers)
    assert resp.status_code == 200, resp.text
    assert sorted(resp.json()["student_ids"]) == sorted(both)

    resp = client.put(url, json={"student_ids": [seed_users["teacher"].user_id]}, headers=headers)
    assert resp.status_code == 400

    resp = client.put(url, json={"student_ids": [seed_users["other_parent"].user_id]}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["student_ids"] == [seed_users["other_parent"].user_id]


def test_parent_section_visibility(client, seed_users, seed_section):
    own = client.get("/api/sections", headers=auth_headers(client, "parent001")).json()
    assert [s["name"] for s in own] == ["Sunflower"]

    other_headers = auth_headers(client, "parent002")
    assert client.get("/api/sections", headers=other_headers).json() == []
    resp = client.get(f"/api/sections/{seed_section.section_id}", headers=other_headers)
    assert resp.status_code == 403


def test_delete_section_removes_schedules(client, seed_users, seed_schedule):
    headers = auth_headers(client, "admin001")
    assert client.delete(f"/api/sections/{seed_schedule.section_id}", headers=headers).status_code == 204
    assert client.get(f"/api/schedules/{seed_schedule.schedule_id}", headers=headers).status_code == 404


def test_me_lists_assigned_sections(client, seed_users, seed_section):
    resp = client.get("/api/auth/me", headers=auth_headers(client, "parent001"))
    assert resp.status_code == 200
    assert resp.json()["section_ids"] == [seed_section.section_id]

    other = client.get("/api/auth/me", headers=auth_headers(client, "parent002"))
    assert other.json()["section_ids"] == []


def test_role_change_invalidates_token(client, seed_users):
    teacher_headers = auth_headers(client, "teacher001")
    admin_headers = auth_headers(client, "admin001")

    resp = client.patch(
        f"/api/users/{seed_users['teacher'].user_id}",
        json={"role": "parent"},
        headers=admin_headers,
    )
    assert resp.status_code == 200, resp.text
    assert client.get("/api/auth/me", headers=teacher_headers).status_code == 401
