def test_get_me(client, mentor, mentor_headers):
    response = client.get("/users/me", headers=mentor_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "mentor@test.com"
    assert data["available_for_mentoring"] is True
    assert data["mentorship_topics"] == ["x", "career"]


def test_get_me_unauthenticated(client):
    response = client.get("/users/me")
    assert response.status_code == 401


def test_update_me(client, mentee, mentee_headers):
    response = client.put("/users/me", headers=mentee_headers, json={
        "is_mentor": True,
        "available_for_mentoring": True,
        "mentorship_topics": ["python"],
        "bio": "Now mentoring",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["is_mentor"] is True
    assert data["available_for_mentoring"] is True
    assert data["mentorship_topics"] == ["python"]
    assert data["bio"] == "Now mentoring"
    # Untouched fields survive
    assert data["full_name"] == "Mentee Fullname"


def test_update_me_cannot_change_role(client, mentee, mentee_headers):
    response = client.put("/users/me", headers=mentee_headers, json={"role": "admin"})
    assert response.status_code == 200
    assert response.json()["role"] == "member"


def test_list_users_as_admin(client, admin_user, mentee, admin_headers):
    response = client.get("/users", headers=admin_headers)
    assert response.status_code == 200
    emails = {u["email"] for u in response.json()}
    assert {"admin@test.com", "mentee@test.com"} <= emails


def test_list_users_as_member(client, mentee_headers):
    response = client.get("/users", headers=mentee_headers)
    assert response.status_code == 403


def test_list_users_unauthenticated(client):
    response = client.get("/users")
    assert response.status_code == 401


def test_get_user_as_admin(client, mentee, admin_headers):
    response = client.get(f"/users/{mentee.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "mentee@test.com"


def test_get_user_not_found(client, admin_headers):
    response = client.get("/users/99999", headers=admin_headers)
    assert response.status_code == 404


def test_update_user_as_admin(client, mentee, admin_headers):
    response = client.put(
        f"/users/{mentee.id}",
        headers=admin_headers,
        json={"is_active": False},
    )
    assert response.status_code == 200
    assert response.json()["is_active"] is False


def test_update_user_as_member(client, admin_user, mentee_headers):
    response = client.put(
        f"/users/{admin_user.id}",
        headers=mentee_headers,
        json={"name": "Hacked"},
    )
    assert response.status_code == 403
