def _submit(client, user_id, token, name="Photography"):
    return client.post(
        "/club_applications",
        json={
            "user_id": user_id,
            "name": name,
            "description": "Cameras and walks",
            "target_audience": "Everyone",
            "activities": "Photo walks",
            "token": token,
        },
    )


def test_approve_application_creates_club(client, register):
    admin, admin_token = register("admin@uni.edu", "Admin")
    ann, ann_token = register("ann@uni.edu", "Ann")

    resp = _submit(client, ann, ann_token)
    assert resp.status_code == 200
    application_id = resp.json()["application_id"]

    mine = client.get(f"/users/{ann}/club_applications", params={"token": ann_token}).json()
    assert [a["status"] for a in mine] == ["pending"]

    resp = client.post(f"/club_applications/{application_id}/approve", json={"user_id": ann, "token": ann_token})
    assert resp.status_code == 403

    resp = client.post(f"/club_applications/{application_id}/approve", json={"user_id": admin, "token": admin_token})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "approved"
    assert data["reviewed_by"] == admin

    club = client.get(f"/clubs/{data['club_id']}").json()
    assert club["name"] == "Photography"
    assert club["leader_id"] == ann
    assert club["members"] == [ann]
    assert client.get(f"/users/{ann}").json()["club_ids"] == [data["club_id"]]

    resp = client.post(f"/club_applications/{application_id}/reject", json={"user_id": admin, "token": admin_token})
    assert resp.status_code == 400


def test_reject_application(client, register):
    admin, admin_token = register("admin@uni.edu", "Admin")
    ann, ann_token = register("ann@uni.edu", "Ann")
    application_id = _submit(client, ann, ann_token).json()["application_id"]

    resp = client.post(f"/club_applications/{application_id}/reject", json={"user_id": admin, "token": admin_token})
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"
    assert client.get("/clubs").json() == []


def test_list_applications_admin_only(client, register):
    admin, admin_token = register("admin@uni.edu", "Admin")
    ann, ann_token = register("ann@uni.edu", "Ann")
    _submit(client, ann, ann_token, name="Chess")
    _submit(client, ann, ann_token, name="Go")

    assert client.get("/club_applications", params={"token": ann_token}).status_code == 403
    apps = client.get("/club_applications", params={"status": "pending", "token": admin_token}).json()
    assert sorted(a["name"] for a in apps) == ["Chess", "Go"]
    assert client.get("/club_applications", params={"status": "odd", "token": admin_token}).status_code == 400


def test_application_fields_required(client, register):
    register("admin@uni.edu", "Admin")
    ann, ann_token = register("ann@uni.edu", "Ann")
    resp = client.post(
        "/club_applications",
        json={
            "user_id": ann,
            "name": "Chess",
            "description": " ",
            "target_audience": "All",
            "activities": "Games",
            "token": ann_token,
        },
    )
    assert resp.status_code == 400
