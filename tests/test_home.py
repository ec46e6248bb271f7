import datetime


def _at(days, hours=0):
    value = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=days, hours=hours)
    return value.isoformat()


def test_home_lists(client, register):
    admin, admin_token = register("admin@uni.edu", "Admin")
    ann, ann_token = register("ann@uni.edu", "Ann")
    big = client.post("/clubs", json={"user_id": admin, "name": "Big", "token": admin_token}).json()["club_id"]
    client.post("/clubs", json={"user_id": admin, "name": "Small", "leader_id": ann, "token": admin_token})
    client.post(f"/clubs/{big}/join", json={"user_id": ann, "token": ann_token})

    ids = {}
    for title, days in (("Quiet", 1), ("Busy", 2), ("Over", -2)):
        ids[title] = client.post(
            f"/clubs/{big}/events",
            json={
                "user_id": admin,
                "title": title,
                "description": "d",
                "start_date": _at(days),
                "end_date": _at(days, 1),
                "location": "Hall",
                "category": "social",
                "token": admin_token,
            },
        ).json()["event_id"]
    client.post(f"/events/{ids['Busy']}/attend", json={"user_id": ann, "token": ann_token})

    data = client.get("/home").json()
    assert [e["title"] for e in data["featured_events"]] == ["Busy", "Quiet"]
    assert [e["title"] for e in data["upcoming_events"]] == ["Quiet", "Busy"]
    assert [c["name"] for c in data["popular_clubs"]] == ["Big", "Small"]
    assert data["popular_clubs"][0]["member_count"] == 2


def test_admin_stats(client, register):
    admin, admin_token = register("admin@uni.edu", "Admin")
    ann, ann_token = register("ann@uni.edu", "Ann")
    client.post("/clubs", json={"user_id": admin, "name": "Chess", "token": admin_token})

    assert client.get("/admin/stats", params={"token": ann_token}).status_code == 403
    stats = client.get("/admin/stats", params={"token": admin_token}).json()
    assert stats == {
        "users": 2,
        "clubs": 1,
        "active_clubs": 1,
        "events": 0,
        "pending_applications": 0,
    }


def test_upload_image(client, register, tmp_path):
    _, token = register("ann@uni.edu", "Ann")

    resp = client.post("/upload/image", files={"file": ("logo.png", b"\x89PNG", "image/png")})
    assert resp.status_code == 401

    resp = client.post(
        "/upload/image",
        files={"file": ("logo.exe", b"MZ", "application/octet-stream")},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 400

    resp = client.post(
        "/upload/image",
        files={"file": ("logo.PNG", b"\x89PNG", "image/png")},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 200
    url = resp.json()["url"]
    assert url.startswith("/static/media/") and url.endswith(".png")
    saved = tmp_path / "media" / url.rsplit("/", 1)[1]
    assert saved.read_bytes() == b"\x89PNG"
    assert client.get(url).content == b"\x89PNG"


def test_validation_errors_are_400(client):
    resp = client.post("/login", json={"email": "x@y.z"})
    assert resp.status_code == 400
