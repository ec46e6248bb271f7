import pytest


@pytest.fixture
def club(client, register):
    admin, admin_token = register("admin@uni.edu", "Admin")
    leader, leader_token = register("lea@uni.edu", "Lea")
    guest, guest_token = register("gus@uni.edu", "Gus")
    other, other_token = register("ola@uni.edu", "Ola")
    club_id = client.post(
        "/clubs",
        json={"user_id": admin, "name": "Debate", "leader_id": leader, "token": admin_token},
    ).json()["club_id"]
    return {
        "id": club_id,
        "admin": (admin, admin_token),
        "leader": (leader, leader_token),
        "guest": (guest, guest_token),
        "other": (other, other_token),
    }


def _invite(client, club, receiver):
    leader, token = club["leader"]
    return client.post(
        f"/clubs/{club['id']}/invitations",
        json={"sender_id": leader, "receiver_id": receiver, "token": token},
    )


def test_send_invitation(client, club):
    guest, guest_token = club["guest"]
    resp = _invite(client, club, guest)
    assert resp.status_code == 200
    invitation_id = resp.json()["invitation_id"]

    invitations = client.get(f"/users/{guest}/invitations", params={"token": guest_token}).json()
    assert len(invitations) == 1
    inv = invitations[0]
    assert inv["invitation_id"] == invitation_id
    assert inv["club_name"] == "Debate"
    assert inv["sender_name"] == "Lea"
    assert inv["status"] == "pending"

    resp = _invite(client, club, guest)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invitation already pending"


def test_invitation_rules(client, club):
    admin, _ = club["admin"]
    leader, _ = club["leader"]
    guest, guest_token = club["guest"]
    other, _ = club["other"]

    assert _invite(client, club, admin).status_code == 400
    resp = _invite(client, club, leader)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Already member"
    assert _invite(client, club, "nobody").status_code == 404

    resp = client.post(
        f"/clubs/{club['id']}/invitations",
        json={"sender_id": guest, "receiver_id": other, "token": guest_token},
    )
    assert resp.status_code == 403


def test_accept_invitation_joins_club(client, club):
    leader, _ = club["leader"]
    guest, guest_token = club["guest"]
    other, other_token = club["other"]
    invitation_id = _invite(client, club, guest).json()["invitation_id"]

    resp = client.post(f"/invitations/{invitation_id}/accept", json={"user_id": other, "token": other_token})
    assert resp.status_code == 403

    resp = client.post(f"/invitations/{invitation_id}/accept", json={"user_id": guest, "token": guest_token})
    assert resp.status_code == 200
    assert resp.json()["status"] == "accepted"
    assert client.get(f"/clubs/{club['id']}").json()["members"] == [leader, guest]
    assert client.get(f"/users/{guest}").json()["club_ids"] == [club["id"]]

    resp = client.post(f"/invitations/{invitation_id}/reject", json={"user_id": guest, "token": guest_token})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invitation already answered"


def test_reject_invitation(client, club):
    leader, leader_token = club["leader"]
    guest, guest_token = club["guest"]
    invitation_id = _invite(client, club, guest).json()["invitation_id"]

    resp = client.post(f"/invitations/{invitation_id}/reject", json={"user_id": guest, "token": guest_token})
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"
    assert client.get(f"/clubs/{club['id']}").json()["members"] == [leader]

    pending = client.get(
        f"/clubs/{club['id']}/invitations", params={"status": "pending", "token": leader_token}
    ).json()
    assert pending == []
    rejected = client.get(
        f"/clubs/{club['id']}/invitations", params={"status": "rejected", "token": leader_token}
    ).json()
    assert [i["invitation_id"] for i in rejected] == [invitation_id]

    # a rejected invitation does not block a new one
    assert _invite(client, club, guest).status_code == 200


def test_invitable_users(client, club):
    _, leader_token = club["leader"]
    guest, guest_token = club["guest"]
    other, _ = club["other"]

    ids = {u["user_id"] for u in client.get(f"/clubs/{club['id']}/invitable_users", params={"token": leader_token}).json()}
    assert ids == {guest, other}

    _invite(client, club, guest)
    ids = [u["user_id"] for u in client.get(f"/clubs/{club['id']}/invitable_users", params={"token": leader_token}).json()]
    assert ids == [other]

    resp = client.get(f"/clubs/{club['id']}/invitable_users", params={"token": guest_token})
    assert resp.status_code == 403


def test_cancel_invitation(client, club):
    _, leader_token = club["leader"]
    guest, guest_token = club["guest"]
    invitation_id = _invite(client, club, guest).json()["invitation_id"]

    assert client.delete(f"/invitations/{invitation_id}", params={"token": guest_token}).status_code == 403
    assert client.delete(f"/invitations/{invitation_id}", params={"token": leader_token}).status_code == 200
    assert client.get(f"/users/{guest}/invitations", params={"token": guest_token}).json() == []
    assert client.delete(f"/invitations/{invitation_id}", params={"token": leader_token}).status_code == 404
