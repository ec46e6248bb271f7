from fastapi import APIRouter, Header
from pydantic import BaseModel
from ..services import invitations as invitation_service
from ..services.auth import require_auth, assert_token_matches
from ..services.helpers import (
    get_club_or_404,
    assert_can_manage,
    invitation_to_dict,
    user_to_dict,
)

router = APIRouter(tags=["invitations"])


class InvitationCreate(BaseModel):
    sender_id: str
    receiver_id: str


class InvitationAnswer(BaseModel):
    user_id: str


@router.post("/clubs/{club_id}/invitations")
def send_invitation(club_id: str, data: InvitationCreate, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.sender_id)
    invitation = invitation_service.send_invitation(club_id, data.sender_id, data.receiver_id)
    return {"status": "ok", "invitation_id": invitation.id}


@router.get("/clubs/{club_id}/invitations")
def list_club_invitations(club_id: str, status: str | None = None, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_can_manage(get_club_or_404(club_id), uid)
    return [invitation_to_dict(i) for i in invitation_service.list_club_invitations(club_id, status)]


@router.get("/clubs/{club_id}/invitable_users")
def list_invitable_users(club_id: str, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_can_manage(get_club_or_404(club_id), uid)
    return [user_to_dict(u) for u in invitation_service.list_invitable_users(club_id)]


@router.get("/users/{user_id}/invitations")
def list_user_invitations(user_id: str, status: str | None = None, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, user_id)
    return [invitation_to_dict(i) for i in invitation_service.list_user_invitations(user_id, status)]


@router.post("/invitations/{invitation_id}/accept")
def accept_invitation(invitation_id: str, data: InvitationAnswer, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    invitation = invitation_service.accept_invitation(invitation_id, data.user_id)
    return invitation_to_dict(invitation)


@router.post("/invitations/{invitation_id}/reject")
def reject_invitation(invitation_id: str, data: InvitationAnswer, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    invitation = invitation_service.reject_invitation(invitation_id, data.user_id)
    return invitation_to_dict(invitation)


@router.delete("/invitations/{invitation_id}")
def cancel_invitation(invitation_id: str, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    invitation_service.cancel_invitation(invitation_id, uid)
    return {"status": "ok"}
