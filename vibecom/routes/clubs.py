from fastapi import APIRouter, Header
from pydantic import BaseModel
from ..services import clubs as club_service
from ..services.auth import require_auth, assert_token_matches
from ..services.helpers import get_club_or_404, club_to_dict, user_to_dict

router = APIRouter(tags=["clubs"])


class ClubCreate(BaseModel):
    user_id: str
    name: str
    description: str = ""
    logo_url: str = ""
    social_media: dict[str, str] | None = None
    leader_id: str | None = None


class ClubUpdate(BaseModel):
    user_id: str
    name: str | None = None
    description: str | None = None
    logo_url: str | None = None
    social_media: dict[str, str] | None = None
    is_active: bool | None = None


class ActiveRequest(BaseModel):
    user_id: str
    active: bool


class MembershipRequest(BaseModel):
    user_id: str


class RemoveRequest(BaseModel):
    remover_id: str


class LeaderRequest(BaseModel):
    user_id: str
    new_leader_id: str


@router.post("/clubs")
def create_club(data: ClubCreate, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    club = club_service.create_club(
        data.user_id,
        data.name,
        description=data.description,
        logo_url=data.logo_url,
        social_media=data.social_media,
        leader_id=data.leader_id,
    )
    return {"status": "ok", "club_id": club.id}


@router.get("/clubs")
def list_clubs(
    query: str | None = None,
    active_only: bool = True,
    limit: int | None = None,
    offset: int = 0,
):
    """Return clubs filtered by an optional search query."""
    clubs = club_service.list_clubs(query, active_only=active_only, limit=limit, offset=offset)
    return [club_to_dict(c) for c in clubs]


@router.get("/clubs/{club_id}")
def get_club(club_id: str):
    return club_to_dict(get_club_or_404(club_id))


@router.api_route("/clubs/{club_id}", methods=["PATCH", "PUT"])
def update_club_info(club_id: str, data: ClubUpdate, authorization: str | None = Header(None)):
    """Update club information (leader or admin only)."""
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    club = club_service.update_club(
        club_id,
        data.user_id,
        name=data.name,
        description=data.description,
        logo_url=data.logo_url,
        social_media=data.social_media,
        is_active=data.is_active,
    )
    return club_to_dict(club)


@router.post("/clubs/{club_id}/active")
def set_active(club_id: str, data: ActiveRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    club = club_service.set_active(club_id, data.user_id, data.active)
    return {"status": "ok", "is_active": club.is_active}


@router.delete("/clubs/{club_id}")
def delete_club(club_id: str, authorization: str | None = Header(None)):
    """Delete a club with its events and invitations (leader or admin)."""
    uid = require_auth(authorization)
    club_service.delete_club(club_id, uid)
    return {"status": "ok"}


@router.post("/clubs/{club_id}/join")
def join_club(club_id: str, data: MembershipRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    club = club_service.join_club(club_id, data.user_id)
    return {"status": "ok", "members": club.members}


@router.post("/clubs/{club_id}/leave")
def leave_club(club_id: str, data: MembershipRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    club = club_service.leave_club(club_id, data.user_id)
    return {"status": "ok", "members": club.members}


@router.get("/clubs/{club_id}/members")
def list_members(club_id: str):
    return [user_to_dict(u) for u in club_service.list_members(club_id)]


@router.post("/clubs/{club_id}/members/{user_id}/remove")
def remove_member(club_id: str, user_id: str, data: RemoveRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.remover_id)
    club = club_service.remove_member(club_id, data.remover_id, user_id)
    return {"status": "ok", "members": club.members}


@router.post("/clubs/{club_id}/leader")
def transfer_leader(club_id: str, data: LeaderRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    club = club_service.transfer_leadership(club_id, data.user_id, data.new_leader_id)
    return {"status": "ok", "leader_id": club.leader_id}


@router.get("/clubs/{club_id}/event_titles")
def event_titles(club_id: str):
    return club_service.club_event_titles(club_id)
