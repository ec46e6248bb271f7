import datetime
from fastapi import APIRouter, Header
from pydantic import BaseModel
from .. import storage
from ..services import events as event_service
from ..services.auth import require_auth, assert_token_matches
from ..services.helpers import get_event_or_404, event_to_dict, user_to_dict

router = APIRouter(tags=["events"])


class EventCreate(BaseModel):
    user_id: str
    title: str
    description: str
    start_date: datetime.datetime
    end_date: datetime.datetime
    location: str
    category: str
    image_url: str = ""


class EventUpdate(BaseModel):
    user_id: str
    title: str | None = None
    description: str | None = None
    start_date: datetime.datetime | None = None
    end_date: datetime.datetime | None = None
    location: str | None = None
    category: str | None = None
    image_url: str | None = None


class AttendRequest(BaseModel):
    user_id: str


@router.post("/clubs/{club_id}/events")
def create_event(club_id: str, data: EventCreate, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    event = event_service.create_event(
        club_id,
        data.user_id,
        data.title,
        data.description,
        data.start_date,
        data.end_date,
        data.location,
        data.category,
        image_url=data.image_url,
    )
    return {"status": "ok", "event_id": event.id}


@router.get("/clubs/{club_id}/events")
def list_club_events(club_id: str, upcoming: bool = False):
    events = event_service.list_events(club_id=club_id, upcoming=upcoming)
    return [event_to_dict(e) for e in events]


@router.get("/events")
def list_events(
    category: str | None = None,
    query: str | None = None,
    club_id: str | None = None,
    upcoming: bool = False,
    limit: int | None = None,
    offset: int = 0,
):
    events = event_service.list_events(
        category=category,
        query=query,
        club_id=club_id,
        upcoming=upcoming,
        limit=limit,
        offset=offset,
    )
    return [event_to_dict(e) for e in events]


@router.get("/events/{event_id}")
def get_event(event_id: str):
    return event_to_dict(get_event_or_404(event_id))


@router.api_route("/events/{event_id}", methods=["PATCH", "PUT"])
def update_event(event_id: str, data: EventUpdate, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    event = event_service.update_event(
        event_id,
        data.user_id,
        title=data.title,
        description=data.description,
        start_date=data.start_date,
        end_date=data.end_date,
        location=data.location,
        category=data.category,
        image_url=data.image_url,
    )
    return event_to_dict(event)


@router.delete("/events/{event_id}")
def cancel_event(event_id: str, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    event_service.cancel_event(event_id, uid)
    return {"status": "ok"}


@router.post("/events/{event_id}/attend")
def attend_event(event_id: str, data: AttendRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    event = event_service.attend_event(event_id, data.user_id)
    return {"status": "ok", "attendees": event.attendees}


@router.post("/events/{event_id}/leave")
def leave_event(event_id: str, data: AttendRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    event = event_service.leave_event(event_id, data.user_id)
    return {"status": "ok", "attendees": event.attendees}


@router.get("/events/{event_id}/attendees")
def list_attendees(event_id: str):
    event = get_event_or_404(event_id)
    return [user_to_dict(u) for u in storage.get_users(event.attendees)]
