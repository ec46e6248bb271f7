from __future__ import annotations
import datetime
import uuid
from loguru import logger
from .exceptions import ServiceError
from .helpers import (
    get_club_or_404,
    get_event_or_404,
    get_user_or_404,
    assert_can_manage,
)
from .. import storage
from ..storage import ArrayUnion, ArrayRemove, SERVER_TIMESTAMP
from ..models import Event, EventCategory, to_timestamp, utcnow


def _parse_category(value: str | EventCategory | None, allow_all: bool = False) -> EventCategory | None:
    if value is None or value == "":
        return None
    try:
        category = EventCategory(value)
    except ValueError:
        raise ServiceError("Invalid category", 400)
    if category == EventCategory.ALL and not allow_all:
        raise ServiceError("Invalid category", 400)
    return category


def _aware(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def _check_dates(start: datetime.datetime, end: datetime.datetime) -> None:
    if _aware(end) < _aware(start):
        raise ServiceError("End date before start date", 400)


def create_event(
    club_id: str,
    actor_id: str,
    title: str,
    description: str,
    start_date: datetime.datetime,
    end_date: datetime.datetime,
    location: str,
    category: str | EventCategory,
    image_url: str = "",
) -> Event:
    """Create an event and append it to the club's event list in one batch."""
    club = get_club_or_404(club_id)
    assert_can_manage(club, actor_id)
    if not club.is_active:
        raise ServiceError("Club is not active", 400)
    title = (title or "").strip()
    description = (description or "").strip()
    location = (location or "").strip()
    if not title or not description or not location:
        raise ServiceError("Title, description and location are required", 400)
    cat = _parse_category(category)
    if cat is None:
        raise ServiceError("Invalid category", 400)
    _check_dates(start_date, end_date)

    event = Event(
        id=uuid.uuid4().hex,
        title=title,
        description=description,
        start_date=_aware(start_date),
        end_date=_aware(end_date),
        location=location,
        club_id=club_id,
        image_url=image_url or "",
        category=cat,
        created_at=utcnow(),
    )
    batch = storage.WriteBatch()
    batch.set(storage.EVENTS, event.id, event.to_document())
    batch.update(storage.CLUBS, club_id, {"events": ArrayUnion([event.id])})
    batch.commit()
    logger.info(f"event {event.id} created in club {club_id} by {actor_id}")
    return event


def list_events(
    category: str | None = None,
    query: str | None = None,
    club_id: str | None = None,
    upcoming: bool = False,
    limit: int | None = None,
    offset: int = 0,
) -> list[Event]:
    """Return events ordered by start date.

    ``category`` ``all`` disables the category filter and ``upcoming`` drops
    events that already ended.
    """
    cat = _parse_category(category, allow_all=True)
    q = query.strip().lower() if query else None
    now = utcnow()
    result = []
    for event in storage.list_events(club_id):
        if cat and cat != EventCategory.ALL and event.category != cat:
            continue
        if q and q not in event.title.lower() and q not in event.description.lower():
            continue
        if upcoming and event.has_ended(now):
            continue
        result.append(event)
    if offset:
        result = result[offset:]
    if limit is not None:
        result = result[:limit]
    return result


def update_event(
    event_id: str,
    actor_id: str,
    title: str | None = None,
    description: str | None = None,
    start_date: datetime.datetime | None = None,
    end_date: datetime.datetime | None = None,
    location: str | None = None,
    category: str | None = None,
    image_url: str | None = None,
) -> Event:
    event = get_event_or_404(event_id)
    club = get_club_or_404(event.club_id)
    assert_can_manage(club, actor_id)
    fields: dict = {}
    for key, value in (("title", title), ("description", description), ("location", location)):
        if value is not None:
            value = value.strip()
            if not value:
                raise ServiceError(f"{key.capitalize()} required", 400)
            fields[key] = value
    if category is not None:
        cat = _parse_category(category)
        if cat is None:
            raise ServiceError("Invalid category", 400)
        fields["category"] = cat.value
    if image_url is not None:
        fields["imageURL"] = image_url
    if start_date is not None or end_date is not None:
        start = start_date or event.start_date
        end = end_date or event.end_date
        _check_dates(start, end)
        if start_date is not None:
            fields["startDate"] = to_timestamp(start_date)
        if end_date is not None:
            fields["endDate"] = to_timestamp(end_date)
    if fields:
        storage.update_document(storage.EVENTS, event_id, fields)
    return get_event_or_404(event_id)


def cancel_event(event_id: str, actor_id: str) -> None:
    """Delete an event and every reference to it."""
    event = get_event_or_404(event_id)
    club = storage.get_club(event.club_id)
    if club:
        assert_can_manage(club, actor_id)
    else:
        # orphaned event, only an admin may clean it up
        user = get_user_or_404(actor_id)
        if not user.is_admin:
            raise ServiceError("Forbidden", 403)
    with storage.transaction() as conn:
        storage.delete_document(storage.EVENTS, event_id, conn=conn)
        if club:
            storage.update_document(storage.CLUBS, club.id, {"events": ArrayRemove([event_id])}, conn=conn)
        for uid in event.attendees:
            try:
                storage.update_document(storage.USERS, uid, {"eventIds": ArrayRemove([event_id])}, conn=conn)
            except storage.DocumentNotFound:
                logger.warning(f"attendee {uid} of event {event_id} has no user document")
    logger.info(f"event {event_id} cancelled by {actor_id}")


def attend_event(event_id: str, user_id: str) -> Event:
    """Sign up for an event that has not ended yet. Signing up twice is a no-op."""
    with storage.transaction() as conn:
        event = get_event_or_404(event_id, conn=conn)
        get_user_or_404(user_id, conn=conn)
        if event.has_ended():
            raise ServiceError("Event has ended", 400)
        storage.update_document(storage.EVENTS, event_id, {"attendees": ArrayUnion([user_id])}, conn=conn)
        storage.update_document(
            storage.USERS,
            user_id,
            {"eventIds": ArrayUnion([event_id]), "updatedAt": SERVER_TIMESTAMP},
            conn=conn,
        )
    return get_event_or_404(event_id)


def leave_event(event_id: str, user_id: str) -> Event:
    with storage.transaction() as conn:
        get_event_or_404(event_id, conn=conn)
        get_user_or_404(user_id, conn=conn)
        storage.update_document(storage.EVENTS, event_id, {"attendees": ArrayRemove([user_id])}, conn=conn)
        storage.update_document(
            storage.USERS,
            user_id,
            {"eventIds": ArrayRemove([event_id]), "updatedAt": SERVER_TIMESTAMP},
            conn=conn,
        )
    return get_event_or_404(event_id)
