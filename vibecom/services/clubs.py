from __future__ import annotations
import uuid
from loguru import logger
from .exceptions import ServiceError
from .helpers import (
    get_club_or_404,
    get_user_or_404,
    assert_can_manage,
)
from .. import storage
from ..storage import ArrayUnion, ArrayRemove, SERVER_TIMESTAMP
from ..models import Club, AppUser, InvitationStatus, utcnow


def generate_club_id() -> str:
    """Return a random UUID based identifier for new clubs."""
    return uuid.uuid4().hex


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _assert_name_free(name: str, club_id: str | None = None) -> None:
    wanted = name.lower()
    for club in storage.list_clubs():
        if club.id != club_id and club.name.lower() == wanted:
            raise ServiceError("Club name already taken", 400)


def _add_member(club_id: str, user_id: str, conn) -> None:
    """Add the membership on both sides. Adding twice changes nothing."""
    storage.update_document(storage.CLUBS, club_id, {"members": ArrayUnion([user_id])}, conn=conn)
    storage.update_document(
        storage.USERS,
        user_id,
        {"clubIds": ArrayUnion([club_id]), "updatedAt": SERVER_TIMESTAMP},
        conn=conn,
    )


def _remove_member(club_id: str, user_id: str, conn) -> None:
    storage.update_document(storage.CLUBS, club_id, {"members": ArrayRemove([user_id])}, conn=conn)
    try:
        storage.update_document(
            storage.USERS,
            user_id,
            {"clubIds": ArrayRemove([club_id]), "updatedAt": SERVER_TIMESTAMP},
            conn=conn,
        )
    except storage.DocumentNotFound:
        logger.warning(f"member {user_id} of club {club_id} has no user document")


def create_club_record(
    name: str,
    leader_id: str,
    conn,
    description: str = "",
    logo_url: str = "",
    social_media: dict | None = None,
) -> Club:
    """Write a new active club led by ``leader_id`` who also becomes a member."""
    club = Club(
        id=generate_club_id(),
        name=name,
        description=description,
        logo_url=logo_url,
        leader_id=leader_id,
        social_media=dict(social_media or {}),
        is_active=True,
        created_at=utcnow(),
    )
    storage.save_club(club, conn=conn)
    _add_member(club.id, leader_id, conn)
    club.members.append(leader_id)
    return club


def create_club(
    actor_id: str,
    name: str,
    description: str = "",
    logo_url: str = "",
    social_media: dict | None = None,
    leader_id: str | None = None,
) -> Club:
    """Create a club directly (admins only)."""
    actor = get_user_or_404(actor_id)
    if not actor.is_admin:
        raise ServiceError("Forbidden", 403)
    name = _clean(name)
    if not name:
        raise ServiceError("Club name required", 400)
    leader_id = leader_id or actor_id
    get_user_or_404(leader_id)
    _assert_name_free(name)
    with storage.transaction() as conn:
        club = create_club_record(
            name,
            leader_id,
            conn,
            description=_clean(description),
            logo_url=logo_url or "",
            social_media=social_media,
        )
    logger.info(f"club {club.id} ({club.name}) created by {actor_id}, leader {leader_id}")
    return club


def list_clubs(
    query: str | None = None,
    active_only: bool = True,
    limit: int | None = None,
    offset: int = 0,
) -> list[Club]:
    """Return clubs sorted by name, filtered by an optional search text."""
    q = query.strip().lower() if query else None
    result = []
    for club in storage.list_clubs(active_only=active_only):
        if q and q not in club.name.lower() and q not in club.description.lower():
            continue
        result.append(club)
    if offset:
        result = result[offset:]
    if limit is not None:
        result = result[:limit]
    return result


def update_club(
    club_id: str,
    actor_id: str,
    name: str | None = None,
    description: str | None = None,
    logo_url: str | None = None,
    social_media: dict | None = None,
    is_active: bool | None = None,
) -> Club:
    """Update basic club fields (leader or admin)."""
    club = get_club_or_404(club_id)
    assert_can_manage(club, actor_id)
    fields: dict = {}
    if name is not None:
        name = _clean(name)
        if not name:
            raise ServiceError("Club name required", 400)
        if name != club.name:
            _assert_name_free(name, club_id)
        fields["name"] = name
    if description is not None:
        fields["description"] = description.strip()
    if logo_url is not None:
        fields["logoURL"] = logo_url
    if social_media is not None:
        fields["socialMedia"] = {str(k): str(v) for k, v in social_media.items() if v}
    if is_active is not None:
        fields["isActive"] = bool(is_active)
    if fields:
        storage.update_document(storage.CLUBS, club_id, fields)
    return get_club_or_404(club_id)


def set_active(club_id: str, actor_id: str, active: bool) -> Club:
    return update_club(club_id, actor_id, is_active=active)


def join_club(club_id: str, user_id: str) -> Club:
    """Join an active club. Joining a club twice is a no-op.

    A pending invitation to the club is marked accepted by the join.
    """
    with storage.transaction() as conn:
        club = get_club_or_404(club_id, conn=conn)
        get_user_or_404(user_id, conn=conn)
        if not club.is_active:
            raise ServiceError("Club is not active", 400)
        _add_member(club_id, user_id, conn)
        for invitation in storage.list_invitations(
            club_id=club_id, receiver_id=user_id, status=InvitationStatus.PENDING, conn=conn
        ):
            storage.update_document(
                storage.INVITATIONS,
                invitation.id,
                {"status": InvitationStatus.ACCEPTED.value},
                conn=conn,
            )
    logger.info(f"user {user_id} joined club {club_id}")
    return get_club_or_404(club_id)


def leave_club(club_id: str, user_id: str) -> Club:
    """Leave a club. Leaving a club one is not in is a no-op."""
    with storage.transaction() as conn:
        club = get_club_or_404(club_id, conn=conn)
        if club.is_leader(user_id):
            raise ServiceError("Leader cannot leave", 400)
        _remove_member(club_id, user_id, conn)
    logger.info(f"user {user_id} left club {club_id}")
    return get_club_or_404(club_id)


def remove_member(club_id: str, actor_id: str, user_id: str) -> Club:
    """Remove a member from the club (leader or admin)."""
    club = get_club_or_404(club_id)
    assert_can_manage(club, actor_id)
    if club.is_leader(user_id):
        raise ServiceError("Cannot remove the leader", 400)
    if user_id not in club.members:
        raise ServiceError("Not a member", 404)
    with storage.transaction() as conn:
        _remove_member(club_id, user_id, conn)
        for invitation in storage.list_invitations(
            club_id=club_id, receiver_id=user_id, status=InvitationStatus.PENDING, conn=conn
        ):
            storage.delete_document(storage.INVITATIONS, invitation.id, conn=conn)
    logger.info(f"user {actor_id} removed {user_id} from club {club_id}")
    return get_club_or_404(club_id)


def list_members(club_id: str) -> list[AppUser]:
    club = get_club_or_404(club_id)
    return storage.get_users(club.members)


def transfer_leadership(club_id: str, actor_id: str, new_leader_id: str) -> Club:
    club = get_club_or_404(club_id)
    assert_can_manage(club, actor_id)
    if new_leader_id not in club.members:
        raise ServiceError("New leader must be a member", 400)
    storage.update_document(storage.CLUBS, club_id, {"leaderID": new_leader_id})
    logger.info(f"club {club_id} leadership moved from {club.leader_id} to {new_leader_id}")
    return get_club_or_404(club_id)


def delete_club(club_id: str, actor_id: str) -> None:
    """Delete a club together with its events and invitations.

    Every reference to the club and its events is removed from the user
    documents in the same transaction.
    """
    club = get_club_or_404(club_id)
    assert_can_manage(club, actor_id)
    with storage.transaction() as conn:
        event_ids = list(club.events)
        for event in storage.list_events(club_id, conn=conn):
            if event.id not in event_ids:
                event_ids.append(event.id)
        for event_id in event_ids:
            event = storage.get_event(event_id, conn=conn)
            if event:
                for uid in event.attendees:
                    try:
                        storage.update_document(
                            storage.USERS, uid, {"eventIds": ArrayRemove([event_id])}, conn=conn
                        )
                    except storage.DocumentNotFound:
                        logger.warning(f"attendee {uid} of event {event_id} has no user document")
            storage.delete_document(storage.EVENTS, event_id, conn=conn)
        for uid in club.members:
            try:
                storage.update_document(
                    storage.USERS,
                    uid,
                    {"clubIds": ArrayRemove([club_id]), "updatedAt": SERVER_TIMESTAMP},
                    conn=conn,
                )
            except storage.DocumentNotFound:
                logger.warning(f"member {uid} of club {club_id} has no user document")
        for invitation in storage.list_invitations(club_id=club_id, conn=conn):
            storage.delete_document(storage.INVITATIONS, invitation.id, conn=conn)
        storage.delete_document(storage.CLUBS, club_id, conn=conn)
    logger.info(f"club {club_id} deleted by {actor_id} with {len(event_ids)} events")


def club_event_titles(club_id: str) -> list[dict]:
    """Return ``{event_id, title}`` entries in the club's event order."""
    club = get_club_or_404(club_id)
    return [{"event_id": e.id, "title": e.title} for e in storage.get_events(club.events)]
