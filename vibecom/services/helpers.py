from .exceptions import ServiceError
from .. import storage
from ..models import AppUser, Club, Event, ClubInvitation, ClubApplication


def get_user_or_404(user_id: str, conn=None) -> AppUser:
    user = storage.get_user(user_id, conn=conn)
    if not user:
        raise ServiceError("User not found", 404)
    return user


def get_club_or_404(club_id: str, conn=None) -> Club:
    club = storage.get_club(club_id, conn=conn)
    if not club:
        raise ServiceError("Club not found", 404)
    return club


def get_event_or_404(event_id: str, conn=None) -> Event:
    event = storage.get_event(event_id, conn=conn)
    if not event:
        raise ServiceError("Event not found", 404)
    return event


def get_invitation_or_404(invitation_id: str, conn=None) -> ClubInvitation:
    invitation = storage.get_invitation(invitation_id, conn=conn)
    if not invitation:
        raise ServiceError("Invitation not found", 404)
    return invitation


def get_application_or_404(application_id: str, conn=None) -> ClubApplication:
    application = storage.get_application(application_id, conn=conn)
    if not application:
        raise ServiceError("Application not found", 404)
    return application


def assert_can_manage(club: Club, user_id: str) -> None:
    """Allow the club leader or a system admin."""
    if club.is_leader(user_id):
        return
    user = storage.get_user(user_id)
    if user and user.is_admin:
        return
    raise ServiceError("Forbidden", 403)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def user_to_dict(user: AppUser) -> dict:
    return {
        "user_id": user.id,
        "display_name": user.display_name,
        "email": user.email,
        "photo_url": user.photo_url,
        "role": user.role.value,
        "club_ids": list(user.club_ids),
        "event_ids": list(user.event_ids),
        "created_at": _iso(user.created_at),
        "updated_at": _iso(user.updated_at),
    }


def club_to_dict(club: Club) -> dict:
    return {
        "club_id": club.id,
        "name": club.name,
        "description": club.description,
        "logo_url": club.logo_url,
        "leader_id": club.leader_id,
        "members": list(club.members),
        "member_count": len(club.members),
        "events": list(club.events),
        "social_media": dict(club.social_media),
        "is_active": club.is_active,
        "created_at": _iso(club.created_at),
    }


def event_to_dict(event: Event) -> dict:
    return {
        "event_id": event.id,
        "title": event.title,
        "description": event.description,
        "start_date": _iso(event.start_date),
        "end_date": _iso(event.end_date),
        "location": event.location,
        "club_id": event.club_id,
        "image_url": event.image_url,
        "attendees": list(event.attendees),
        "attendee_count": len(event.attendees),
        "category": event.category.value,
        "created_at": _iso(event.created_at),
    }


def invitation_to_dict(invitation: ClubInvitation) -> dict:
    return {
        "invitation_id": invitation.id,
        "club_id": invitation.club_id,
        "club_name": invitation.club_name,
        "sender_id": invitation.sender_id,
        "sender_name": invitation.sender_name,
        "receiver_id": invitation.receiver_id,
        "status": invitation.status.value,
        "created_at": _iso(invitation.created_at),
    }


def application_to_dict(application: ClubApplication) -> dict:
    return {
        "application_id": application.id,
        "name": application.name,
        "description": application.description,
        "target_audience": application.target_audience,
        "activities": application.activities,
        "created_by": application.created_by,
        "created_at": _iso(application.created_at),
        "status": application.status.value,
        "reviewed_by": application.reviewed_by,
        "club_id": application.club_id,
    }
