from __future__ import annotations
import uuid
from loguru import logger
from .exceptions import ServiceError
from .helpers import (
    get_club_or_404,
    get_user_or_404,
    get_invitation_or_404,
    assert_can_manage,
)
from .clubs import _add_member
from .. import storage
from ..models import AppUser, ClubInvitation, InvitationStatus, utcnow


def send_invitation(club_id: str, sender_id: str, receiver_id: str) -> ClubInvitation:
    """Invite a user to a club (leader or admin)."""
    club = get_club_or_404(club_id)
    assert_can_manage(club, sender_id)
    sender = get_user_or_404(sender_id)
    receiver = get_user_or_404(receiver_id)
    if receiver.is_admin:
        raise ServiceError("Admins cannot be invited", 400)
    with storage.transaction() as conn:
        club = get_club_or_404(club_id, conn=conn)
        if receiver_id in club.members:
            raise ServiceError("Already member", 400)
        pending = storage.list_invitations(
            club_id=club_id, receiver_id=receiver_id, status=InvitationStatus.PENDING, conn=conn
        )
        if pending:
            raise ServiceError("Invitation already pending", 400)
        invitation = ClubInvitation(
            id=uuid.uuid4().hex,
            club_id=club.id,
            club_name=club.name,
            sender_id=sender.id,
            sender_name=sender.display_name,
            receiver_id=receiver_id,
            status=InvitationStatus.PENDING,
            created_at=utcnow(),
        )
        storage.save_invitation(invitation, conn=conn)
    logger.info(f"invitation {invitation.id}: {sender_id} invited {receiver_id} to club {club_id}")
    return invitation


def list_club_invitations(club_id: str, status: str | None = None) -> list[ClubInvitation]:
    get_club_or_404(club_id)
    return storage.list_invitations(club_id=club_id, status=_parse_status(status))


def list_user_invitations(user_id: str, status: str | None = None) -> list[ClubInvitation]:
    get_user_or_404(user_id)
    return storage.list_invitations(receiver_id=user_id, status=_parse_status(status))


def _parse_status(status: str | None) -> InvitationStatus | None:
    if not status:
        return None
    try:
        return InvitationStatus(status)
    except ValueError:
        raise ServiceError("Invalid status", 400)


def list_invitable_users(club_id: str) -> list[AppUser]:
    """Non-admin users who are neither members nor already invited."""
    club = get_club_or_404(club_id)
    invited = {
        inv.receiver_id
        for inv in storage.list_invitations(club_id=club_id, status=InvitationStatus.PENDING)
    }
    return [
        u
        for u in storage.list_users(exclude_admins=True)
        if u.id not in club.members and u.id not in invited
    ]


def cancel_invitation(invitation_id: str, actor_id: str) -> None:
    """Withdraw an invitation (its sender, the club leader or an admin)."""
    invitation = get_invitation_or_404(invitation_id)
    if actor_id != invitation.sender_id:
        club = storage.get_club(invitation.club_id)
        if club:
            assert_can_manage(club, actor_id)
        else:
            actor = get_user_or_404(actor_id)
            if not actor.is_admin:
                raise ServiceError("Forbidden", 403)
    storage.delete_document(storage.INVITATIONS, invitation_id)
    logger.info(f"invitation {invitation_id} cancelled by {actor_id}")


def _respond(invitation_id: str, user_id: str, conn) -> ClubInvitation:
    invitation = get_invitation_or_404(invitation_id, conn=conn)
    if invitation.receiver_id != user_id:
        raise ServiceError("Forbidden", 403)
    if invitation.status != InvitationStatus.PENDING:
        raise ServiceError("Invitation already answered", 400)
    return invitation


def accept_invitation(invitation_id: str, user_id: str) -> ClubInvitation:
    """Accept an invitation and join the club in the same transaction."""
    with storage.transaction() as conn:
        invitation = _respond(invitation_id, user_id, conn)
        club = get_club_or_404(invitation.club_id, conn=conn)
        if not club.is_active:
            raise ServiceError("Club is not active", 400)
        storage.update_document(
            storage.INVITATIONS,
            invitation_id,
            {"status": InvitationStatus.ACCEPTED.value},
            conn=conn,
        )
        _add_member(club.id, user_id, conn)
    logger.info(f"user {user_id} accepted invitation {invitation_id} to club {invitation.club_id}")
    return get_invitation_or_404(invitation_id)


def reject_invitation(invitation_id: str, user_id: str) -> ClubInvitation:
    with storage.transaction() as conn:
        _respond(invitation_id, user_id, conn)
        storage.update_document(
            storage.INVITATIONS,
            invitation_id,
            {"status": InvitationStatus.REJECTED.value},
            conn=conn,
        )
    return get_invitation_or_404(invitation_id)
