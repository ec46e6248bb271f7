from __future__ import annotations
import uuid
from loguru import logger
from .exceptions import ServiceError
from .auth import require_admin
from .helpers import get_user_or_404, get_application_or_404
from .clubs import create_club_record, _assert_name_free
from .. import storage
from ..models import ApplicationStatus, ClubApplication, utcnow


def submit_application(
    user_id: str,
    name: str,
    description: str,
    target_audience: str,
    activities: str,
) -> ClubApplication:
    """File a request to found a new club."""
    get_user_or_404(user_id)
    values = [(v or "").strip() for v in (name, description, target_audience, activities)]
    if not all(values):
        raise ServiceError("All fields are required", 400)
    name, description, target_audience, activities = values
    application = ClubApplication(
        id=uuid.uuid4().hex,
        name=name,
        description=description,
        target_audience=target_audience,
        activities=activities,
        created_by=user_id,
        created_at=utcnow(),
    )
    storage.save_application(application)
    logger.info(f"club application {application.id} ({name}) submitted by {user_id}")
    return application


def list_applications(actor_id: str, status: str | None = None) -> list[ClubApplication]:
    require_admin(actor_id)
    wanted = None
    if status:
        try:
            wanted = ApplicationStatus(status)
        except ValueError:
            raise ServiceError("Invalid status", 400)
    return storage.list_applications(wanted)


def list_user_applications(user_id: str) -> list[ClubApplication]:
    return [a for a in storage.list_applications() if a.created_by == user_id]


def _pending(application_id: str) -> ClubApplication:
    application = get_application_or_404(application_id)
    if application.status != ApplicationStatus.PENDING:
        raise ServiceError("Application already reviewed", 400)
    return application


def approve_application(application_id: str, actor_id: str) -> ClubApplication:
    """Create the requested club with the applicant as its leader."""
    require_admin(actor_id)
    application = _pending(application_id)
    get_user_or_404(application.created_by)
    _assert_name_free(application.name)
    with storage.transaction() as conn:
        club = create_club_record(
            application.name,
            application.created_by,
            conn,
            description=application.description,
        )
        storage.update_document(
            storage.APPLICATIONS,
            application_id,
            {
                "status": ApplicationStatus.APPROVED.value,
                "reviewedBy": actor_id,
                "clubId": club.id,
            },
            conn=conn,
        )
    logger.info(f"application {application_id} approved by {actor_id}, club {club.id}")
    return get_application_or_404(application_id)


def reject_application(application_id: str, actor_id: str) -> ClubApplication:
    require_admin(actor_id)
    _pending(application_id)
    storage.update_document(
        storage.APPLICATIONS,
        application_id,
        {"status": ApplicationStatus.REJECTED.value, "reviewedBy": actor_id},
    )
    return get_application_or_404(application_id)
