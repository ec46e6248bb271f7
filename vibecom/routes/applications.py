from fastapi import APIRouter, Header
from pydantic import BaseModel
from ..services import applications as application_service
from ..services.auth import require_auth, assert_token_matches
from ..services.helpers import application_to_dict

router = APIRouter(tags=["applications"])


class ApplicationCreate(BaseModel):
    user_id: str
    name: str
    description: str
    target_audience: str
    activities: str


class ReviewRequest(BaseModel):
    user_id: str


@router.post("/club_applications")
def submit_application(data: ApplicationCreate, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    application = application_service.submit_application(
        data.user_id,
        data.name,
        data.description,
        data.target_audience,
        data.activities,
    )
    return {"status": "ok", "application_id": application.id}


@router.get("/club_applications")
def list_applications(status: str | None = None, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    return [application_to_dict(a) for a in application_service.list_applications(uid, status)]


@router.get("/users/{user_id}/club_applications")
def list_user_applications(user_id: str, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, user_id)
    return [application_to_dict(a) for a in application_service.list_user_applications(user_id)]


@router.post("/club_applications/{application_id}/approve")
def approve_application(application_id: str, data: ReviewRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    application = application_service.approve_application(application_id, data.user_id)
    return application_to_dict(application)


@router.post("/club_applications/{application_id}/reject")
def reject_application(application_id: str, data: ReviewRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    application = application_service.reject_application(application_id, data.user_id)
    return application_to_dict(application)
