from fastapi import APIRouter, Header
from pydantic import BaseModel
from ..services import users as user_service
from ..services.auth import require_auth, assert_token_matches
from ..services.helpers import user_to_dict, club_to_dict, event_to_dict

router = APIRouter(tags=["users"])


class UserCreate(BaseModel):
    email: str
    password: str
    display_name: str
    photo_url: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class LogoutRequest(BaseModel):
    token: str


class TokenOnly(BaseModel):
    token: str


class RefreshRequest(BaseModel):
    refresh_token: str


class ProfileUpdate(BaseModel):
    display_name: str | None = None
    email: str | None = None
    photo_url: str | None = None


class PasswordChange(BaseModel):
    old_password: str
    new_password: str


class RoleRequest(BaseModel):
    user_id: str
    role: str


@router.post("/users")
def register_user_api(data: UserCreate):
    uid = user_service.register(data.email, data.password, data.display_name, data.photo_url)
    return {"status": "ok", "user_id": uid}


@router.post("/login")
def login_api(data: LoginRequest):
    success, access, refresh, user_id = user_service.login(data.email, data.password)
    if success:
        return {
            "success": True,
            "access_token": access,
            "refresh_token": refresh,
            "token": access,
            "user_id": user_id,
        }
    return {"success": False}


@router.post("/logout")
def logout_api(data: LogoutRequest):
    user_service.logout(data.token)
    return {"status": "ok"}


@router.post("/check_token")
def check_token_api(data: TokenOnly):
    uid = user_service.refresh_token(data.token)
    return {"status": "ok", "user_id": uid}


@router.post("/refresh_token")
def refresh_access_token_api(data: RefreshRequest):
    token, uid = user_service.refresh_access_token(data.refresh_token)
    return {"access_token": token, "token": token, "user_id": uid}


@router.get("/users")
def list_users_api(exclude_admins: bool = True, authorization: str | None = Header(None)):
    require_auth(authorization)
    return [user_to_dict(u) for u in user_service.list_users(exclude_admins=exclude_admins)]


@router.get("/users/{user_id}")
def get_user_info(user_id: str):
    return user_service.user_info(user_id)


@router.api_route("/users/{user_id}", methods=["PATCH", "PUT"])
def update_profile_api(user_id: str, data: ProfileUpdate, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, user_id)
    user = user_service.update_profile(
        user_id,
        display_name=data.display_name,
        email=data.email,
        photo_url=data.photo_url,
    )
    return user_to_dict(user)


@router.post("/users/{user_id}/password")
def change_password_api(user_id: str, data: PasswordChange, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, user_id)
    user_service.change_password(user_id, data.old_password, data.new_password)
    return {"status": "ok"}


@router.get("/users/{user_id}/clubs")
def list_user_clubs_api(user_id: str):
    return [club_to_dict(c) for c in user_service.list_user_clubs(user_id)]


@router.get("/users/{user_id}/events")
def list_user_events_api(user_id: str):
    return [event_to_dict(e) for e in user_service.list_user_events(user_id)]


@router.post("/users/{target_id}/role")
def set_role_api(target_id: str, data: RoleRequest, authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    assert_token_matches(uid, data.user_id)
    user_service.set_role(data.user_id, target_id, data.role)
    return {"status": "ok"}
