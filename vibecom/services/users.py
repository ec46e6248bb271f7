from __future__ import annotations
import secrets
import datetime
import uuid
from loguru import logger
from passlib.context import CryptContext
from .exceptions import ServiceError
from .helpers import get_user_or_404, user_to_dict
from . import state
from .. import storage
from ..models import AppUser, UserRole, utcnow


pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # unknown or malformed hash
        return False


def _normalize_email(email: str) -> str:
    email = (email or "").strip()
    if "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ServiceError("Invalid email", 400)
    return email


def _assert_email_free(email: str, user_id: str | None = None, conn=None) -> None:
    existing = storage.find_credentials(email, conn=conn)
    if existing and existing["id"] != user_id:
        raise ServiceError("Email already registered", 400)


def register(email: str, password: str, display_name: str, photo_url: str | None = None) -> str:
    """Create an account and its public profile. Returns the new user id.

    The very first account becomes an admin.
    """
    email = _normalize_email(email)
    display_name = (display_name or "").strip()
    if not display_name:
        raise ServiceError("Display name required", 400)
    if not password:
        raise ServiceError("Password required", 400)
    password_hash = hash_password(password)

    with storage.transaction() as conn:
        storage.lock_collection(storage.CREDENTIALS, conn)
        _assert_email_free(email, conn=conn)
        is_first = storage.count(storage.USERS, conn=conn) == 0
        now = utcnow()
        user = AppUser(
            id=uuid.uuid4().hex,
            display_name=display_name,
            email=email,
            photo_url=photo_url or "",
            role=UserRole.ADMIN if is_first else UserRole.USER,
            created_at=now,
            updated_at=now,
        )
        storage.save_user(user, conn=conn)
        storage.save_credentials(user.id, email, password_hash, conn=conn)
    logger.info(f"registered user {user.id} ({user.role.value})")
    return user.id


def login(email: str, password: str):
    """Return ``(success, access_token, refresh_token, user_id)``."""
    creds = storage.find_credentials(email or "")
    if not creds or not check_password(creds.get("passwordHash", ""), password):
        return False, None, None, None
    user_id = creds["id"]

    access_token = secrets.token_hex(16)
    refresh_token = secrets.token_hex(16)
    storage.insert_token(access_token, user_id)
    storage.insert_refresh_token(user_id, refresh_token, datetime.datetime.utcnow() + state.REFRESH_TOKEN_TTL)
    return True, access_token, refresh_token, user_id


def logout(token: str) -> None:
    info = storage.get_token(token)
    storage.delete_token(token)
    if info:
        storage.delete_refresh_token(info[0])


def refresh_token(token: str) -> str:
    """Validate ``token`` and extend its lifetime. Returns the user id."""
    info = storage.get_token(token)
    if not info:
        raise ServiceError("Invalid token", 401)
    uid, ts = info
    if datetime.datetime.utcnow() - ts > state.TOKEN_TTL:
        storage.delete_token(token)
        raise ServiceError("Token expired", 401)
    storage.insert_token(token, uid)
    return uid


def refresh_access_token(refresh_token: str) -> tuple[str, str]:
    """Issue a new access token for a valid refresh token."""
    info = storage.get_refresh_token(refresh_token)
    if not info:
        raise ServiceError("Invalid refresh token", 401)
    uid, expires = info
    if datetime.datetime.utcnow() > expires:
        storage.delete_refresh_token(uid)
        raise ServiceError("Refresh token expired", 401)
    token = secrets.token_hex(16)
    storage.insert_token(token, uid)
    return token, uid


def user_info(user_id: str) -> dict:
    user = get_user_or_404(user_id)
    info = user_to_dict(user)
    info.update(
        {
            "joined_clubs": len(user.club_ids),
            "attending_events": len(user.event_ids),
        }
    )
    return info


def update_profile(
    user_id: str,
    display_name: str | None = None,
    email: str | None = None,
    photo_url: str | None = None,
) -> AppUser:
    user = get_user_or_404(user_id)
    fields: dict = {}
    if display_name is not None:
        display_name = display_name.strip()
        if not display_name:
            raise ServiceError("Display name required", 400)
        fields["displayName"] = display_name
    if photo_url is not None:
        fields["photoURL"] = photo_url
    new_email = None
    if email is not None and email.strip().lower() != user.email.lower():
        new_email = _normalize_email(email)
        fields["email"] = new_email
    if not fields:
        return user
    fields["updatedAt"] = storage.SERVER_TIMESTAMP
    with storage.transaction() as conn:
        if new_email:
            storage.lock_collection(storage.CREDENTIALS, conn)
            _assert_email_free(new_email, user_id, conn=conn)
        storage.update_document(storage.USERS, user_id, fields, conn=conn)
        if new_email:
            storage.update_document(
                storage.CREDENTIALS,
                user_id,
                {"email": new_email, "emailLower": new_email.lower()},
                conn=conn,
            )
    return get_user_or_404(user_id)


def change_password(user_id: str, old_password: str, new_password: str) -> None:
    creds = storage.get_credentials(user_id)
    if not creds:
        raise ServiceError("User not found", 404)
    if not check_password(creds.get("passwordHash", ""), old_password):
        raise ServiceError("Wrong password", 400)
    if not new_password:
        raise ServiceError("Password required", 400)
    storage.update_document(storage.CREDENTIALS, user_id, {"passwordHash": hash_password(new_password)})
    # existing sessions end with the old password
    storage.delete_user_tokens(user_id)
    storage.delete_refresh_token(user_id)


def list_user_clubs(user_id: str) -> list:
    user = get_user_or_404(user_id)
    return storage.get_clubs(user.club_ids)


def list_user_events(user_id: str) -> list:
    user = get_user_or_404(user_id)
    events = storage.get_events(user.event_ids)
    events.sort(key=lambda e: e.start_date)
    return events


def list_users(exclude_admins: bool = True) -> list[AppUser]:
    return storage.list_users(exclude_admins=exclude_admins)


def set_role(actor_id: str, user_id: str, role: str) -> None:
    """Change a user's role (admins only)."""
    actor = get_user_or_404(actor_id)
    if not actor.is_admin:
        raise ServiceError("Forbidden", 403)
    try:
        new_role = UserRole(role)
    except ValueError:
        raise ServiceError("Invalid role", 400)
    if actor_id == user_id and new_role != UserRole.ADMIN:
        raise ServiceError("Cannot demote yourself", 400)
    get_user_or_404(user_id)
    storage.update_document(
        storage.USERS,
        user_id,
        {"role": new_role.value, "updatedAt": storage.SERVER_TIMESTAMP},
    )
    logger.info(f"user {actor_id} set role of {user_id} to {new_role.value}")
