from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

# Document fields keep the camelCase names used by the mobile client; the
# dataclasses below are what the services work with.


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class EventCategory(str, Enum):
    ALL = "all"
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    ART = "art"
    MUSIC = "music"
    SPORTS = "sports"
    SOCIAL = "social"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def to_timestamp(value: datetime.datetime | None) -> str | None:
    """Return ``value`` as an ISO string in UTC. Naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc).isoformat()


def parse_timestamp(value) -> datetime.datetime | None:
    """Parse a stored timestamp, returning ``None`` for anything unreadable."""
    if isinstance(value, datetime.datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.datetime.fromisoformat(value)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt


def _str(data: dict, key: str, default: str = "") -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _list(data: dict, key: str) -> List[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _enum(cls, value, default):
    try:
        return cls(value)
    except ValueError:
        return default


@dataclass
class AppUser:
    """Public profile stored in the ``users`` collection."""

    id: str
    display_name: str = ""
    email: str = ""
    photo_url: str = ""
    role: UserRole = UserRole.USER
    club_ids: List[str] = field(default_factory=list)
    # events the user is attending
    event_ids: List[str] = field(default_factory=list)
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_document(cls, doc: dict) -> "AppUser":
        return cls(
            id=doc["id"],
            display_name=_str(doc, "displayName"),
            email=_str(doc, "email"),
            photo_url=_str(doc, "photoURL"),
            role=_enum(UserRole, doc.get("role"), UserRole.USER),
            club_ids=_list(doc, "clubIds"),
            event_ids=_list(doc, "eventIds"),
            created_at=parse_timestamp(doc.get("createdAt")),
            updated_at=parse_timestamp(doc.get("updatedAt")),
        )

    def to_document(self) -> dict:
        return {
            "displayName": self.display_name,
            "email": self.email,
            "photoURL": self.photo_url,
            "role": self.role.value,
            "clubIds": list(self.club_ids),
            "eventIds": list(self.event_ids),
            "createdAt": to_timestamp(self.created_at),
            "updatedAt": to_timestamp(self.updated_at),
        }


@dataclass
class Club:
    id: str
    name: str
    description: str = ""
    logo_url: str = ""
    leader_id: str = ""
    members: List[str] = field(default_factory=list)
    events: List[str] = field(default_factory=list)
    social_media: Dict[str, str] = field(default_factory=dict)
    is_active: bool = True
    created_at: Optional[datetime.datetime] = None

    def is_leader(self, user_id: str | None) -> bool:
        return bool(user_id) and user_id == self.leader_id

    @classmethod
    def from_document(cls, doc: dict) -> "Club":
        social = doc.get("socialMedia")
        if not isinstance(social, dict):
            social = {}
        return cls(
            id=doc["id"],
            name=_str(doc, "name"),
            description=_str(doc, "description"),
            logo_url=_str(doc, "logoURL"),
            leader_id=_str(doc, "leaderID"),
            members=_list(doc, "members"),
            events=_list(doc, "events"),
            social_media={str(k): str(v) for k, v in social.items()},
            is_active=bool(doc.get("isActive", True)),
            created_at=parse_timestamp(doc.get("createdAt")),
        )

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "logoURL": self.logo_url,
            "leaderID": self.leader_id,
            "members": list(self.members),
            "events": list(self.events),
            "socialMedia": dict(self.social_media),
            "isActive": self.is_active,
            "createdAt": to_timestamp(self.created_at),
        }


@dataclass
class Event:
    id: str
    title: str
    start_date: datetime.datetime
    end_date: datetime.datetime
    club_id: str
    description: str = ""
    location: str = ""
    image_url: str = ""
    attendees: List[str] = field(default_factory=list)
    category: EventCategory = EventCategory.SOCIAL
    created_at: Optional[datetime.datetime] = None

    def has_ended(self, now: datetime.datetime | None = None) -> bool:
        return self.end_date < (now or utcnow())

    @classmethod
    def from_document(cls, doc: dict) -> "Event | None":
        """Build an event, or return ``None`` when required fields are unusable."""
        start = parse_timestamp(doc.get("startDate"))
        end = parse_timestamp(doc.get("endDate"))
        title = doc.get("title")
        if start is None or end is None or not isinstance(title, str):
            return None
        category = _enum(EventCategory, doc.get("category"), None)
        if category is None or category == EventCategory.ALL:
            return None
        return cls(
            id=doc["id"],
            title=title,
            description=_str(doc, "description"),
            start_date=start,
            end_date=end,
            location=_str(doc, "location"),
            club_id=_str(doc, "clubId"),
            image_url=_str(doc, "imageURL"),
            attendees=_list(doc, "attendees"),
            category=category,
            created_at=parse_timestamp(doc.get("createdAt")),
        )

    def to_document(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "startDate": to_timestamp(self.start_date),
            "endDate": to_timestamp(self.end_date),
            "location": self.location,
            "clubId": self.club_id,
            "imageURL": self.image_url,
            "attendees": list(self.attendees),
            "category": self.category.value,
            "createdAt": to_timestamp(self.created_at),
        }


@dataclass
class ClubInvitation:
    id: str
    club_id: str
    club_name: str
    sender_id: str
    sender_name: str
    receiver_id: str
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime.datetime = field(default_factory=utcnow)

    @classmethod
    def from_document(cls, doc: dict) -> "ClubInvitation":
        return cls(
            id=doc["id"],
            club_id=_str(doc, "clubId"),
            club_name=_str(doc, "clubName"),
            sender_id=_str(doc, "senderId"),
            sender_name=_str(doc, "senderName"),
            receiver_id=_str(doc, "receiverId"),
            status=_enum(InvitationStatus, doc.get("status"), InvitationStatus.PENDING),
            created_at=parse_timestamp(doc.get("createdAt")) or utcnow(),
        )

    def to_document(self) -> dict:
        return {
            "clubId": self.club_id,
            "clubName": self.club_name,
            "senderId": self.sender_id,
            "senderName": self.sender_name,
            "receiverId": self.receiver_id,
            "status": self.status.value,
            "createdAt": to_timestamp(self.created_at),
        }


@dataclass
class ClubApplication:
    """A request to found a new club, reviewed by an admin."""

    id: str
    name: str
    description: str
    target_audience: str
    activities: str
    created_by: str
    created_at: datetime.datetime = field(default_factory=utcnow)
    status: ApplicationStatus = ApplicationStatus.PENDING
    reviewed_by: Optional[str] = None
    # id of the club created when the application was approved
    club_id: Optional[str] = None

    @classmethod
    def from_document(cls, doc: dict) -> "ClubApplication":
        return cls(
            id=doc["id"],
            name=_str(doc, "name"),
            description=_str(doc, "description"),
            target_audience=_str(doc, "targetAudience"),
            activities=_str(doc, "activities"),
            created_by=_str(doc, "createdBy"),
            created_at=parse_timestamp(doc.get("createdAt")) or utcnow(),
            status=_enum(ApplicationStatus, doc.get("status"), ApplicationStatus.PENDING),
            reviewed_by=doc.get("reviewedBy") or None,
            club_id=doc.get("clubId") or None,
        )

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "targetAudience": self.target_audience,
            "activities": self.activities,
            "createdBy": self.created_by,
            "createdAt": to_timestamp(self.created_at),
            "status": self.status.value,
            "reviewedBy": self.reviewed_by,
            "clubId": self.club_id,
        }
