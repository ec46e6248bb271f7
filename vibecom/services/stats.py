from __future__ import annotations
from .auth import require_admin
from .events import list_events
from .. import storage
from ..models import ApplicationStatus

FEATURED_LIMIT = 5
POPULAR_LIMIT = 5
UPCOMING_LIMIT = 10


def home() -> dict:
    """Return the lists shown on the home screen."""
    upcoming = list_events(upcoming=True)
    featured = sorted(upcoming, key=lambda e: len(e.attendees), reverse=True)
    popular = sorted(
        storage.list_clubs(active_only=True),
        key=lambda c: len(c.members),
        reverse=True,
    )
    return {
        "featured_events": featured[:FEATURED_LIMIT],
        "popular_clubs": popular[:POPULAR_LIMIT],
        "upcoming_events": upcoming[:UPCOMING_LIMIT],
    }


def admin_stats(actor_id: str) -> dict:
    require_admin(actor_id)
    return {
        "users": storage.count(storage.USERS),
        "clubs": storage.count(storage.CLUBS),
        "active_clubs": storage.count(storage.CLUBS, [("isActive", "==", True)]),
        "events": storage.count(storage.EVENTS),
        "pending_applications": storage.count(
            storage.APPLICATIONS, [("status", "==", ApplicationStatus.PENDING.value)]
        ),
    }
