import argparse
import sys

from loguru import logger

from . import storage
from .logging_setup import setup_logging
from .models import UserRole
from .services.exceptions import ServiceError
from .services import users as user_service
from .services import clubs as club_service
from .services import events as event_service
from .services import applications as application_service


def register_user(email: str, password: str, display_name: str, admin: bool = False) -> str:
    """Register an account, optionally promoting it to admin right away."""
    uid = user_service.register(email, password, display_name)
    if admin:
        storage.update_document(storage.USERS, uid, {"role": UserRole.ADMIN.value})
    return uid


def set_role(user_id: str, role: str) -> None:
    """Set a user's role without an acting admin (operator access)."""
    try:
        new_role = UserRole(role)
    except ValueError:
        raise ServiceError("Invalid role", 400)
    storage.update_document(
        storage.USERS,
        user_id,
        {"role": new_role.value, "updatedAt": storage.SERVER_TIMESTAMP},
    )


def print_clubs(query: str | None = None, include_inactive: bool = False) -> None:
    for club in club_service.list_clubs(query, active_only=not include_inactive):
        state = "" if club.is_active else " (inactive)"
        print(f"{club.id} {club.name}: {len(club.members)} members, {len(club.events)} events{state}")


def print_events(category: str | None = None, club_id: str | None = None, upcoming: bool = False) -> None:
    for event in event_service.list_events(category=category, club_id=club_id, upcoming=upcoming):
        print(
            f"{event.start_date:%Y-%m-%d %H:%M} {event.title} @ {event.location} "
            f"[{event.category.value}] {len(event.attendees)} attending"
        )


def main(argv=None):
    parser = argparse.ArgumentParser(description='vibecom club network')
    parser.add_argument('--log-level')
    sub = parser.add_subparsers(dest='cmd')

    serve = sub.add_parser('serve')
    serve.add_argument('--host', default='127.0.0.1')
    serve.add_argument('--port', type=int, default=8000)
    serve.add_argument('--reload', action='store_true')

    reg = sub.add_parser('register_user')
    reg.add_argument('email')
    reg.add_argument('password')
    reg.add_argument('display_name')
    reg.add_argument('--admin', action='store_true')

    role = sub.add_parser('set_role')
    role.add_argument('user_id')
    role.add_argument('role', choices=[r.value for r in UserRole])

    lclubs = sub.add_parser('list_clubs')
    lclubs.add_argument('--query')
    lclubs.add_argument('--all', action='store_true', help='include inactive clubs')

    levents = sub.add_parser('list_events')
    levents.add_argument('--category')
    levents.add_argument('--club')
    levents.add_argument('--upcoming', action='store_true')

    approve = sub.add_parser('approve_application')
    approve.add_argument('application_id')
    approve.add_argument('admin_id')

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.cmd == 'serve':
            import uvicorn

            uvicorn.run("vibecom.api:app", host=args.host, port=args.port, reload=args.reload)
        elif args.cmd == 'register_user':
            uid = register_user(args.email, args.password, args.display_name, admin=args.admin)
            print(uid)
        elif args.cmd == 'set_role':
            set_role(args.user_id, args.role)
        elif args.cmd == 'list_clubs':
            print_clubs(args.query, include_inactive=args.all)
        elif args.cmd == 'list_events':
            print_events(args.category, args.club, args.upcoming)
        elif args.cmd == 'approve_application':
            application = application_service.approve_application(args.application_id, args.admin_id)
            print(application.club_id)
        else:
            parser.print_help()
            return 1
    except ServiceError as e:
        logger.error(e.message)
        return 1
    except storage.DocumentNotFound as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
