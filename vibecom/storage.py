"""Document store backing the service.

Documents live in one ``documents`` table keyed by ``(collection, doc_id)``
with the body stored as JSON. On top of that this module offers field
transforms (``ArrayUnion``, ``ArrayRemove``, ...), simple queries, write
batches, the auth token tables and typed helpers that map documents to the
records in :mod:`vibecom.models`.
"""

import copy
import datetime
import json
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from typing import Dict, Generator, Iterable, List, Sequence, Tuple

import psycopg2
import psycopg2.extras
import redis
from loguru import logger

from .config import (
    get_database_url,
    get_redis_url,
    get_cache_ttl,
)
from .models import (
    AppUser,
    Club,
    Event,
    ClubInvitation,
    ClubApplication,
    InvitationStatus,
    ApplicationStatus,
    UserRole,
    to_timestamp,
    utcnow,
)

USERS = "users"
CLUBS = "clubs"
EVENTS = "events"
INVITATIONS = "clubInvitations"
APPLICATIONS = "pendingClubs"
CREDENTIALS = "credentials"

# Field name that addresses the document id in queries.
DOCUMENT_ID = "__name__"

DATABASE_URL = get_database_url()

# Optional Redis cache
REDIS_URL = get_redis_url()
CACHE_TTL = get_cache_ttl()
_redis = redis.from_url(REDIS_URL) if REDIS_URL else None


class DocumentNotFound(LookupError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class _Sentinel:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return self.name


SERVER_TIMESTAMP = _Sentinel("SERVER_TIMESTAMP")
DELETE_FIELD = _Sentinel("DELETE_FIELD")


class ArrayUnion:
    """Append each value that is not already in the array field."""

    def __init__(self, values: Iterable):
        self.values = list(values)

    def __repr__(self) -> str:
        return f"ArrayUnion({self.values!r})"


class ArrayRemove:
    """Drop every occurrence of the given values from the array field."""

    def __init__(self, values: Iterable):
        self.values = list(values)

    def __repr__(self) -> str:
        return f"ArrayRemove({self.values!r})"


class Increment:
    def __init__(self, amount: int | float = 1):
        self.amount = amount


class _PgCursor:
    def __init__(self, cursor):
        self._c = cursor

    def execute(self, query, params=None):
        q = query.replace("?", "%s")
        self._c.execute(q, params or [])
        return self

    def executemany(self, query, seq):
        q = query.replace("?", "%s")
        self._c.executemany(q, seq)
        return self

    def fetchone(self):
        return self._c.fetchone()

    def fetchall(self):
        return self._c.fetchall()

    def __iter__(self):
        return iter(self._c)

    def __getattr__(self, name):
        return getattr(self._c, name)


class _PgConnection:
    def __init__(self, conn):
        self._conn = conn

    def cursor(self, *a, **kw):
        return _PgCursor(self._conn.cursor(*a, **kw))

    def execute(self, query, params=None):
        return self.cursor().execute(query, params)

    def commit(self):
        self._conn.commit()

    def rollback(self):
        self._conn.rollback()

    def close(self):
        self._conn.close()

    def __getattr__(self, name):
        return getattr(self._conn, name)


# in-process cache of document bodies, valid for ``_cache_url`` only
_doc_cache: Dict[Tuple[str, str], dict] = {}
_cache_url: str | None = None
# documents written by each open transaction, keyed by ``id(conn)`` and
# evicted again once that transaction ends
_pending_keys: Dict[int, set] = {}
# bumped on every eviction; a read only fills the cache if no eviction
# happened while it was running
_generation = 0
_cache_lock = threading.Lock()

# seconds a sqlite connection waits for another writer
SQLITE_TIMEOUT = 30


def _is_pg() -> bool:
    return DATABASE_URL.startswith("postgres")


def _cache_key(collection: str, doc_id: str) -> str:
    return f"vibecom:doc:{collection}:{doc_id}"


def _load_cache(collection: str, doc_id: str) -> dict | None:
    global _cache_url
    with _cache_lock:
        if _cache_url != DATABASE_URL:
            _doc_cache.clear()
            _cache_url = DATABASE_URL
        doc = _doc_cache.get((collection, doc_id))
    if doc is not None:
        return copy.deepcopy(doc)
    if not _redis:
        return None
    try:
        data = _redis.get(_cache_key(collection, doc_id))
    except redis.RedisError as e:
        logger.warning(f"redis read failed: {e}")
        return None
    if data is None:
        return None
    doc = json.loads(data)
    with _cache_lock:
        _doc_cache[(collection, doc_id)] = doc
    return copy.deepcopy(doc)


def _save_cache(collection: str, doc_id: str, doc: dict, generation: int | None = None) -> None:
    with _cache_lock:
        if generation is not None and generation != _generation:
            return
        _doc_cache[(collection, doc_id)] = copy.deepcopy(doc)
        if not _redis:
            return
        try:
            _redis.setex(_cache_key(collection, doc_id), CACHE_TTL, json.dumps(doc))
        except redis.RedisError as e:
            logger.warning(f"redis write failed: {e}")


def _evict(collection: str, doc_id: str) -> None:
    global _generation
    with _cache_lock:
        _generation += 1
        _doc_cache.pop((collection, doc_id), None)
        if not _redis:
            return
        try:
            _redis.delete(_cache_key(collection, doc_id))
        except redis.RedisError as e:
            logger.warning(f"redis delete failed: {e}")


def _refresh_after_write(conn) -> None:
    """Drop cached copies of every document touched by ``conn``'s transaction."""
    with _cache_lock:
        keys = _pending_keys.pop(id(conn), set())
    for collection, doc_id in keys:
        _evict(collection, doc_id)


def invalidate_cache() -> None:
    """Clear cached documents."""
    global _cache_url
    with _cache_lock:
        _doc_cache.clear()
        _pending_keys.clear()
        _cache_url = None


def _connect(immediate: bool = False):
    """Return a DB connection based on ``DATABASE_URL``.

    With ``immediate`` a sqlite connection starts with ``BEGIN IMMEDIATE`` so
    it holds the write lock before its first read.
    """
    if _is_pg():
        conn = psycopg2.connect(DATABASE_URL, cursor_factory=psycopg2.extras.RealDictCursor)
        conn = _PgConnection(conn)
        _init_schema(conn)
        return conn
    # sqlite:///relative.db or sqlite:////absolute/path.db
    path = DATABASE_URL
    if path.startswith("sqlite:///"):
        path = path[len("sqlite:///"):]
    if immediate:
        conn = sqlite3.connect(path, timeout=SQLITE_TIMEOUT, isolation_level=None)
    else:
        conn = sqlite3.connect(path, timeout=SQLITE_TIMEOUT)
    conn.row_factory = sqlite3.Row
    _init_schema(conn)
    if immediate:
        conn.execute("BEGIN IMMEDIATE")
    return conn


@contextmanager
def transaction() -> Generator[object, None, None]:
    """Context manager yielding a connection with an active transaction.

    Reads made through the connection lock what they read (the whole
    database on sqlite, the rows on PostgreSQL) until the transaction ends.
    """
    conn = _connect(immediate=True)
    try:
        yield conn
        conn.commit()
        _refresh_after_write(conn)
    except Exception:
        conn.rollback()
        _refresh_after_write(conn)
        raise
    finally:
        conn.close()


@contextmanager
def _use(conn=None, write: bool = False):
    """Yield ``conn`` or a fresh connection that is committed and closed.

    Fresh connections for a ``write`` take the write lock up front so a
    read-modify-write cannot interleave with another writer.
    """
    if conn is not None:
        yield conn
        return
    own = _connect(immediate=write)
    try:
        yield own
        own.commit()
    except Exception:
        own.rollback()
        raise
    finally:
        own.close()


def _init_schema(conn) -> None:
    cur = conn.cursor()
    cur.execute(
        """CREATE TABLE IF NOT EXISTS documents (
        collection TEXT NOT NULL,
        doc_id TEXT NOT NULL,
        data TEXT NOT NULL,
        updated TEXT,
        PRIMARY KEY (collection, doc_id)
    )"""
    )
    cur.execute(
        """CREATE TABLE IF NOT EXISTS auth_tokens (
        token TEXT PRIMARY KEY,
        user_id TEXT,
        ts TEXT
    )"""
    )
    cur.execute(
        """CREATE TABLE IF NOT EXISTS refresh_tokens (
        user_id TEXT PRIMARY KEY,
        token TEXT,
        expires TEXT
    )"""
    )
    conn.commit()


# --- field transforms ------------------------------------------------------


def apply_transforms(doc: dict, fields: dict, *, dotted: bool = True, now: datetime.datetime | None = None) -> dict:
    """Return a copy of ``doc`` with ``fields`` applied.

    Values may be plain JSON data or one of the transforms defined in this
    module. With ``dotted`` set, ``a.b`` addresses key ``b`` of map ``a``.
    """
    result = copy.deepcopy(doc)
    stamp = to_timestamp(now or utcnow())
    for path, value in fields.items():
        parts = path.split(".") if dotted else [path]
        parent = result
        for part in parts[:-1]:
            child = parent.get(part)
            if not isinstance(child, dict):
                child = {}
                parent[part] = child
            parent = child
        key = parts[-1]
        if value is DELETE_FIELD:
            parent.pop(key, None)
        elif value is SERVER_TIMESTAMP:
            parent[key] = stamp
        elif isinstance(value, ArrayUnion):
            current = parent.get(key)
            current = list(current) if isinstance(current, list) else []
            for v in value.values:
                if v not in current:
                    current.append(v)
            parent[key] = current
        elif isinstance(value, ArrayRemove):
            current = parent.get(key)
            current = list(current) if isinstance(current, list) else []
            parent[key] = [v for v in current if v not in value.values]
        elif isinstance(value, Increment):
            current = parent.get(key)
            if isinstance(current, bool) or not isinstance(current, (int, float)):
                current = 0
            parent[key] = current + value.amount
        else:
            parent[key] = copy.deepcopy(value)
    return result


# --- documents -------------------------------------------------------------


def _read(conn, collection: str, doc_id: str, for_update: bool = False) -> dict | None:
    sql = "SELECT data FROM documents WHERE collection = ? AND doc_id = ?"
    if for_update and _is_pg():
        # sqlite already holds the write lock from BEGIN IMMEDIATE
        sql += " FOR UPDATE"
    row = conn.cursor().execute(sql, (collection, doc_id)).fetchone()
    if not row:
        return None
    return json.loads(row["data"])


def _write(conn, collection: str, doc_id: str, body: dict) -> None:
    cur = conn.cursor()
    data = json.dumps(body)
    stamp = to_timestamp(utcnow())
    if _is_pg():
        cur.execute(
            """
            INSERT INTO documents(collection, doc_id, data, updated) VALUES (?,?,?,?)
            ON CONFLICT (collection, doc_id) DO UPDATE SET data = EXCLUDED.data, updated = EXCLUDED.updated
            """,
            (collection, doc_id, data, stamp),
        )
    else:
        cur.execute(
            "INSERT OR REPLACE INTO documents(collection, doc_id, data, updated) VALUES (?,?,?,?)",
            (collection, doc_id, data, stamp),
        )


def _mark_written(conn, collection: str, doc_id: str) -> None:
    _evict(collection, doc_id)
    if conn is not None:
        with _cache_lock:
            _pending_keys.setdefault(id(conn), set()).add((collection, doc_id))


def _with_id(doc_id: str, body: dict) -> dict:
    doc = dict(body)
    doc["id"] = doc_id
    return doc


def get_document(collection: str, doc_id: str, conn=None) -> dict | None:
    """Return the document body with its ``id`` or ``None`` if missing.

    Reads made with a transaction connection bypass the cache so they see the
    transaction's own writes, and lock the document until the transaction
    ends.
    """
    if conn is None:
        cached = _load_cache(collection, doc_id)
        if cached is not None:
            return _with_id(doc_id, cached)
    generation = _generation
    with _use(conn) as c:
        body = _read(c, collection, doc_id, for_update=conn is not None)
    if body is None:
        return None
    if conn is None:
        _save_cache(collection, doc_id, body, generation)
    return _with_id(doc_id, body)


def get_documents(collection: str, ids: Sequence[str], conn=None) -> List[dict]:
    """Return documents for ``ids`` in the given order, skipping missing ones."""
    result = []
    for doc_id in ids:
        doc = get_document(collection, doc_id, conn=conn)
        if doc is not None:
            result.append(doc)
    return result


def set_document(collection: str, doc_id: str, data: dict, *, merge: bool = False, conn=None) -> None:
    """Create or overwrite a document. ``merge`` keeps fields not in ``data``."""
    fields = {k: v for k, v in data.items() if k != "id"}
    with _use(conn, write=True) as c:
        base = {}
        if merge:
            base = _read(c, collection, doc_id, for_update=True) or {}
        body = apply_transforms(base, fields, dotted=False)
        _write(c, collection, doc_id, body)
    _mark_written(conn, collection, doc_id)


def add_document(collection: str, data: dict, conn=None) -> str:
    """Store ``data`` under a new random id and return the id."""
    doc_id = uuid.uuid4().hex
    set_document(collection, doc_id, data, conn=conn)
    return doc_id


def update_document(collection: str, doc_id: str, fields: dict, conn=None) -> dict:
    """Apply ``fields`` to an existing document and return the new body.

    Raises :class:`DocumentNotFound` when the document does not exist.
    """
    with _use(conn, write=True) as c:
        current = _read(c, collection, doc_id, for_update=True)
        if current is None:
            raise DocumentNotFound(collection, doc_id)
        body = apply_transforms(current, fields)
        _write(c, collection, doc_id, body)
    _mark_written(conn, collection, doc_id)
    return _with_id(doc_id, body)


def delete_document(collection: str, doc_id: str, conn=None) -> None:
    """Delete a document. Deleting a missing document is not an error."""
    with _use(conn, write=True) as c:
        c.cursor().execute(
            "DELETE FROM documents WHERE collection = ? AND doc_id = ?",
            (collection, doc_id),
        )
    _mark_written(conn, collection, doc_id)


def _field_value(doc: dict, field: str):
    if field == DOCUMENT_ID:
        return True, doc["id"]
    value = doc
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            return False, None
        value = value[part]
    return True, value


def _matches(value, op: str, expected) -> bool:
    try:
        if op == "==":
            return value == expected
        if op == "!=":
            return value != expected
        if op == "<":
            return value < expected
        if op == "<=":
            return value <= expected
        if op == ">":
            return value > expected
        if op == ">=":
            return value >= expected
        if op == "in":
            return value in expected
        if op == "not-in":
            return value not in expected
        if op == "array-contains":
            return isinstance(value, list) and expected in value
        if op == "array-contains-any":
            return isinstance(value, list) and any(v in value for v in expected)
    except TypeError:
        return False
    raise ValueError(f"Unsupported operator: {op}")


def query(
    collection: str,
    filters: Sequence[Tuple[str, str, object]] = (),
    *,
    order_by: str | None = None,
    descending: bool = False,
    limit: int | None = None,
    offset: int = 0,
    conn=None,
) -> List[dict]:
    """Return documents of ``collection`` matching every filter.

    Documents lacking a filtered or ordered field never match, and results
    without ``order_by`` come back in document id order.
    """
    with _use(conn) as c:
        rows = c.cursor().execute(
            "SELECT doc_id, data FROM documents WHERE collection = ? ORDER BY doc_id",
            (collection,),
        ).fetchall()
    docs = [_with_id(row["doc_id"], json.loads(row["data"])) for row in rows]

    result = []
    for doc in docs:
        keep = True
        for field, op, expected in filters:
            present, value = _field_value(doc, field)
            if not present or not _matches(value, op, expected):
                keep = False
                break
        if keep:
            result.append(doc)

    if order_by:
        keyed = []
        for doc in result:
            present, value = _field_value(doc, order_by)
            if present and value is not None:
                keyed.append((value, doc))
        keyed.sort(key=lambda item: item[0], reverse=descending)
        result = [doc for _, doc in keyed]
    if offset:
        result = result[offset:]
    if limit is not None:
        result = result[:limit]
    return result


def lock_collection(collection: str, conn) -> None:
    """Serialize transactions that check a whole collection before writing.

    sqlite transactions already hold the database write lock, PostgreSQL
    takes a transaction scoped advisory lock named after ``collection``.
    """
    if _is_pg():
        conn.cursor().execute("SELECT pg_advisory_xact_lock(hashtext(?))", (collection,))


class WriteBatch:
    """Collect writes and commit them in a single transaction."""

    def __init__(self):
        self._ops: list[tuple] = []

    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> "WriteBatch":
        self._ops.append(("set", collection, doc_id, data, merge))
        return self

    def update(self, collection: str, doc_id: str, fields: dict) -> "WriteBatch":
        self._ops.append(("update", collection, doc_id, fields, None))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._ops.append(("delete", collection, doc_id, None, None))
        return self

    def __len__(self) -> int:
        return len(self._ops)

    def commit(self) -> None:
        with transaction() as conn:
            for kind, collection, doc_id, payload, merge in self._ops:
                if kind == "set":
                    set_document(collection, doc_id, payload, merge=merge, conn=conn)
                elif kind == "update":
                    update_document(collection, doc_id, payload, conn=conn)
                else:
                    delete_document(collection, doc_id, conn=conn)
        self._ops.clear()


# --- auth tokens -----------------------------------------------------------


def insert_token(token: str, user_id: str) -> None:
    """Persist or update an authentication token."""
    conn = _connect()
    cur = conn.cursor()
    if _is_pg():
        cur.execute(
            """
            INSERT INTO auth_tokens(token, user_id, ts) VALUES (?,?,?)
            ON CONFLICT (token) DO UPDATE SET user_id = EXCLUDED.user_id, ts = EXCLUDED.ts
            """,
            (token, user_id, datetime.datetime.utcnow().isoformat()),
        )
    else:
        cur.execute(
            "INSERT OR REPLACE INTO auth_tokens(token, user_id, ts) VALUES (?,?,?)",
            (token, user_id, datetime.datetime.utcnow().isoformat()),
        )
    conn.commit()
    conn.close()


def delete_token(token: str) -> None:
    """Remove an authentication token."""
    conn = _connect()
    conn.cursor().execute("DELETE FROM auth_tokens WHERE token = ?", (token,))
    conn.commit()
    conn.close()


def delete_user_tokens(user_id: str) -> None:
    """Remove every access token issued to ``user_id``."""
    conn = _connect()
    conn.cursor().execute("DELETE FROM auth_tokens WHERE user_id = ?", (user_id,))
    conn.commit()
    conn.close()


def get_token(token: str) -> tuple[str, datetime.datetime] | None:
    """Retrieve a ``(user_id, timestamp)`` tuple for the token."""
    conn = _connect()
    cur = conn.cursor()
    row = cur.execute(
        "SELECT user_id, ts FROM auth_tokens WHERE token = ?",
        (token,),
    ).fetchone()
    conn.close()
    if not row:
        return None
    return row["user_id"], datetime.datetime.fromisoformat(row["ts"])


def insert_refresh_token(user_id: str, token: str, expires: datetime.datetime) -> None:
    """Persist or update a refresh token."""
    conn = _connect()
    cur = conn.cursor()
    if _is_pg():
        cur.execute(
            """
            INSERT INTO refresh_tokens(user_id, token, expires) VALUES (?,?,?)
            ON CONFLICT (user_id) DO UPDATE SET token = EXCLUDED.token, expires = EXCLUDED.expires
            """,
            (user_id, token, expires.isoformat()),
        )
    else:
        cur.execute(
            "INSERT OR REPLACE INTO refresh_tokens(user_id, token, expires) VALUES (?,?,?)",
            (user_id, token, expires.isoformat()),
        )
    conn.commit()
    conn.close()


def get_refresh_token(token: str) -> tuple[str, datetime.datetime] | None:
    """Return ``(user_id, expires)`` for the refresh token."""
    conn = _connect()
    cur = conn.cursor()
    row = cur.execute(
        "SELECT user_id, expires FROM refresh_tokens WHERE token = ?",
        (token,),
    ).fetchone()
    conn.close()
    if not row:
        return None
    return row["user_id"], datetime.datetime.fromisoformat(row["expires"])


def delete_refresh_token(user_id: str) -> None:
    """Remove refresh token for a user."""
    conn = _connect()
    conn.cursor().execute("DELETE FROM refresh_tokens WHERE user_id = ?", (user_id,))
    conn.commit()
    conn.close()


# --- typed records ---------------------------------------------------------


def get_user(user_id: str, conn=None) -> AppUser | None:
    doc = get_document(USERS, user_id, conn=conn)
    return AppUser.from_document(doc) if doc else None


def get_users(user_ids: Sequence[str], conn=None) -> List[AppUser]:
    return [AppUser.from_document(d) for d in get_documents(USERS, user_ids, conn=conn)]


def list_users(exclude_admins: bool = False) -> List[AppUser]:
    filters = [("role", "!=", UserRole.ADMIN.value)] if exclude_admins else []
    docs = query(USERS, filters, order_by="displayName")
    return [AppUser.from_document(d) for d in docs]


def save_user(user: AppUser, conn=None) -> None:
    set_document(USERS, user.id, user.to_document(), conn=conn)


def get_credentials(user_id: str, conn=None) -> dict | None:
    return get_document(CREDENTIALS, user_id, conn=conn)


def find_credentials(email: str, conn=None) -> dict | None:
    """Return credentials for ``email`` compared case-insensitively."""
    docs = query(CREDENTIALS, [("emailLower", "==", email.strip().lower())], conn=conn)
    return docs[0] if docs else None


def save_credentials(user_id: str, email: str, password_hash: str, conn=None) -> None:
    set_document(
        CREDENTIALS,
        user_id,
        {
            "email": email,
            "emailLower": email.strip().lower(),
            "passwordHash": password_hash,
        },
        conn=conn,
    )


def get_club(club_id: str, conn=None) -> Club | None:
    doc = get_document(CLUBS, club_id, conn=conn)
    return Club.from_document(doc) if doc else None


def get_clubs(club_ids: Sequence[str], conn=None) -> List[Club]:
    return [Club.from_document(d) for d in get_documents(CLUBS, club_ids, conn=conn)]


def list_clubs(active_only: bool = False) -> List[Club]:
    """Return clubs sorted by name, ignoring case."""
    filters = [("isActive", "==", True)] if active_only else []
    clubs = [Club.from_document(d) for d in query(CLUBS, filters)]
    clubs.sort(key=lambda c: (c.name.lower(), c.name))
    return clubs


def save_club(club: Club, conn=None) -> None:
    set_document(CLUBS, club.id, club.to_document(), conn=conn)


def get_event(event_id: str, conn=None) -> Event | None:
    doc = get_document(EVENTS, event_id, conn=conn)
    return Event.from_document(doc) if doc else None


def get_events(event_ids: Sequence[str], conn=None) -> List[Event]:
    events = [Event.from_document(d) for d in get_documents(EVENTS, event_ids, conn=conn)]
    return [e for e in events if e is not None]


def list_events(club_id: str | None = None, conn=None) -> List[Event]:
    """Return readable events ordered by start date."""
    filters = [("clubId", "==", club_id)] if club_id else []
    docs = query(EVENTS, filters, order_by="startDate", conn=conn)
    events = [Event.from_document(d) for d in docs]
    # documents with unusable fields are skipped like the client does
    return [e for e in events if e is not None]


def save_event(event: Event, conn=None) -> None:
    set_document(EVENTS, event.id, event.to_document(), conn=conn)


def get_invitation(invitation_id: str, conn=None) -> ClubInvitation | None:
    doc = get_document(INVITATIONS, invitation_id, conn=conn)
    return ClubInvitation.from_document(doc) if doc else None


def list_invitations(
    club_id: str | None = None,
    receiver_id: str | None = None,
    status: InvitationStatus | None = None,
    conn=None,
) -> List[ClubInvitation]:
    filters = []
    if club_id:
        filters.append(("clubId", "==", club_id))
    if receiver_id:
        filters.append(("receiverId", "==", receiver_id))
    if status:
        filters.append(("status", "==", status.value))
    docs = query(INVITATIONS, filters, order_by="createdAt", conn=conn)
    return [ClubInvitation.from_document(d) for d in docs]


def save_invitation(invitation: ClubInvitation, conn=None) -> None:
    set_document(INVITATIONS, invitation.id, invitation.to_document(), conn=conn)


def get_application(application_id: str, conn=None) -> ClubApplication | None:
    doc = get_document(APPLICATIONS, application_id, conn=conn)
    return ClubApplication.from_document(doc) if doc else None


def list_applications(status: ApplicationStatus | None = None) -> List[ClubApplication]:
    filters = [("status", "==", status.value)] if status else []
    docs = query(APPLICATIONS, filters, order_by="createdAt")
    return [ClubApplication.from_document(d) for d in docs]


def save_application(application: ClubApplication, conn=None) -> None:
    set_document(APPLICATIONS, application.id, application.to_document(), conn=conn)


def count(collection: str, filters: Sequence[Tuple[str, str, object]] = (), conn=None) -> int:
    return len(query(collection, filters, conn=conn))
