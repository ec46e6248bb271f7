import datetime
import fakeredis
import pytest
import vibecom.storage as storage
from vibecom.storage import ArrayUnion, ArrayRemove, Increment, SERVER_TIMESTAMP, DELETE_FIELD


def test_apply_transforms_array_union_is_idempotent():
    doc = {"members": ["a"]}
    once = storage.apply_transforms(doc, {"members": ArrayUnion(["b", "a"])})
    twice = storage.apply_transforms(once, {"members": ArrayUnion(["b"])})
    assert once["members"] == ["a", "b"]
    assert twice == once
    # the input document is left untouched
    assert doc == {"members": ["a"]}


def test_apply_transforms_array_remove_and_missing_field():
    doc = {"members": ["a", "b", "a"]}
    result = storage.apply_transforms(doc, {"members": ArrayRemove(["a"]), "events": ArrayRemove(["x"])})
    assert result["members"] == ["b"]
    assert result["events"] == []


def test_apply_transforms_dotted_paths_and_sentinels():
    now = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)
    doc = {"socialMedia": {"instagram": "@club"}, "count": 2, "old": 1}
    result = storage.apply_transforms(
        doc,
        {
            "socialMedia.twitter": "@clubtw",
            "count": Increment(3),
            "old": DELETE_FIELD,
            "updatedAt": SERVER_TIMESTAMP,
        },
        now=now,
    )
    assert result["socialMedia"] == {"instagram": "@club", "twitter": "@clubtw"}
    assert result["count"] == 5
    assert "old" not in result
    assert result["updatedAt"] == "2024-05-01T12:00:00+00:00"


def test_document_crud():
    storage.set_document("things", "t1", {"name": "one", "tags": []})
    assert storage.get_document("things", "t1") == {"id": "t1", "name": "one", "tags": []}

    body = storage.update_document("things", "t1", {"tags": ArrayUnion(["x"])})
    assert body["tags"] == ["x"]
    assert storage.get_document("things", "t1")["tags"] == ["x"]

    storage.set_document("things", "t1", {"extra": True}, merge=True)
    assert storage.get_document("things", "t1")["name"] == "one"

    storage.delete_document("things", "t1")
    assert storage.get_document("things", "t1") is None
    # deleting twice is fine
    storage.delete_document("things", "t1")

    with pytest.raises(storage.DocumentNotFound):
        storage.update_document("things", "missing", {"a": 1})


def test_query_filters_and_ordering():
    storage.set_document("clubs", "c1", {"name": "Chess", "members": ["a", "b"], "isActive": True})
    storage.set_document("clubs", "c2", {"name": "Art", "members": ["b"], "isActive": False})
    storage.set_document("clubs", "c3", {"name": "Band", "members": []})

    names = [d["name"] for d in storage.query("clubs", order_by="name")]
    assert names == ["Art", "Band", "Chess"]

    docs = storage.query("clubs", [("members", "array-contains", "b")], order_by="name", descending=True)
    assert [d["id"] for d in docs] == ["c1", "c2"]

    # documents without the field never match
    docs = storage.query("clubs", [("isActive", "!=", True)])
    assert [d["id"] for d in docs] == ["c2"]

    docs = storage.query("clubs", [(storage.DOCUMENT_ID, "in", ["c1", "c3"])])
    assert [d["id"] for d in docs] == ["c1", "c3"]

    docs = storage.query("clubs", order_by="name", offset=1, limit=1)
    assert [d["name"] for d in docs] == ["Band"]


def test_transaction_rolls_back():
    storage.set_document("clubs", "c1", {"members": []})
    storage.get_document("clubs", "c1")
    with pytest.raises(RuntimeError):
        with storage.transaction() as conn:
            storage.update_document("clubs", "c1", {"members": ArrayUnion(["u1"])}, conn=conn)
            raise RuntimeError("boom")
    assert storage.get_document("clubs", "c1")["members"] == []


def test_transaction_reads_own_writes():
    storage.set_document("clubs", "c1", {"members": []})
    with storage.transaction() as conn:
        storage.update_document("clubs", "c1", {"members": ArrayUnion(["u1"])}, conn=conn)
        assert storage.get_document("clubs", "c1", conn=conn)["members"] == ["u1"]
    assert storage.get_document("clubs", "c1")["members"] == ["u1"]


def test_write_batch_commits_all_writes():
    storage.set_document("clubs", "c1", {"events": []})
    batch = storage.WriteBatch()
    batch.set("events", "e1", {"title": "Meetup"})
    batch.update("clubs", "c1", {"events": ArrayUnion(["e1"])})
    assert len(batch) == 2
    batch.commit()
    assert len(batch) == 0
    assert storage.get_document("events", "e1")["title"] == "Meetup"
    assert storage.get_document("clubs", "c1")["events"] == ["e1"]


def test_write_batch_failure_writes_nothing():
    batch = storage.WriteBatch()
    batch.set("events", "e1", {"title": "Meetup"})
    batch.update("clubs", "missing", {"events": ArrayUnion(["e1"])})
    with pytest.raises(storage.DocumentNotFound):
        batch.commit()
    assert storage.get_document("events", "e1") is None


def test_redis_cache_is_used_and_evicted(monkeypatch):
    fake = fakeredis.FakeRedis()
    monkeypatch.setattr(storage, "_redis", fake)

    storage.set_document("users", "u1", {"displayName": "Ann"})
    assert storage.get_document("users", "u1")["displayName"] == "Ann"
    assert fake.get(storage._cache_key("users", "u1")) is not None

    storage.update_document("users", "u1", {"displayName": "Anna"})
    assert fake.get(storage._cache_key("users", "u1")) is None
    # a fresh process only has the redis copy
    storage.invalidate_cache()
    assert storage.get_document("users", "u1")["displayName"] == "Anna"


def test_tokens_roundtrip():
    storage.insert_token("tok", "u1")
    uid, ts = storage.get_token("tok")
    assert uid == "u1"
    assert isinstance(ts, datetime.datetime)
    storage.delete_user_tokens("u1")
    assert storage.get_token("tok") is None

    expires = datetime.datetime(2030, 1, 1)
    storage.insert_refresh_token("u1", "r1", expires)
    storage.insert_refresh_token("u1", "r2", expires)
    assert storage.get_refresh_token("r1") is None
    assert storage.get_refresh_token("r2") == ("u1", expires)
    storage.delete_refresh_token("u1")
    assert storage.get_refresh_token("r2") is None


def test_unreadable_events_are_skipped():
    storage.set_document(
        "events",
        "good",
        {
            "title": "Talk",
            "startDate": "2030-01-01T10:00:00+00:00",
            "endDate": "2030-01-01T12:00:00+00:00",
            "category": "technology",
            "clubId": "c1",
        },
    )
    storage.set_document("events", "bad_date", {"title": "x", "startDate": "soon", "endDate": "", "category": "art"})
    storage.set_document(
        "events",
        "bad_category",
        {
            "title": "y",
            "startDate": "2030-01-01T10:00:00+00:00",
            "endDate": "2030-01-01T12:00:00+00:00",
            "category": "all",
        },
    )
    assert [e.id for e in storage.list_events()] == ["good"]
    assert storage.get_event("bad_date") is None
