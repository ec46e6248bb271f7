import importlib
import pytest
import vibecom.storage as storage


@pytest.fixture(autouse=True)
def use_sqlite(tmp_path, monkeypatch):
    db = tmp_path / "vibecom.db"
    monkeypatch.setattr(storage, "DATABASE_URL", f"sqlite:///{db}")
    monkeypatch.setattr(storage, "_redis", None)
    monkeypatch.setenv("MEDIA_ROOT", str(tmp_path / "media"))
    storage.invalidate_cache()
    yield
    storage.invalidate_cache()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    api = importlib.reload(importlib.import_module("vibecom.api"))
    return TestClient(api.app)


@pytest.fixture
def register(client):
    """Register and log in users. The helper returns ``(user_id, token)``."""

    def _register(email, name, password="pw"):
        resp = client.post("/users", json={"email": email, "password": password, "display_name": name})
        assert resp.status_code == 200, resp.text
        data = client.post("/login", json={"email": email, "password": password}).json()
        assert data["success"]
        return data["user_id"], data["token"]

    return _register


@pytest.fixture(autouse=True)
def inject_auth_header(monkeypatch):
    from fastapi.testclient import TestClient

    orig_request = TestClient.request

    def wrapped(self, method, url, *args, **kwargs):
        headers = dict(kwargs.get("headers") or {})

        if isinstance(kwargs.get("json"), dict):
            token = kwargs["json"].pop("token", None)
            if token:
                headers["Authorization"] = f"Bearer {token}"

        if isinstance(kwargs.get("params"), dict):
            token = kwargs["params"].pop("token", None)
            if token:
                headers["Authorization"] = f"Bearer {token}"

        if isinstance(url, str) and "token=" in url:
            from urllib.parse import urlsplit, parse_qsl, urlencode, urlunsplit

            parts = urlsplit(url)
            query = dict(parse_qsl(parts.query))
            token = query.pop("token", None)
            if token:
                headers["Authorization"] = f"Bearer {token}"
                url = urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))

        kwargs["headers"] = headers
        return orig_request(self, method, url, *args, **kwargs)

    monkeypatch.setattr(TestClient, "request", wrapped)
    yield
    monkeypatch.setattr(TestClient, "request", orig_request)
