# tests/conftest.py
import os
import sys
import asyncio
import json
from urllib.parse import urlencode

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6399")
os.environ.setdefault("MAIL_SUPPRESS_SEND", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.append(os.path.abspath("."))

from contact_manager.database import Base, get_db
from contact_manager.core import get_settings
from contact_manager import models
from main import app, startup_event, shutdown_event


# DB (SQLite in-memory for tests)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Fresh tables for every test so counts never leak between tests
@pytest.fixture(autouse=True)
def prepare_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


# One event loop for the WHOLE pytest session
@pytest.fixture(scope="session")
def session_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


# Run the startup hook once per session (same loop) so that
# FastAPILimiter.init() happens before any rate-limited route is hit.
@pytest.fixture(scope="session", autouse=True)
def app_lifespan(session_loop):
    session_loop.run_until_complete(startup_event())
    yield
    session_loop.run_until_complete(shutdown_event())


@pytest.fixture(scope="session", autouse=True)
def adjust_settings_env():
    settings = get_settings()
    settings.CLOUDINARY_URL = None
    settings.MAIL_SUPPRESS_SEND = True
    return settings


# Simple ASGI response/client
class SimpleResponse:
    def __init__(
        self, status_code: int, body: bytes, headers: list[tuple[bytes, bytes]]
    ):
        self.status_code = status_code
        self._body = body
        self.headers = {k.decode(): v.decode() for k, v in headers}

    @property
    def text(self) -> str:
        return self._body.decode()

    def json(self):
        return json.loads(self._body.decode())


class SimpleClient:
    """
    Important:
    - uses ONE shared session loop (passed from fixture)
    - does NOT call asyncio.run()
    - does NOT close the loop
    """

    def __init__(self, app, loop):
        self.app = app
        self.loop = loop

    def close(self):
        # do not close the loop here (session fixture closes it)
        pass

    def request(
        self,
        method: str,
        path: str,
        json_body=None,
        data=None,
        headers=None,
        files=None,
        params=None,
    ):
        headers = dict(headers or {})
        body_bytes = b""

        if files:
            boundary = "TESTBOUNDARY"
            parts: list[bytes] = []
            for name, (filename, content, content_type) in files.items():
                disposition = f'form-data; name="{name}"; filename="{filename}"'
                part_headers = (
                    f"--{boundary}\r\n"
                    f"Content-Disposition: {disposition}\r\n"
                    f"Content-Type: {content_type or 'application/octet-stream'}\r\n\r\n"
                )
                parts.append(part_headers.encode() + content + b"\r\n")
            parts.append(f"--{boundary}--\r\n".encode())
            body_bytes = b"".join(parts)
            headers["content-type"] = f"multipart/form-data; boundary={boundary}"

        elif json_body is not None:
            body_bytes = json.dumps(json_body).encode()
            headers.setdefault("content-type", "application/json")

        elif data is not None:
            body_bytes = urlencode(data, doseq=True).encode()
            headers.setdefault("content-type", "application/x-www-form-urlencoded")

        path, _, query_string = path.partition("?")
        if params:
            extra = urlencode(params, doseq=True)
            query_string = f"{query_string}&{extra}" if query_string else extra

        raw_headers = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "scheme": "http",
            "server": ("testserver", 80),
            "method": method.upper(),
            "path": path,
            "raw_path": path.encode(),
            "root_path": "",
            "headers": raw_headers,
            "query_string": query_string.encode(),
            "client": ("testclient", 5000),
        }

        async def receive():
            nonlocal body_bytes
            chunk, body_bytes = body_bytes, b""
            return {"type": "http.request", "body": chunk, "more_body": False}

        response_body = bytearray()
        response_status = 500
        response_headers: list[tuple[bytes, bytes]] = []

        async def send(message):
            nonlocal response_status, response_headers
            if message["type"] == "http.response.start":
                response_status = message["status"]
                response_headers = message.get("headers", [])
            elif message["type"] == "http.response.body":
                response_body.extend(message.get("body", b""))

        # ensure the loop is the current one
        asyncio.set_event_loop(self.loop)
        self.loop.run_until_complete(self.app(scope, receive, send))
        return SimpleResponse(response_status, bytes(response_body), response_headers)

    def get(self, path: str, headers=None, params=None):
        return self.request("GET", path, headers=headers, params=params)

    def post(self, path: str, json=None, data=None, headers=None, files=None, params=None):
        return self.request(
            "POST", path, json_body=json, data=data, headers=headers, files=files,
            params=params,
        )

    def put(self, path: str, json=None, data=None, headers=None, files=None, params=None):
        return self.request(
            "PUT", path, json_body=json, data=data, headers=headers, files=files,
            params=params,
        )

    def patch(self, path: str, json=None, headers=None, params=None):
        return self.request("PATCH", path, json_body=json, headers=headers, params=params)

    def delete(self, path: str, headers=None, params=None):
        return self.request("DELETE", path, headers=headers, params=params)


# Client fixture: override DB dependency per test
@pytest.fixture()
def client(db_session, session_loop):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    c = SimpleClient(app, loop=session_loop)
    try:
        yield c
    finally:
        app.dependency_overrides.clear()
        c.close()


@pytest.fixture()
def make_account(db_session):
    """Create an account without password hashing, for store-level tests."""
    from contact_manager import crud

    def _make(name="Owner", email=None, role=models.ROLE_USER):
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        return crud.create_user(
            db_session, name=name, email=email, hashed_password="x", role=role
        )

    return _make
