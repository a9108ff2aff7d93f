# tests/conftest.py
import json

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.adapters.clients.user_profile import UserProfileClient
from app.domain.dispatch import ChangeDispatcher
from app.integrations.hooks import CalloutHook
from app.models import Base

BASE_URL = "https://users.test/users"


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


class RecordingQueue:
    """JobQueue that just remembers what it was given."""

    def __init__(self):
        self.batches = []

    def submit(self, batch):
        self.batches.append(batch)
        return len(self.batches)


@pytest.fixture
def job_queue():
    return RecordingQueue()


@pytest.fixture
def callout_hook(job_queue):
    hook = CalloutHook(job_queue, ChangeDispatcher(id_generator=lambda: "42")).install()
    try:
        yield hook
    finally:
        hook.uninstall()


class FakeUserApi:
    """
    In-process stand-in for the remote /users API, served through httpx.MockTransport.
    GET /users/<id> -> users[id] or 404, POST /users/add -> add_status.
    """

    def __init__(self):
        self.users = {}
        self.add_status = 201
        self.unreachable = set()
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.path.rstrip("/").rsplit("/", 1)[-1]

        if key in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)

        if request.method == "POST" and key == "add":
            body = json.loads(request.content)
            return httpx.Response(self.add_status, json={**body, "id": 209})

        if request.method == "GET" and key in self.users:
            doc = self.users[key]
            if isinstance(doc, (str, bytes)):
                return httpx.Response(200, content=doc)
            return httpx.Response(200, json=doc)

        return httpx.Response(404, json={"message": f"User with id '{key}' not found"})


@pytest.fixture
def user_api():
    return FakeUserApi()


@pytest.fixture
def user_client(user_api):
    return UserProfileClient(base_url=BASE_URL, timeout_s=5, transport=httpx.MockTransport(user_api.handler))
