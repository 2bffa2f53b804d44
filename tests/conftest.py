"""Shared fixtures: in-memory Supabase fake, scripted LLM and a TestClient wired to both."""
import os

# Set environment for tests BEFORE any hootai imports (settings are read at import time)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SITE_URL", "https://app.example.com")
os.environ.setdefault("AZURE_GROK_RESOURCE", "test-resource")
os.environ.setdefault("AZURE_GROK_DEPLOYMENT", "test-deployment")
os.environ.setdefault("AZURE_OPENAI_API_KEY", "test-api-key")
os.environ.setdefault("AZURE_OPENAI_API_VERSION", "2024-05-01-preview")

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile as StarletteUploadFile

from hootai.core.dependencies import get_session_client_factory
from hootai.database.supabase_client import get_supabase, get_supabase_admin
from hootai.main import app
from hootai.modules.analysis.llm_client import get_llm_client
from hootai.modules.analysis.routes import get_analysis_service
from hootai.modules.analysis.service import AnalysisService
from hootai.modules.auth.service import clear_user_cache

USER_ID = "7f1c2a9e-3b4d-4c5e-8f6a-1b2c3d4e5f60"
USER_EMAIL = "user@example.com"
ACCESS_TOKEN = "test-access-token"


# =============================================================================
# Supabase fake
# =============================================================================


class FakeResult:
    def __init__(self, data=None, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """Just enough of the postgrest builder for the services under test."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters = []
        self.single = False

    def select(self, *columns, count=None):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.op = "update"
        self.payload = payload
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def maybe_single(self):
        self.single = True
        return self

    def execute(self):
        self.db.calls.append((self.table, self.op))
        error = self.db.failures.get((self.table, self.op))
        if error is not None:
            raise error
        rows = self.db.tables.setdefault(self.table, [])
        if self.op == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            rows.extend(dict(r) for r in new_rows)
            return FakeResult(data=[dict(r) for r in new_rows])
        matched = [r for r in rows if all(r.get(c) == v for c, v in self.filters)]
        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResult(data=[dict(r) for r in matched])
        if self.single:
            # postgrest-py returns None for maybe_single() with no rows
            return FakeResult(data=dict(matched[0])) if matched else None
        return FakeResult(data=[dict(r) for r in matched], count=len(matched))


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise Exception(f"Could not find the function public.{self.name}")
        return FakeResult(data=handler(self.params))


class FakeBucket:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def upload(self, path, file, file_options=None):
        self.db.uploads.append((self.name, path, file, file_options))
        return SimpleNamespace(path=path)

    def get_public_url(self, path):
        return f"https://test-project.supabase.co/storage/v1/object/public/{self.name}/{path}"


class FakeStorage:
    def __init__(self, db):
        self.db = db

    def from_(self, name):
        return FakeBucket(self.db, name)


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failures = {}
        self.rpc_handlers = {}
        self.calls = []
        self.rpc_calls = []
        self.uploads = []
        self.auth = MagicMock()
        self.storage = FakeStorage(self)

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params=None):
        return FakeRpc(self, name, params or {})


def make_user(user_id=USER_ID, email=USER_EMAIL):
    return SimpleNamespace(
        id=user_id,
        email=email,
        user_metadata={},
        app_metadata={"provider": "email"},
        created_at="2024-01-01T00:00:00+00:00",
        last_sign_in_at=None,
    )


def make_auth_response(user_id=USER_ID, email=USER_EMAIL, access_token=ACCESS_TOKEN):
    user = make_user(user_id, email)
    session = SimpleNamespace(
        access_token=access_token,
        refresh_token="test-refresh-token",
        expires_in=3600,
        user=user,
    )
    return SimpleNamespace(user=user, session=session)


# =============================================================================
# LLM fake
# =============================================================================


class FakeLLM:
    def __init__(self, response=None, error=None):
        self.response = response if response is not None else json.dumps(SAMPLE_REPORT)
        self.error = error
        self.calls = []

    async def complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.response


SAMPLE_REPORT = {
    "summary": "Checkout flow loses users at the shipping step.",
    "problems": [
        {
            "title": "Hidden shipping costs",
            "description": "Costs appear only on the last step.",
            "error": ["surprise fees"],
        }
    ],
    "issues": [
        {
            "id": 1,
            "title": "Show shipping early",
            "observation": "Drop-off at shipping step",
            "impact": "High",
            "suggestion": "Show estimate on product page",
            "estimation": "+12%",
            "aptestplan": "A: current, B: early estimate; measure completion",
            "priorityList": "Critical",
        }
    ],
}


async def public_resolver(hostname):
    """Every hostname resolves to a public documentation address."""
    return ["93.184.216.34"]


def html_page_transport(body="<html><head><title>Example</title></head><body><h1>Welcome</h1></body></html>"):
    def handler(request):
        return httpx.Response(200, text=body, headers={"content-type": "text/html; charset=utf-8"})
    return httpx.MockTransport(handler)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def page_transport():
    return html_page_transport()


@pytest.fixture
def client(fake_supabase, fake_llm, page_transport):
    """Test client with Supabase, the LLM and outbound page fetches replaced."""
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_supabase_admin] = lambda: fake_supabase
    app.dependency_overrides[get_session_client_factory] = lambda: (lambda: fake_supabase)
    app.dependency_overrides[get_llm_client] = lambda: fake_llm
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(fake_llm, transport=page_transport, resolver=public_resolver)
    clear_user_cache()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_user_cache()


@pytest.fixture
def signed_in(fake_supabase):
    """Make ACCESS_TOKEN resolve to the test user."""
    fake_supabase.auth.get_user.return_value = SimpleNamespace(user=make_user())
    return {"Authorization": f"Bearer {ACCESS_TOKEN}"}


@pytest.fixture
def upload_read_sizes(monkeypatch):
    """Record the size argument of every UploadFile.read() made by the routes."""
    sizes = []
    original = StarletteUploadFile.read

    async def read(self, size=-1):
        sizes.append(size)
        return await original(self, size)

    monkeypatch.setattr(StarletteUploadFile, "read", read)
    return sizes
