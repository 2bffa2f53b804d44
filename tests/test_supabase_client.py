"""
The process-wide anon client must keep the anon key after a user signs in.
"""
from types import SimpleNamespace

import pytest

from hootai.database.supabase_client import (
    SupabaseClient,
    get_auth_session_client,
    get_supabase,
    get_supabase_admin,
)


def authorization(client):
    return client.postgrest.session.headers["Authorization"]


@pytest.fixture
def real_clients(monkeypatch):
    from hootai.config import settings

    monkeypatch.setattr(settings, "supabase_service_role_key", None)
    SupabaseClient.reset_client()
    yield
    SupabaseClient.reset_client()


class TestSessionClient:
    def test_session_clients_are_not_shared(self, real_clients):
        shared = get_supabase()
        first = get_auth_session_client()
        second = get_auth_session_client()

        assert first is not shared
        assert second is not first
        assert first.options is not shared.options

    def test_signed_in_event_leaves_shared_client_on_anon_key(self, real_clients):
        shared = get_supabase()
        assert authorization(shared) == "Bearer test-anon-key"

        session_client = get_auth_session_client()
        # What supabase-py does after verify_otp / exchange_code_for_session succeeds
        session_client._listen_to_auth_events("SIGNED_IN", SimpleNamespace(access_token="USER-A-TOKEN"))

        assert authorization(session_client) == "Bearer USER-A-TOKEN"
        assert get_supabase() is shared
        assert authorization(shared) == "Bearer test-anon-key"
        assert authorization(get_supabase_admin()) == "Bearer test-anon-key"
