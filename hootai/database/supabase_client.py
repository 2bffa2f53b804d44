from supabase import create_client, Client
from supabase.client import ClientOptions
from hootai.config import settings


def _anon_options() -> ClientOptions:
    # Implicit flow so magic links and OAuth return tokens in the URL fragment.
    # A fresh options object per client: supabase-py writes the session token into its headers.
    return ClientOptions(flow_type="implicit", auto_refresh_token=False, persist_session=False)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Shared anon-key client. Never used for calls that sign a user in."""
        if cls._client is None:
            cls._client = create_client(
                settings.supabase_url,
                settings.supabase_key,
                options=_anon_options(),
            )
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Used for profile writes."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def create_session_client(cls) -> Client:
        """
        Throwaway anon-key client for one sign-in.

        A successful code exchange, OTP verification or password sign-in makes
        supabase-py switch the client's Authorization header to the user's
        token, so these calls must not run on the shared client.
        """
        return create_client(settings.supabase_url, settings.supabase_key, options=_anon_options())

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_supabase_admin() -> Client:
    return SupabaseClient.get_service_client()


def get_auth_session_client() -> Client:
    return SupabaseClient.create_session_client()
