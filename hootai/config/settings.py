from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

DEFAULT_SITE_URL = "http://localhost:3000"


class Settings(BaseSettings):
    # Supabase (the NEXT_PUBLIC_* names are shared with the web client)
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_url", "next_public_supabase_url"),
    )
    supabase_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "supabase_key", "supabase_anon_key", "next_public_supabase_anon_key"
        ),
    )
    supabase_service_role_key: Optional[str] = None  # Needed to bypass RLS for profile writes

    # Site
    site_url: str = Field(
        default="",
        validation_alias=AliasChoices("site_url", "next_public_site_url"),
    )

    # Azure-hosted chat completions
    azure_grok_resource: Optional[str] = None
    azure_grok_deployment: Optional[str] = None
    azure_openai_api_key: Optional[str] = None
    azure_openai_api_version: Optional[str] = None
    llm_max_tokens: int = 1000
    llm_temperature: float = 0.7
    llm_timeout_seconds: float = 60.0

    # Analysis input
    page_fetch_timeout_seconds: float = 10.0
    page_excerpt_chars: int = 4000
    page_fetch_max_bytes: int = 512 * 1024
    page_fetch_max_redirects: int = 5
    max_upload_bytes: int = 5 * 1024 * 1024
    max_content_chars: int = 60000

    # App
    app_name: str = "hootai-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    analyze_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True
    auth_cookie_max_age: int = 60 * 60

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def azure_chat_completions_url(self) -> Optional[str]:
        """Deployment endpoint, or None while any Azure setting is unset."""
        if not all([
            self.azure_grok_resource,
            self.azure_grok_deployment,
            self.azure_openai_api_key,
            self.azure_openai_api_version,
        ]):
            return None
        return (
            f"https://{self.azure_grok_resource}.openai.azure.com/openai/deployments/"
            f"{self.azure_grok_deployment}/chat/completions"
            f"?api-version={self.azure_openai_api_version}"
        )

    @property
    def public_site_url(self) -> str:
        return (self.site_url or DEFAULT_SITE_URL).rstrip("/")

    @property
    def auth_callback_url(self) -> str:
        return f"{self.public_site_url}/auth/callback"

    @property
    def auth_capture_url(self) -> str:
        return f"{self.public_site_url}/auth/capture"

    def missing_required_env(self) -> List[str]:
        """Names of required variables that are not configured."""
        required = {
            "NEXT_PUBLIC_SUPABASE_URL": self.supabase_url,
            "NEXT_PUBLIC_SUPABASE_ANON_KEY": self.supabase_key,
            "NEXT_PUBLIC_SITE_URL": self.site_url,
        }
        return [name for name, value in required.items() if not value]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
