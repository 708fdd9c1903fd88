from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # GoHighLevel (LeadConnector) settings
    GHL_API_KEY: str | None = None
    GHL_LOCATION_ID: str | None = None
    GHL_API_BASE_URL: str = "https://services.leadconnectorhq.com"
    GHL_API_VERSION: str = "2021-07-28"
    GHL_REQUEST_TIMEOUT: float = 30.0

    # Upstream fetch sizes
    GHL_DEFAULT_LIMIT: int = 20
    GHL_STATS_OPPORTUNITY_LIMIT: int = 100
    GHL_APPOINTMENT_WINDOW_DAYS: int = 30
    DASHBOARD_CONTACT_LIMIT: int = 100

    # Rows rendered per dashboard table
    DISPLAY_ROW_LIMIT: int = 50
    # Calendar day used for "today" and date-range bounds unless a request overrides it
    DASHBOARD_TIMEZONE: str = "UTC"

    # Browser clients; "*" allows any origin without credentials
    CORS_ALLOWED_ORIGINS: list[str] = ["*"]

    # Supabase auth for the function endpoint
    SUPABASE_URL: str | None = None
    SUPABASE_JWKS_URL: str | None = None
    REQUIRE_AUTH: bool = False

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def jwks_url(self) -> str | None:
        if self.SUPABASE_JWKS_URL:
            return self.SUPABASE_JWKS_URL
        if not self.SUPABASE_URL:
            return None
        base = self.SUPABASE_URL.rstrip("/")
        return f"{base}/auth/v1/.well-known/jwks.json"

    def ghl_configured(self) -> bool:
        """Both the API key and the location id are required for every upstream call."""
        return bool(self.GHL_API_KEY and self.GHL_LOCATION_ID)


settings = Settings()
