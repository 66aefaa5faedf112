"""Application configuration via environment variables."""
from pydantic import SecretStr
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./fastbreak.db"

    # "sql" talks to DATABASE_URL directly, "hosted" goes through the REST API
    STORE_BACKEND: str = "sql"

    # Hosted auth + database project
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")

    READS_REQUIRE_AUTH: bool = False

    CORS_ORIGINS: str = "http://localhost:3000"
    SITE_URL: str = "http://localhost:8000"
    OAUTH_PROVIDERS: str = "google"

    AUTH_COOKIE_PREFIX: str = "sb"
    AUTH_COOKIE_SECURE: bool = False
    AUTH_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 400

    LANDING_PATH: str = "/"
    DASHBOARD_PATH: str = "/dashboard"
    LOGIN_PATH: str = "/login"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def oauth_providers(self) -> list[str]:
        return [p.strip() for p in self.OAUTH_PROVIDERS.split(",") if p.strip()]


settings = Settings()
