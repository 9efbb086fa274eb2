from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "invitations"
    db_username: str = "invitations"
    db_password: str = "secret"

    job_poll_interval_seconds: int = 5

    token_issuer: str = "http"
    issuer_base_url: str = ""
    issuer_api_key: str = ""
    issuer_timeout_seconds: int = 30

    render_concurrency: int = Field(default=3, ge=1)
    qr_min_size_px: int = Field(default=1000, ge=1)

    export_output_dir: str = "/app/exports"
    apartment_cache_ttl_seconds: int = Field(default=300, ge=0)
