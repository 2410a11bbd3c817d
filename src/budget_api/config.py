from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent.parent / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    frontend_url: str = "http://localhost:5173"

    # Database
    database_url: str
    db_echo: bool = False

    # JWT
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_access_expire_minutes: int = 60 * 24 * 7
    jwt_remember_me_expire_days: int = 30
    jwt_refresh_expire_days: int = 30

    # Email (SMTP)
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_from: str = "noreply@budgettracker.com"
    smtp_from_name: str = "Budget Tracker"
    smtp_reply_to: str | None = None

    # Invites
    invite_expire_days: int = 7

    # Plaid
    plaid_client_id: str | None = None
    plaid_secret: str | None = None
    plaid_env: str = "sandbox"

    # Teller
    teller_api_base: str = "https://api.teller.io"
    teller_app_id: str | None = None
    teller_cert_path: str | None = None
    teller_key_path: str | None = None
    teller_environment: str = "production"

    # Bank sync
    aggregator_timeout_seconds: float = 20.0

    # Money / amounts
    currency: str = "USD"


settings = Settings()
