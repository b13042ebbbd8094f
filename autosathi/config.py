"""Backend settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    environment: str = "development"
    debug: bool = False

    # HTTP server (dev_server)
    host: str = "0.0.0.0"
    port: int = 5000
    port_search_range: int = 6

    # postgres:// and postgresql:// are rewritten to postgresql+asyncpg://
    database_url: str = ""
    database_ssl: bool = False

    # Auth
    jwt_secret: str = "autosathi-development-secret-change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = 12

    frontend_url: str = "http://localhost:3000"

    # Reminder job
    notification_days_before: int = 30
    reminder_dedup_days: int = 7
    reminder_scheduler_enabled: bool = True
    reminder_run_hour: int = 8  # local time
    reminder_run_minute: int = 0

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
