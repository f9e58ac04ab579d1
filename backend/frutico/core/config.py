from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator
from typing import Annotated, Any, ClassVar
import json
from pathlib import Path
import os


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=True,
    )

    # Database URL
    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'frutico.db'}"

    # Razorpay webhook secret (Dashboard -> Webhooks). Left empty on purpose:
    # the webhook answers 500 until it is provisioned.
    RAZORPAY_WEBHOOK_SECRET: str = ""

    # Public base URL used for ticket links encoded in the QR code
    BASE_URL: str = "http://localhost:8000"

    # CORS origins (ticket lookup page may be served from another domain).
    # NoDecode hands the raw env string to split_origins.
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:3000"]

    # SMTP email settings
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "Frutico <no-reply@localhost>"

    # Ticket presentation
    TICKET_TIMEZONE: str = "Asia/Kolkata"
    TICKET_EMAIL_SUBJECT: str = "Your Frutico Ice Cream Ticket \U0001F3AB"

    # Seconds to wait for in-flight ticket emails on shutdown
    FULFILLMENT_DRAIN_TIMEOUT: float = 10.0

    # Shared secret sent by counter scanners in X-Staff-Token. Empty disables
    # redemption.
    STAFF_REDEEM_TOKEN: str = ""

    LOG_LEVEL: str = "INFO"
    ENABLE_CONSOLE_TRACING: bool = False

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("RAZORPAY_WEBHOOK_SECRET", "STAFF_REDEEM_TOKEN", "BASE_URL", mode="before")
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("BASE_URL")
    def drop_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def load_settings() -> "Settings":
    return Settings(_env_file=os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env")))


settings = load_settings()
