"""
Configuration module for the room booking bot.
Loads environment variables and provides typed configuration.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram Bot
    bot_token: str = ""

    # Booking API (pricing, booking creation, payment status)
    booking_api_base_url: str = ""
    http_timeout_seconds: float = 15.0

    # Public website, used for the booking success link
    site_url: str = ""

    # Property and room type catalog (JSON)
    room_catalog_path: str = "rooms.json"

    # Payment status polling
    payment_poll_interval_seconds: float = 3.0
    payment_poll_max_attempts: Optional[int] = 200  # ~10 minutes at 3s
    payment_status_max_retries: int = 2
    payment_status_retry_delay: float = 1.0  # seconds
    payment_status_retry_backoff: float = 2.0  # exponential backoff multiplier

    # Booking sessions idle this long are closed (None keeps them)
    session_idle_timeout_seconds: Optional[float] = 3600.0

    # Bot Settings
    timezone: str = "Asia/Manila"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "development"  # development, staging, production

    # Webhook Configuration
    bot_webhook_url: Optional[str] = (
        None  # Full webhook URL for bot (e.g., https://yourdomain.com/webhook/telegram)
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def validate_all_required(self) -> None:
        """
        Validate that all required settings are present.

        Raises:
            ValueError: If required fields are missing or invalid
        """
        required_fields = [
            "bot_token",
            "booking_api_base_url",
            "site_url",
            "room_catalog_path",
        ]

        missing = []
        for field in required_fields:
            value = getattr(self, field, None)

            if not value:
                missing.append(field)
                continue

            # Check for placeholder values
            if str(value).lower().startswith("your_"):
                missing.append(field)
                continue

        if self.payment_poll_interval_seconds <= 0:
            missing.append("payment_poll_interval_seconds")

        if missing:
            raise ValueError(
                f"Missing or invalid required configuration: "
                f"{', '.join(missing)}. "
                f"Please check your .env file and ensure all required "
                f"values are set."
            )


# Global settings instance
settings = Settings()
