"""
Arduino Relay - Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and exposes a cached `Settings` instance.
Who:   Built by the application factory and handed to the lifespan and routes.
When:  Loaded once when the app is created; never mutated afterwards.

Design Decision:
    Settings are not a module-level singleton. `create_app()` receives a
    Settings object (or builds one via get_settings()) and stores it on
    `app.state`, so tests can construct an app with their own values
    without touching the process environment.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults that match the original sensor deployment.
    Production deployments override FIREBASE_* to point at their own project.
    """

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")

    # What: TCP port to bind (PORT env var, as set by most PaaS platforms)
    port: int = Field(default=3000, ge=1, le=65535)

    # ── Firebase ──────────────────────────────────────────────────────────
    # What: Realtime Database URL the relay appends to
    firebase_database_url: str = Field(
        default="https://mcm-dashboard-97482-default-rtdb.firebaseio.com",
        description="Firebase Realtime Database URL",
    )

    # What: Service account key downloaded from the Firebase console
    # Required: YES - writes fail with 500 until a valid key is present
    firebase_credentials_path: str = Field(
        default="./firebase-service-account.json",
        description="Path to the Firebase service account JSON file",
    )

    # What: Parent location under which every record gets a push key
    firebase_data_path: str = Field(default="arduinoData")

    # What: Name of the firebase_admin App this process registers
    # Why named: Avoids clobbering a [DEFAULT] app if the relay is embedded
    firebase_app_name: str = Field(default="arduino-relay")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Default "*": the sensor and any dashboard may call from anywhere
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("firebase_data_path")
    @classmethod
    def validate_data_path(cls, v: str) -> str:
        """Strips surrounding slashes; an empty path would write to the root."""
        stripped = v.strip("/")
        if not stripped:
            raise ValueError("firebase_data_path must not be empty or '/'")
        return stripped

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_for_startup(self) -> None:
        """
        What:  Checks that the Firebase credential file is present.
        When:  Called during app startup (lifespan), before connecting the sink.
        Why:   A clear message beats a stack trace from deep inside firebase_admin.
        """
        errors = []
        if not Path(self.firebase_credentials_path).is_file():
            errors.append(
                f"FIREBASE_CREDENTIALS_PATH '{self.firebase_credentials_path}' does not exist. "
                "Download a service account key from the Firebase console."
            )
        if not self.firebase_database_url.startswith("https://"):
            errors.append("FIREBASE_DATABASE_URL must be an https:// URL.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


@lru_cache
def get_settings() -> Settings:
    """Returns the process settings, read from the environment on first call."""
    return Settings()
