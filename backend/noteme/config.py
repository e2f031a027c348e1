"""
NoteMe Backend — Application Configuration
===========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.

Secrets:
    JSONBIN_BIN_ID and JSONBIN_API_KEY identify the single document and grant
    access to it. They default to empty so the app (and the test suite) can
    import without them; store calls then fail with StoreUnavailableError.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Production deployments MUST set the JSONBin credentials.

    Attributes are grouped by concern for readability.
    """

    # ── Document Store ────────────────────────────────────────────────────
    # What: Which DocumentStore implementation backs the API
    # Options: jsonbin (remote, default), file (local data.json), memory (process-local)
    store_backend: str = Field(default="jsonbin")

    # What: JSONBin.io document identifier and access key
    # Required: YES for store_backend=jsonbin
    jsonbin_bin_id: str = Field(default="", description="JSONBin bin id")
    jsonbin_api_key: str = Field(default="", description="JSONBin X-Access-Key value")

    # What: JSONBin API root; the bin URL is {base}/b/{bin_id}
    jsonbin_base_url: str = Field(default="https://api.jsonbin.io/v3")

    # What: Local document used by store_backend=file and by the site builder
    # when no JSONBin credentials are configured
    data_file: str = Field(default="./data.json")

    # What: Timeout applied to every outbound store / hook request
    # Why explicit: the store is the only thing a request waits on
    store_timeout_seconds: float = Field(default=10.0, gt=0, le=120)

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Only the shipped store implementations can be selected."""
        lower = v.lower()
        if lower not in {"jsonbin", "file", "memory"}:
            raise ValueError(f"Invalid store_backend '{v}'. Must be one of: jsonbin, file, memory")
        return lower

    @property
    def jsonbin_configured(self) -> bool:
        return bool(self.jsonbin_bin_id and self.jsonbin_api_key)

    # ── Deploy Hook ───────────────────────────────────────────────────────
    # What: Optional URL POSTed after every successful mutation
    # Why: Rebuilds the static site so new users/notes appear
    deploy_hook_url: Optional[str] = Field(default=None)

    # ── Responses ─────────────────────────────────────────────────────────
    # What: Language of the `error` strings returned to clients (en, ru)
    error_language: str = Field(default="en")

    @field_validator("error_language")
    @classmethod
    def validate_error_language(cls, v: str) -> str:
        lower = v.lower()
        if lower not in {"en", "ru"}:
            raise ValueError(f"Invalid error_language '{v}'. Must be 'en' or 'ru'")
        return lower

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # What: Controls verbosity of application logging
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

    # ── Static Site Builder ───────────────────────────────────────────────
    dist_dir: str = Field(default="./dist")
    public_dir: str = Field(default="./public")

    # What: Language of the generated pages (en, ru)
    site_language: str = Field(default="en")

    @field_validator("site_language")
    @classmethod
    def validate_site_language(cls, v: str) -> str:
        lower = v.lower()
        if lower not in {"en", "ru"}:
            raise ValueError(f"Invalid site_language '{v}'. Must be 'en' or 'ru'")
        return lower

    # What: Tenacity retry settings for the builder's document fetch
    # Why only the builder: API requests never retry (last-writer-wins contract)
    build_fetch_attempts: int = Field(default=3, ge=1, le=10)
    build_fetch_min_wait: int = Field(default=1, ge=1, le=30)
    build_fetch_max_wait: int = Field(default=8, ge=1, le=120)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        Why:   Fail fast with clear error messages instead of cryptic runtime failures.
        """
        errors = []
        if self.store_backend == "jsonbin":
            if not self.jsonbin_bin_id:
                errors.append("JSONBIN_BIN_ID is not set.")
            if not self.jsonbin_api_key:
                errors.append("JSONBIN_API_KEY is not set.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
