"""
NoteKeeper Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types and ranges, and exposes a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; checked again during app startup.

Backends:
    NOTES_BACKEND=database  → notes stored by DatabaseNotesApi (SQLAlchemy)
    NOTES_BACKEND=graphql   → notes stored by a remote GraphQL platform
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments must
    override GRAPHQL_* (when using the graphql backend), URL_SIGNING_SECRET
    and PUBLIC_BASE_URL.
    """

    # ── Notes Platform ────────────────────────────────────────────────────
    notes_backend: str = Field(
        default="database",
        description="Which NotesApi implementation to use: 'database' or 'graphql'",
    )

    @field_validator("notes_backend")
    @classmethod
    def validate_notes_backend(cls, v: str) -> str:
        """Ensures the backend name is one we know how to build."""
        valid = {"database", "graphql"}
        lower = v.lower()
        if lower not in valid:
            raise ValueError(f"Invalid notes_backend '{v}'. Must be one of: {valid}")
        return lower

    # Async SQLAlchemy URL, e.g. postgresql+asyncpg://user:pw@host/db
    database_url: str = Field(
        default="sqlite+aiosqlite:///./notekeeper.db",
        description="Async database URL for the self-hosted notes platform",
    )
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=5, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    graphql_endpoint: str = Field(
        default="",
        description="GraphQL endpoint exposing listNotes/createNote/deleteNote",
    )
    graphql_api_key: str = Field(default="", description="Sent as the x-api-key header")

    # Applies to every outbound platform request; there is no retry layer
    remote_timeout: float = Field(default=30.0, gt=0, le=300)

    # ── Object Store ──────────────────────────────────────────────────────
    storage_root: str = Field(default="./storage")
    public_base_url: str = Field(default="http://localhost:8000")
    url_signing_secret: str = Field(default="")
    url_expiry_seconds: int = Field(default=900, ge=30, le=604_800)

    # 10MB
    max_file_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)

    # ── Authentication ────────────────────────────────────────────────────
    # Comma-separated bearer tokens; empty disables authentication
    auth_tokens: str = Field(default="")

    @property
    def auth_tokens_list(self) -> List[str]:
        return [t.strip() for t in self.auth_tokens.split(",") if t.strip()]

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

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

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        Validates that the settings the chosen backend depends on are present.

        Called from the lifespan handler; raises ValueError listing every
        problem at once so the operator can fix them in one pass.
        """
        errors = []
        if self.notes_backend == "graphql" and not self.graphql_endpoint:
            errors.append("GRAPHQL_ENDPOINT is required when NOTES_BACKEND=graphql.")
        if not self.url_signing_secret:
            errors.append(
                "URL_SIGNING_SECRET is not set. Attachment URLs are signed with an "
                "ephemeral per-process key and stop working after a restart."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


settings = Settings()
