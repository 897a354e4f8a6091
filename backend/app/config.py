"""
Notes API — Application Configuration
=======================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.

Design Decision:
    We use pydantic-settings instead of raw os.getenv() because:
    1. Type coercion is automatic (str → int)
    2. Validation happens at startup, not when the value is first used
    3. Documentation is embedded in the field definitions
"""

from typing import List
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development against a
    MongoDB instance on localhost. Attributes are grouped by concern.
    """

    # ── Document Store ────────────────────────────────────────────────────
    # What: MongoDB connection string. The path component names the database.
    # Format: mongodb://[user:password@]host:port/dbname
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017/notes-app",
        description="MongoDB connection URI",
    )

    # What: Database used when the URI has no path component
    mongodb_database: str = Field(default="notes-app")

    # What: Collection holding note documents
    mongodb_collection: str = Field(default="notes")

    # What: Server selection timeout applied by the driver to every operation
    # that needs a reachable server. Set once, when the client is created.
    mongodb_timeout_ms: int = Field(default=5000, ge=1000, le=60000)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, ge=1, le=65535)

    # What: Publicly reachable base URL, listed in the OpenAPI `servers` block
    # Empty means only the development server is advertised.
    public_url: str = Field(default="")

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

    @property
    def openapi_servers(self) -> List[dict]:
        """
        What: Server entries for the generated OpenAPI document.
        Why property: Depends on both port and public_url.
        """
        servers = []
        if self.public_url:
            servers.append({"url": self.public_url, "description": "Production server"})
        servers.append(
            {"url": f"http://localhost:{self.port}", "description": "Development server"}
        )
        return servers

    @property
    def mongodb_uri_masked(self) -> str:
        """Connection URI with the password replaced, safe for log output."""
        parts = urlsplit(self.mongodb_uri)
        if parts.password is None:
            return self.mongodb_uri
        netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
        return urlunsplit(parts._replace(netloc=netloc))

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # MONGODB_URI and mongodb_uri both work
    }


# Singleton instance — imported throughout the application
settings = Settings()
