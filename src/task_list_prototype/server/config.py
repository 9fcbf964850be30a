"""Configuration for the web server.

Sessions live in a signed cookie, so nothing survives beyond the cookie's
lifetime and a change of `TASKLIST_SESSION_SECRET` resets every journey.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class ServerSettings(BaseSettings):
    """Settings for the HTTP surface (sessions, templates, binding)."""

    session_secret: str = Field(
        default="task-list-prototype-dev-secret",
        validation_alias="TASKLIST_SESSION_SECRET",
        description="Key used to sign the session cookie. Override outside local development.",
    )
    session_cookie: str = Field(
        default="task-list-session",
        validation_alias="TASKLIST_SESSION_COOKIE",
    )
    session_max_age_seconds: int = Field(
        default=14 * 24 * 60 * 60,
        validation_alias="TASKLIST_SESSION_MAX_AGE",
        gt=0,
    )

    templates_dir: Path = Field(
        default=PACKAGE_TEMPLATES_DIR,
        validation_alias="TASKLIST_TEMPLATES_DIR",
        description="Directory holding the page templates (one per route).",
    )
    task_list_path: str = Field(
        default="/task-list",
        validation_alias="TASKLIST_TASK_LIST_PATH",
    )

    host: str = Field(default="127.0.0.1", validation_alias="TASKLIST_HOST")
    port: int = Field(default=3000, validation_alias="TASKLIST_PORT", gt=0, le=65535)

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    @field_validator("task_list_path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("/"):
            raise ValueError("TASKLIST_TASK_LIST_PATH must start with '/'")
        return value
