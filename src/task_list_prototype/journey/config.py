"""Configuration for the task journey.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The journey runs with the built-in registry unless `TASKLIST_REGISTRY_FILE`
points at a JSON task list.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .registry import TaskRegistry, default_registry, load_registry


class PrototypeSettings(BaseSettings):
    """Settings shared by the CLI and the server.

    Environment variables:
    - LOG_LEVEL               (optional)
    - TASKLIST_REGISTRY_FILE  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `PrototypeSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    registry_file: Path | None = Field(
        default=None,
        validation_alias="TASKLIST_REGISTRY_FILE",
        description="JSON file describing the task list; built-in journey when unset",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    def load_registry(self) -> TaskRegistry:
        """Build the configured registry.

        Raises:
            RegistryError: if the registry file is missing or invalid.
        """

        if self.registry_file is None:
            return default_registry()
        return load_registry(self.registry_file)
