from __future__ import annotations

from pathlib import Path
from typing import Final, Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from forest_host.errors import ConfigError

# Bind to all interfaces so the process is reachable inside a container.
HOST: Final[str] = "0.0.0.0"
PORT: Final[int] = 3000

AgentLogLevel = Literal["Debug", "Info", "Warn", "Error"]


class HostSettings(BaseSettings):
    """Process configuration, read once from the environment (and ``.env``)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    forest_auth_secret: str = Field(min_length=1)
    forest_env_secret: str = Field(min_length=1)
    node_env: str
    postgresql_url: str = Field(min_length=1)

    forest_logger_level: AgentLogLevel = Field(default="Debug")
    forest_include_tables: str = Field(
        default="customer,staff,payment",
        description="Comma separated allow-list of tables exposed through the datasource.",
    )
    forest_agent_factory: str | None = Field(
        default=None,
        description="Optional 'module:attr' import string for the admin agent factory.",
    )

    log_file: Path | None = Field(default=None)
    log_max_size_mb: int = Field(default=10, ge=1)
    log_backup_count: int = Field(default=5, ge=1)

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def include_tables(self) -> tuple[str, ...]:
        names = (part.strip() for part in self.forest_include_tables.split(","))
        return tuple(name for name in names if name)


def load_settings(*, env_file: str | Path | None = ".env") -> HostSettings:
    """Build the settings record, or raise ConfigError.

    Field values are never echoed in the error since most of them are secrets.
    """

    try:
        return HostSettings(_env_file=env_file)
    except ValidationError as exc:
        fields = sorted({".".join(str(loc) for loc in err["loc"]) for err in exc.errors()})
        raise ConfigError(
            f"Invalid or missing configuration: {', '.join(fields).upper()}"
        ) from exc
