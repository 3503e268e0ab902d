from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from importlib.metadata import entry_points
from typing import Final, Protocol, runtime_checkable
from urllib.parse import urlsplit

from fastapi import FastAPI
from uvicorn.importer import ImportFromStringError, import_from_string

from forest_host.config import HostSettings
from forest_host.errors import ConfigError
from forest_host.log import LoggingAgentLogger

AGENT_ENTRY_POINT_GROUP: Final[str] = "forest_host.agents"


class AgentLogger(Protocol):
    def log(self, level: str, message: str) -> None: ...


@dataclass(frozen=True)
class AgentOptions:
    auth_secret: str = field(repr=False)
    env_secret: str = field(repr=False)
    is_production: bool
    logger_level: str
    logger: AgentLogger


@dataclass(frozen=True)
class SqlDataSource:
    url: str = field(repr=False)
    include: tuple[str, ...] = ()

    @property
    def display_url(self) -> str:
        """Connection URL with the credentials stripped, safe for logs."""
        parts = urlsplit(self.url)
        host = parts.hostname or ""
        if parts.port is not None:
            host = f"{host}:{parts.port}"
        return f"{parts.scheme}://{host}{parts.path}"


@runtime_checkable
class Agent(Protocol):
    """The admin agent as seen by the host.

    Registration calls return the agent itself so implementations can be
    used fluently, but the host always calls them one at a time, in order:
    add_datasource, mount, start.
    """

    def add_datasource(self, datasource: SqlDataSource) -> Agent: ...

    def mount(self, app: FastAPI) -> Agent: ...

    async def start(self) -> None: ...


AgentFactory = Callable[[AgentOptions], Agent]


def build_agent_options(settings: HostSettings, *, logger: AgentLogger | None = None) -> AgentOptions:
    return AgentOptions(
        auth_secret=settings.forest_auth_secret,
        env_secret=settings.forest_env_secret,
        is_production=settings.is_production,
        logger_level=settings.forest_logger_level,
        logger=logger or LoggingAgentLogger(settings.forest_logger_level),
    )


def build_datasource(settings: HostSettings) -> SqlDataSource:
    return SqlDataSource(url=settings.postgresql_url, include=settings.include_tables)


def load_agent_factory(import_string: str | None = None) -> AgentFactory:
    """Resolve the agent factory.

    An explicit ``module:attr`` import string wins; otherwise exactly one
    installed distribution must expose an entry point in the
    ``forest_host.agents`` group.
    """

    if import_string:
        try:
            factory = import_from_string(import_string)
        except ImportFromStringError as exc:
            raise ConfigError(f"Cannot import agent factory {import_string!r}: {exc}") from exc
        source = import_string
    else:
        found = list(entry_points(group=AGENT_ENTRY_POINT_GROUP))
        if not found:
            raise ConfigError(
                "No admin agent factory configured; set FOREST_AGENT_FACTORY or install "
                f"a package exposing a {AGENT_ENTRY_POINT_GROUP!r} entry point"
            )
        if len(found) > 1:
            names = ", ".join(sorted(ep.name for ep in found))
            raise ConfigError(
                f"Several admin agents are installed ({names}); pick one with FOREST_AGENT_FACTORY"
            )
        try:
            factory = found[0].load()
        except Exception as exc:
            raise ConfigError(f"Cannot load agent entry point {found[0].name!r}: {exc}") from exc
        source = found[0].name

    if not callable(factory):
        raise ConfigError(f"Agent factory {source!r} is not callable")
    return factory
