from __future__ import annotations

import logging
import socket
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from fastapi import FastAPI

from forest_host.agent import Agent, AgentFactory, build_agent_options, build_datasource
from forest_host.app import create_app
from forest_host.config import HOST, PORT, HostSettings
from forest_host.errors import AgentStartupError, LifecycleError
from forest_host.server import bind_listener, build_server

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    INITIALIZING = "initializing"
    AGENT_STARTING = "agent_starting"
    LISTENING = "listening"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


_TRANSITIONS: dict[Phase, frozenset[Phase]] = {
    Phase.INITIALIZING: frozenset({Phase.AGENT_STARTING}),
    Phase.AGENT_STARTING: frozenset({Phase.LISTENING}),
    Phase.LISTENING: frozenset({Phase.SHUTTING_DOWN, Phase.TERMINATED}),
    Phase.SHUTTING_DOWN: frozenset({Phase.TERMINATED}),
    Phase.TERMINATED: frozenset(),
}


class Server(Protocol):
    should_exit: bool
    force_exit: bool

    async def serve(self, sockets: list[socket.socket] | None = None) -> None: ...


BindFn = Callable[[str, int], socket.socket]
ServerFactory = Callable[["Lifecycle"], Server]


@dataclass(frozen=True)
class AppContext:
    settings: HostSettings
    app: FastAPI
    host: str = HOST
    port: int = PORT

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"


def build_context(settings: HostSettings, *, host: str = HOST, port: int = PORT) -> AppContext:
    return AppContext(settings=settings, app=create_app(), host=host, port=port)


def _default_server(lifecycle: Lifecycle) -> Server:
    ctx = lifecycle.context
    return build_server(
        ctx.app, host=ctx.host, port=ctx.port, on_interrupt=lifecycle.handle_interrupt
    )


class Lifecycle:
    """Runs the host through its phases.

    Startup is strictly: construct agent, add datasource, mount, start, then
    bind and serve. A failure anywhere before LISTENING propagates and the
    socket is never bound.
    """

    def __init__(
        self,
        context: AppContext,
        agent_factory: AgentFactory,
        *,
        bind: BindFn | None = None,
        server_factory: ServerFactory | None = None,
    ) -> None:
        self.context = context
        self._agent_factory = agent_factory
        self._bind = bind or bind_listener
        self._server_factory = server_factory or _default_server

        self.phase = Phase.INITIALIZING
        self.agent: Agent | None = None
        self.server: Server | None = None
        self._socket: socket.socket | None = None

    def _transition(self, target: Phase) -> None:
        if target not in _TRANSITIONS[self.phase]:
            raise LifecycleError(f"Cannot move from {self.phase.value} to {target.value}")
        logger.debug("Lifecycle %s -> %s", self.phase.value, target.value)
        self.phase = target

    async def start_agent(self) -> Agent:
        self._transition(Phase.AGENT_STARTING)
        settings = self.context.settings
        datasource = build_datasource(settings)

        try:
            agent = self._agent_factory(build_agent_options(settings))
            agent.add_datasource(datasource)
            agent.mount(self.context.app)
            await agent.start()
        except Exception as exc:
            raise AgentStartupError(f"Admin agent failed to start: {exc}") from exc

        logger.info(
            "Admin agent started (datasource %s, tables: %s)",
            datasource.display_url,
            ", ".join(datasource.include) or "all",
        )
        self.agent = agent
        return agent

    def listen(self) -> socket.socket:
        if self.phase is not Phase.AGENT_STARTING or self.agent is None:
            raise LifecycleError("The admin agent must be started before listening")

        sock = self._bind(self.context.host, self.context.port)
        self._socket = sock
        try:
            self.server = self._server_factory(self)
        except Exception:
            sock.close()
            self._socket = None
            raise
        self._transition(Phase.LISTENING)
        logger.info(f"Running on {self.context.url}")
        return sock

    async def run(self) -> None:
        await self.start_agent()
        sock = self.listen()
        try:
            await self.server.serve(sockets=[sock])
        finally:
            sock.close()
            self._socket = None
            self._transition(Phase.TERMINATED)

    def handle_interrupt(self) -> None:
        if self.phase is not Phase.LISTENING:
            return

        self._transition(Phase.SHUTTING_DOWN)
        logger.info(f"Exiting from {self.context.url}")
        # No draining of in-flight requests.
        self.server.should_exit = True
        self.server.force_exit = True
