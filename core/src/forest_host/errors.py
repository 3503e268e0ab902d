from __future__ import annotations


class HostError(Exception):
    """Base class for failures that stop the host process during startup."""

    code = "host_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(HostError):
    code = "config_error"


class AgentStartupError(HostError):
    code = "agent_startup_failed"


class BindError(HostError):
    code = "bind_failed"

    def __init__(self, message: str, *, host: str, port: int) -> None:
        super().__init__(message)
        self.host = host
        self.port = port


class LifecycleError(HostError):
    code = "invalid_lifecycle_transition"
