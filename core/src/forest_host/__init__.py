__version__ = "0.1.0"

from forest_host.agent import Agent, AgentOptions, SqlDataSource, load_agent_factory  # noqa: E402
from forest_host.config import HOST, PORT, HostSettings, load_settings  # noqa: E402
from forest_host.lifecycle import AppContext, Lifecycle, Phase, build_context  # noqa: E402

__all__ = [
    "HOST",
    "PORT",
    "Agent",
    "AgentOptions",
    "AppContext",
    "HostSettings",
    "Lifecycle",
    "Phase",
    "SqlDataSource",
    "__version__",
    "build_context",
    "load_agent_factory",
    "load_settings",
]
