__version__ = "1.0.0"


def get_version():
    return __version__


from agent_gateway.config import GatewaySettings, get_settings
from agent_gateway.exceptions import GatewayError
from agent_gateway.orchestrator import AgentGateway
from agent_gateway.schemas import ApiKeyStatus, CallStats, QueueStatus

__all__ = [
    "__version__",
    "get_version",
    "AgentGateway",
    "ApiKeyStatus",
    "CallStats",
    "GatewayError",
    "GatewaySettings",
    "QueueStatus",
    "get_settings",
]
