"""Request scheduling, provider transport and the gateway facade."""

from .gateway import AgentGateway
from .retry_handler import RetryHandler
from .scheduler import RESET_MESSAGE, SHUTDOWN_MESSAGE, QueueEntry, RequestScheduler
from .state import SettingsState
from .tracker import FailureTracker
from .transport import Transport

__all__ = [
    "AgentGateway",
    "FailureTracker",
    "QueueEntry",
    "RESET_MESSAGE",
    "SHUTDOWN_MESSAGE",
    "RequestScheduler",
    "RetryHandler",
    "SettingsState",
    "Transport",
]
