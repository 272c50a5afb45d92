from .status import ApiKeyStatus, CallStats, ModelInfo, QueueStatus

__all__ = ["ApiKeyStatus", "CallStats", "ModelInfo", "QueueStatus"]
