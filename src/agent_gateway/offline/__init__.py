"""Offline response generation."""

from .classifier import detect_agent_role, detect_request_kind
from .responder import OfflineResponder, Responder

__all__ = ["OfflineResponder", "Responder", "detect_agent_role", "detect_request_kind"]
