"""Internal messaging for the run orchestrator."""

from .event_bus import EventBus

__all__ = ["EventBus"]
