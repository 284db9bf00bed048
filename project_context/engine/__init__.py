"""Indexing engine lifecycle and loading"""
from .lifecycle import (
    Disposed,
    EngineLifecycleManager,
    EngineState,
    NotStarted,
    Ready,
    Starting,
    Unavailable,
)
from .loader import module_engine_factory

__all__ = [
    "Disposed",
    "EngineLifecycleManager",
    "EngineState",
    "NotStarted",
    "Ready",
    "Starting",
    "Unavailable",
    "module_engine_factory",
]
