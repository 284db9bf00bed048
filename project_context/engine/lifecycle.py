"""
Ownership of the indexing engine handle.

The handle is only ever reached through :meth:`EngineLifecycleManager.engine`,
which returns the live engine or ``None``. Callers read it at call time and
again after every await, since ``dispose()`` may run in between.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from project_context.errors import EngineCallError, EngineStartError
from project_context.models import EngineFactory, VectorLibAPI

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotStarted:
    name = "not_started"


@dataclass(frozen=True)
class Starting:
    name = "starting"


@dataclass(frozen=True)
class Unavailable:
    error: Exception
    name = "unavailable"


@dataclass(frozen=True)
class Ready:
    handle: VectorLibAPI
    name = "ready"


@dataclass(frozen=True)
class Disposed:
    name = "disposed"


EngineState = Union[NotStarted, Starting, Unavailable, Ready, Disposed]


class EngineLifecycleManager:
    """Starts, holds and tears down at most one engine per controller."""

    def __init__(self, engine_factory: EngineFactory, library_dir: str):
        self.engine_factory = engine_factory
        self.library_dir = library_dir
        self.state: EngineState = NotStarted()

    def engine(self) -> Optional[VectorLibAPI]:
        """Return the live engine handle, or None when the engine is not usable."""
        if isinstance(self.state, Ready):
            return self.state.handle
        return None

    def is_ready(self) -> bool:
        return self.engine() is not None

    async def start(self, root: str, client_name: str) -> bool:
        """
        Start the engine once. Failures are logged, never raised.

        Args:
            root: Workspace root the engine indexes
            client_name: Name of the client the engine serves

        Returns:
            True if the engine is ready afterwards
        """
        if not isinstance(self.state, NotStarted):
            logger.warning("Engine start already attempted (state: %s); ignoring", self.state.name)
            return self.is_ready()

        self.state = Starting()
        logger.info("⚙️  Starting indexing engine for client %s at %s", client_name, root)
        try:
            handle = await self.engine_factory(self.library_dir, client_name, root)
        except Exception as e:
            error = EngineStartError(f"Vector library failed to initialize: {e}")
            logger.error("❌ %s", error)
            self.mark_unavailable(error)
            return False

        if not isinstance(self.state, Starting):
            # Disposed while starting; the new handle is never exposed
            logger.warning("Engine started after dispose; discarding handle")
            await self._clear(handle)
            return False

        self.state = Ready(handle)
        logger.info("✅ Indexing engine ready")
        return True

    def mark_unavailable(self, error: Exception) -> None:
        """Record that the engine cannot be started for this session."""
        if isinstance(self.state, (NotStarted, Starting)):
            self.state = Unavailable(error)

    async def dispose(self) -> None:
        """Clear the engine's state and release the handle. Safe to call repeatedly."""
        if isinstance(self.state, Starting):
            self.state = Disposed()
            return

        handle = self.engine()
        if handle is None:
            return

        self.state = Disposed()
        await self._clear(handle)
        logger.info("👋 Indexing engine disposed")

    async def _clear(self, handle: VectorLibAPI) -> None:
        clear = getattr(handle, "clear", None)
        if clear is None:
            return
        try:
            await clear()
        except Exception as e:
            logger.error("❌ %s", EngineCallError(f"Error clearing engine: {e}"))
