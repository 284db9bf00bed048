import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Sequence

from project_context.engine import EngineLifecycleManager
from project_context.errors import EngineCallError
from project_context.models import UpdateMode

logger = logging.getLogger(__name__)


class IndexUpdateDispatcher:
    """Forward filesystem change batches to the engine's incremental update."""

    def __init__(self, lifecycle: EngineLifecycleManager, ordered: bool = False):
        self.lifecycle = lifecycle
        self.ordered = ordered
        # asyncio.Lock wakes waiters first-in first-out
        self._lock = asyncio.Lock() if ordered else None

    async def update_index(self, file_paths: Sequence[str], mode: UpdateMode) -> None:
        """Apply one change batch. A no-op while the engine is not ready; never raises."""
        if self.lifecycle.engine() is None:
            return
        try:
            mode = UpdateMode(mode)
        except ValueError:
            logger.error("❌ Unknown update mode %r; ignoring %d files", mode, len(file_paths))
            return

        async with AsyncExitStack() as stack:
            if self._lock is not None:
                await stack.enter_async_context(self._lock)

            engine = self.lifecycle.engine()
            if engine is None:
                return
            try:
                await engine.update_index_v2(list(file_paths), mode.value)
            except Exception as e:
                logger.error("❌ %s", EngineCallError(f"Error updating index ({mode.value}): {e}"))
