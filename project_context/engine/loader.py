import asyncio
import importlib
import inspect
import logging

from project_context.models import EngineFactory, VectorLibAPI

logger = logging.getLogger(__name__)


def module_engine_factory(module_name: str) -> EngineFactory:
    """
    Build a factory that imports ``module_name`` on first use and calls its ``start``.

    The module is imported lazily so that a missing or broken engine only
    surfaces when the engine is started, where it is logged and tolerated.
    A synchronous ``start`` runs in a worker thread to keep the event loop free.
    """

    async def start(library_dir: str, client_name: str, root: str) -> VectorLibAPI:
        logger.info("📦 Loading indexing engine from %s", module_name)
        module = importlib.import_module(module_name)
        if inspect.iscoroutinefunction(module.start):
            return await module.start(library_dir, client_name, root)

        handle = await asyncio.to_thread(module.start, library_dir, client_name, root)
        if inspect.isawaitable(handle):
            handle = await handle
        return handle

    return start
