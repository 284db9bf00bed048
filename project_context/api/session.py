"""
Event handlers a transport binds to: lifecycle notifications, file events and queries.

A session owns at most one :class:`ProjectContextController`, created when the
client initializes. Handlers never raise: failures are logged and queries fall
back to empty results.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from project_context.api.controller import ProjectContextController
from project_context.models import (
    EngineFactory,
    QueryInlineProjectContextParams,
    QueryInlineProjectContextResult,
    QueryVectorIndexParams,
    QueryVectorIndexResult,
    UpdateMode,
    WorkspaceFolder,
)
from project_context.utils.fs import uri_to_path
from project_context.utils.settings import Settings

logger = logging.getLogger(__name__)


class ProjectContextSession:
    """One client connection's view of the project context index."""

    def __init__(self, engine_factory: Optional[EngineFactory] = None, settings: Optional[Settings] = None):
        self.engine_factory = engine_factory
        self.settings = settings
        self.controller: Optional[ProjectContextController] = None

    def is_initialized(self) -> bool:
        return self.controller is not None

    def on_initialize(
        self, client_name: Optional[str], workspace_folders: Optional[Sequence[WorkspaceFolder]]
    ) -> Dict[str, Any]:
        """Create the controller for this client. The engine is started later, by on_initialized()."""
        if self.controller is not None:
            logger.warning("Session already initialized for %s; ignoring", self.controller.client_name)
            return {"capabilities": {}}
        self.controller = ProjectContextController(
            client_name or "unknown",
            workspace_folders or [],
            engine_factory=self.engine_factory,
            settings=self.settings,
        )
        return {"capabilities": {}}

    async def on_initialized(self) -> None:
        if self.controller is None:
            logger.warning("Initialized notification before initialize; ignoring")
            return
        try:
            await self.controller.init()
            logger.info("✅ Local context service has been initialized")
        except Exception as e:
            logger.error(f"❌ Failed to initialize local context service: {e}")

    async def on_configuration_changed(self) -> None:
        if self.controller is None:
            return
        try:
            await self.controller.update_configuration()
        except Exception as e:
            logger.error(f"❌ Failed to update configuration: {e}")

    async def on_file_saved(self, uri: str) -> None:
        await self._apply("save", [uri_to_path(uri)], UpdateMode.UPDATE)

    async def on_files_created(self, uris: List[str]) -> None:
        await self._apply("create", [uri_to_path(uri) for uri in uris], UpdateMode.ADD)

    async def on_files_deleted(self, uris: List[str]) -> None:
        await self._apply("delete", [uri_to_path(uri) for uri in uris], UpdateMode.REMOVE)

    async def on_files_renamed(self, old_uris: List[str], new_uris: List[str]) -> None:
        """Engines have no rename: remove the old paths, then add the new ones."""
        if self.controller is None:
            logger.warning("File rename before initialize; ignoring")
            return
        try:
            old_paths = [uri_to_path(uri) for uri in old_uris]
            new_paths = [uri_to_path(uri) for uri in new_uris]

            await self.controller.update_index(old_paths, UpdateMode.REMOVE)
            await self.controller.update_index(new_paths, UpdateMode.ADD)

            logger.info("Files renamed: %s", json.dumps(list(zip(old_paths, new_paths))))
        except Exception as e:
            logger.error(f"❌ Error handling rename event: {e}")

    async def query_vector_index(self, params: QueryVectorIndexParams) -> QueryVectorIndexResult:
        if self.controller is None:
            return QueryVectorIndexResult(chunks=[])
        return await self.controller.query_vector_index(params)

    async def query_inline_project_context(
        self, params: QueryInlineProjectContextParams
    ) -> QueryInlineProjectContextResult:
        if self.controller is None:
            return QueryInlineProjectContextResult(inline_project_context=[])
        return await self.controller.query_inline_project_context(params)

    async def dispose(self) -> None:
        if self.controller is None:
            return
        try:
            await self.controller.dispose()
        except Exception as e:
            logger.error(f"❌ Failed to dispose local context service: {e}")

    async def _apply(self, event: str, file_paths: List[str], mode: UpdateMode) -> None:
        if self.controller is None:
            logger.warning("File %s before initialize; ignoring", event)
            return
        try:
            await self.controller.update_index(file_paths, mode)
            logger.info("Files %s (%s): %s", event, mode.value, json.dumps(file_paths))
        except Exception as e:
            logger.error(f"❌ Error handling {event} event: {e}")
