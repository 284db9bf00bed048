"""
Composition root for the project context index.

Wires workspace root resolution, source discovery, the engine lifecycle,
incremental updates and queries behind one object per client session.
"""
import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from project_context.engine import EngineLifecycleManager, module_engine_factory
from project_context.errors import ConfigurationError, EngineCallError
from project_context.indexing import IndexUpdateDispatcher
from project_context.ingestion import SourceFileDiscoverer
from project_context.models import (
    EngineFactory,
    IndexScope,
    QueryInlineProjectContextParams,
    QueryInlineProjectContextResult,
    QueryVectorIndexParams,
    QueryVectorIndexResult,
    UpdateMode,
    WorkspaceFolder,
)
from project_context.query import ContextQueryFacade
from project_context.utils.settings import Settings, load_settings
from project_context.workspace import find_common_workspace_root

logger = logging.getLogger(__name__)


class ProjectContextController:
    """
    Keeps a project context index in step with one client workspace.

    This class is interface-agnostic: the HTTP server, the CLI or a test
    drive it the same way.

    Usage:
        controller = ProjectContextController("my-ide", folders)
        await controller.init()
        await controller.update_index(["/repo/A.java"], UpdateMode.UPDATE)
        result = await controller.query_vector_index(QueryVectorIndexParams("auth"))
        await controller.dispose()
    """

    def __init__(
        self,
        client_name: str,
        workspace_folders: Sequence[WorkspaceFolder],
        engine_factory: Optional[EngineFactory] = None,
        settings: Optional[Settings] = None,
        file_extensions: Optional[Iterable[str]] = None,
    ):
        """
        Create a controller. The engine is not started until init().

        Args:
            client_name: Name reported by the client, handed to the engine
            workspace_folders: Folders declared by the client; fixed for the session
            engine_factory: Starts the engine; defaults to importing settings.engine_module
            settings: Settings to use; defaults to the environment
            file_extensions: Overrides settings.file_extensions for discovery
        """
        self.settings = settings or load_settings()
        self.client_name = client_name
        self.workspace_folders: tuple = tuple(workspace_folders)
        self.discoverer = SourceFileDiscoverer(file_extensions or self.settings.file_extensions)
        self.lifecycle = EngineLifecycleManager(
            engine_factory or module_engine_factory(self.settings.engine_module),
            library_dir=self.settings.library_dir,
        )
        self.dispatcher = IndexUpdateDispatcher(self.lifecycle, ordered=self.settings.ordered_updates)
        self.queries = ContextQueryFacade(self.lifecycle)

    @property
    def workspace_root(self) -> Optional[str]:
        """The resolved workspace root, or None when there are no folders."""
        try:
            return find_common_workspace_root(self.workspace_folders)
        except ConfigurationError:
            return None

    @property
    def engine_state(self) -> str:
        return self.lifecycle.state.name

    async def init(self) -> None:
        """
        Start the engine and build the initial index.

        Start failures are logged and leave the engine unavailable; the
        initial build is attempted either way and is a no-op without an engine.
        """
        try:
            root = find_common_workspace_root(self.workspace_folders)
        except ConfigurationError as e:
            logger.error(f"❌ Vector library failed to initialize: {e}")
            self.lifecycle.mark_unavailable(e)
        else:
            await self.lifecycle.start(root, self.client_name)
        await self.update_configuration()

    async def update_configuration(self) -> None:
        """Rediscover all source files and request a full rebuild of the index."""
        if self.lifecycle.engine() is None:
            return

        try:
            source_files = await asyncio.to_thread(self.discoverer.discover_workspace, self.workspace_folders)
            root_dir = find_common_workspace_root(self.workspace_folders)
            engine = self.lifecycle.engine()
            if engine is None:
                return
            logger.info("🔄 Building index for %d files under %s", len(source_files), root_dir)
            await engine.build_index(source_files, root_dir, IndexScope.ALL.value)
            logger.info("✅ Index build requested")
        except Exception as e:
            logger.error("❌ %s", EngineCallError(f"Error in update_configuration: {e}"))

    async def update_index(self, file_paths: List[str], mode: UpdateMode) -> None:
        await self.dispatcher.update_index(file_paths, mode)

    async def query_vector_index(self, params: QueryVectorIndexParams) -> QueryVectorIndexResult:
        return await self.queries.query_vector_index(params)

    async def query_inline_project_context(
        self, params: QueryInlineProjectContextParams
    ) -> QueryInlineProjectContextResult:
        return await self.queries.query_inline_project_context(params)

    async def dispose(self) -> None:
        await self.lifecycle.dispose()
