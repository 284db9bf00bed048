"""FastAPI transport for the project context index.

Exposes a class-based server wrapper (no global mutable state). Each server
owns one :class:`ProjectContextSession`; lifecycle notifications, file events
and queries are forwarded to it.

`app` is exported for `uvicorn server.app:app`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import BackgroundTasks, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.requests import Request

from project_context import ProjectContextSession
from project_context.models import (
    EngineFactory,
    QueryInlineProjectContextParams,
    QueryVectorIndexParams,
    WorkspaceFolder,
)
from project_context.utils.settings import Settings


def configure_logging(level: int = logging.INFO) -> None:
    """Configure logging for the server."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=True,
    )
    logging.getLogger("project_context").setLevel(level)
    logging.getLogger("server").setLevel(level)


logger = logging.getLogger(__name__)


# ============================================================================
# Request/Response Models
# ============================================================================


class ProtocolModel(BaseModel):
    """Accepts and emits the protocol's camelCase field names."""

    model_config = ConfigDict(populate_by_name=True)


class ClientInfo(ProtocolModel):
    name: str = Field(..., description="Client name")
    version: Optional[str] = Field(None, description="Client version")


class WorkspaceFolderModel(ProtocolModel):
    uri: str = Field(..., description="Folder URI, e.g. file:///home/user/project")
    name: str = Field("", description="Display name of the folder")


class InitializeRequest(ProtocolModel):
    """Request model for the initialize handshake."""

    client_info: Optional[ClientInfo] = Field(None, alias="clientInfo")
    workspace_folders: Optional[List[WorkspaceFolderModel]] = Field(None, alias="workspaceFolders")


class InitializeResponse(ProtocolModel):
    capabilities: dict = Field(default_factory=dict, description="Server capabilities")


class AcceptedResponse(ProtocolModel):
    accepted: bool = Field(True, description="Whether the notification was accepted")


class TextDocumentIdentifier(ProtocolModel):
    uri: str


class DidSaveTextDocumentRequest(ProtocolModel):
    text_document: TextDocumentIdentifier = Field(..., alias="textDocument")


class FileUri(ProtocolModel):
    uri: str


class FilesRequest(ProtocolModel):
    """Request model for create and delete file events."""

    files: List[FileUri] = Field(..., description="Affected files")


class FileRename(ProtocolModel):
    old_uri: str = Field(..., alias="oldUri")
    new_uri: str = Field(..., alias="newUri")


class RenameFilesRequest(ProtocolModel):
    files: List[FileRename] = Field(..., description="Renamed files")


class QueryVectorIndexRequest(ProtocolModel):
    query: str = Field(..., description="Natural language or code query")


class QueryVectorIndexResponse(ProtocolModel):
    chunks: List[Any] = Field(default_factory=list, description="Matching chunks")


class QueryInlineProjectContextRequest(ProtocolModel):
    query: str = Field(..., description="Code around the cursor")
    file_path: str = Field(..., alias="filePath", description="File the query comes from")
    target: str = Field("default", description="Retrieval target")


class QueryInlineProjectContextResponse(ProtocolModel):
    inline_project_context: List[Any] = Field(
        default_factory=list, alias="inlineProjectContext", description="Context snippets"
    )


class StatusResponse(ProtocolModel):
    """Response model for session status."""

    initialized: bool = Field(..., description="Whether the client has initialized")
    client_name: Optional[str] = Field(None, alias="clientName")
    workspace_root: Optional[str] = Field(None, alias="workspaceRoot")
    engine_state: Optional[str] = Field(None, alias="engineState")


class HealthResponse(ProtocolModel):
    """Response model for health check."""

    status: str = Field(..., description="Server health status")
    engine_ready: bool = Field(..., alias="engineReady", description="Whether the engine is ready")


class ProjectContextServer:
    """Encapsulates FastAPI app + ProjectContextSession lifecycle."""

    def __init__(
        self,
        *,
        engine_factory: Optional[EngineFactory] = None,
        settings: Optional[Settings] = None,
        log_level: int = logging.INFO,
    ) -> None:
        configure_logging(log_level)
        self.session = ProjectContextSession(engine_factory=engine_factory, settings=settings)

    @asynccontextmanager
    async def lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        """Lifespan event handler; disposes the engine on shutdown."""
        logger.info("=" * 70)
        logger.info("🚀 PROJECT CONTEXT SERVER STARTING")
        logger.info("=" * 70)

        yield

        logger.info("👋 Server shutting down...")
        await self.session.dispose()

    def engine_ready(self) -> bool:
        controller = self.session.controller
        return controller is not None and controller.lifecycle.is_ready()

    def create_app(self) -> FastAPI:
        """Create and configure a FastAPI application instance."""
        app = FastAPI(
            title="Project Context API",
            description="Keeps a project context index in sync with a client workspace",
            version="1.0.0",
            lifespan=self.lifespan,
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        session = self.session

        @app.get("/", tags=["General"])
        async def root() -> dict[str, Any]:
            return {
                "name": "Project Context API",
                "version": "1.0.0",
                "docs": "/docs",
                "health": "/health",
                "validEndpoints": [
                    "GET /health",
                    "GET /status",
                    "POST /initialize",
                    "POST /initialized",
                    "POST /workspace/didChangeConfiguration",
                    "POST /textDocument/didSave",
                    "POST /workspace/didCreateFiles",
                    "POST /workspace/didDeleteFiles",
                    "POST /workspace/didRenameFiles",
                    "POST /query/vectorIndex",
                    "POST /query/inlineProjectContext",
                ],
            }

        @app.get("/health", response_model=HealthResponse, tags=["General"])
        async def health_check() -> HealthResponse:
            return HealthResponse(status="healthy", engine_ready=self.engine_ready())

        @app.get("/status", response_model=StatusResponse, tags=["General"])
        async def get_status() -> StatusResponse:
            if not session.is_initialized():
                return StatusResponse(initialized=False)
            controller = session.controller
            return StatusResponse(
                initialized=True,
                client_name=controller.client_name,
                workspace_root=controller.workspace_root,
                engine_state=controller.engine_state,
            )

        @app.post("/initialize", response_model=InitializeResponse, tags=["Lifecycle"])
        async def initialize(request: InitializeRequest) -> InitializeResponse:
            folders = [
                WorkspaceFolder(uri=folder.uri, name=folder.name)
                for folder in request.workspace_folders or []
            ]
            client_name = request.client_info.name if request.client_info else None
            logger.info("🤝 Initialize from %s with %d workspace folders", client_name or "unknown", len(folders))
            result = session.on_initialize(client_name, folders)
            return InitializeResponse(**result)

        @app.post("/initialized", response_model=AcceptedResponse, tags=["Lifecycle"])
        async def initialized(background_tasks: BackgroundTasks) -> AcceptedResponse:
            background_tasks.add_task(session.on_initialized)
            return AcceptedResponse()

        @app.post("/workspace/didChangeConfiguration", response_model=AcceptedResponse, tags=["Lifecycle"])
        async def did_change_configuration(background_tasks: BackgroundTasks) -> AcceptedResponse:
            background_tasks.add_task(session.on_configuration_changed)
            return AcceptedResponse()

        @app.post("/textDocument/didSave", response_model=AcceptedResponse, tags=["Files"])
        async def did_save(request: DidSaveTextDocumentRequest) -> AcceptedResponse:
            await session.on_file_saved(request.text_document.uri)
            return AcceptedResponse()

        @app.post("/workspace/didCreateFiles", response_model=AcceptedResponse, tags=["Files"])
        async def did_create_files(request: FilesRequest) -> AcceptedResponse:
            await session.on_files_created([f.uri for f in request.files])
            return AcceptedResponse()

        @app.post("/workspace/didDeleteFiles", response_model=AcceptedResponse, tags=["Files"])
        async def did_delete_files(request: FilesRequest) -> AcceptedResponse:
            await session.on_files_deleted([f.uri for f in request.files])
            return AcceptedResponse()

        @app.post("/workspace/didRenameFiles", response_model=AcceptedResponse, tags=["Files"])
        async def did_rename_files(request: RenameFilesRequest) -> AcceptedResponse:
            await session.on_files_renamed(
                [f.old_uri for f in request.files],
                [f.new_uri for f in request.files],
            )
            return AcceptedResponse()

        @app.post("/query/vectorIndex", response_model=QueryVectorIndexResponse, tags=["Query"])
        async def query_vector_index(request: QueryVectorIndexRequest) -> QueryVectorIndexResponse:
            logger.info(f"🔍 Query: {request.query[:100]}...")
            result = await session.query_vector_index(QueryVectorIndexParams(query=request.query))
            return QueryVectorIndexResponse(chunks=result.chunks)

        @app.post(
            "/query/inlineProjectContext",
            response_model=QueryInlineProjectContextResponse,
            tags=["Query"],
        )
        async def query_inline_project_context(
            request: QueryInlineProjectContextRequest,
        ) -> QueryInlineProjectContextResponse:
            result = await session.query_inline_project_context(
                QueryInlineProjectContextParams(
                    query=request.query,
                    file_path=request.file_path,
                    target=request.target,
                )
            )
            return QueryInlineProjectContextResponse(inline_project_context=result.inline_project_context)

        @app.exception_handler(404)
        async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Not Found",
                    "detail": "The requested endpoint does not exist",
                    "docs": "/docs",
                },
            )

        @app.exception_handler(500)
        async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
            logger.exception("Internal server error")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal Server Error", "detail": "An unexpected error occurred"},
            )

        return app


def create_app(engine_factory: Optional[EngineFactory] = None) -> FastAPI:
    """Factory for creating an app instance (useful for tests/uvicorn)."""
    return ProjectContextServer(engine_factory=engine_factory).create_app()


app = create_app()
