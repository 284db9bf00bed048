from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Sequence


class UpdateMode(str, Enum):
    """Nature of a filesystem change batch handed to the engine."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"


class IndexScope(str, Enum):
    ALL = "all"


@dataclass(frozen=True)
class WorkspaceFolder:
    uri: str
    name: str


@dataclass
class QueryVectorIndexParams:
    query: str


@dataclass
class QueryInlineProjectContextParams:
    query: str
    file_path: str
    target: str = "default"


@dataclass
class QueryVectorIndexResult:
    chunks: List[Any] = field(default_factory=list)


@dataclass
class QueryInlineProjectContextResult:
    inline_project_context: List[Any] = field(default_factory=list)


# Minimal protocol that describes the calls the core makes on an indexing engine
class VectorLibAPI(Protocol):
    async def build_index(self, files: Sequence[str], root: str, scope: str) -> None: ...
    async def update_index_v2(self, files: Sequence[str], mode: str) -> None: ...
    async def query_vector_index(self, query: str) -> Optional[List[Any]]: ...
    async def query_inline_project_context(
        self, query: str, file_path: str, target: str
    ) -> Optional[List[Any]]: ...
    async def clear(self) -> None: ...


# Starts an engine: (library_dir, client_name, root_path) -> engine
EngineFactory = Callable[[str, str, str], Awaitable[VectorLibAPI]]
