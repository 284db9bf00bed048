import asyncio
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from langchain_chroma import Chroma
from langchain_core.embeddings import Embeddings
from langchain_openai import OpenAIEmbeddings

from project_context.ingestion.chunker import SemanticChunker
from project_context.models import IndexScope, UpdateMode
from project_context.utils.settings import load_settings

logger = logging.getLogger(__name__)

COLLECTION_NAME = "project_context"


def has_api_key() -> bool:
    """Return True if an OpenAI API key is available in the environment."""
    return bool(os.getenv("OPENAI_API_KEY"))


class ChromaProjectIndex:
    """Project context engine backed by a persistent Chroma collection"""

    def __init__(
        self,
        persist_directory: str,
        embeddings: Optional[Embeddings] = None,
        embedding_model: str = "text-embedding-3-small",
        chunker: Optional[SemanticChunker] = None,
        top_k: int = 5,
        inline_context_limit: int = 3,
        batch_size: Optional[int] = None,
    ):
        self.persist_directory = persist_directory
        self.embedding_model = embedding_model
        self.embeddings = embeddings or OpenAIEmbeddings(
            model=embedding_model,
            api_key=lambda: os.getenv("OPENAI_API_KEY", "")
        )
        self.chunker = chunker or SemanticChunker()
        self.top_k = top_k
        self.inline_context_limit = inline_context_limit
        self.batch_size = batch_size
        self.root: Optional[str] = None
        self.vector_store = Chroma(
            collection_name=COLLECTION_NAME,
            embedding_function=self.embeddings,
            persist_directory=persist_directory,
        )

    async def build_index(self, files: Sequence[str], root: str, scope: str) -> None:
        await asyncio.to_thread(self._build_index, list(files), root, scope)

    async def update_index_v2(self, files: Sequence[str], mode: str) -> None:
        await asyncio.to_thread(self._update_index, list(files), UpdateMode(mode))

    async def query_vector_index(self, query: str) -> List[Dict[str, Any]]:
        results = await asyncio.to_thread(self.vector_store.similarity_search_with_score, query, self.top_k)
        return [
            {
                "filePath": doc.metadata.get("file_path"),
                "relativePath": doc.metadata.get("relative_path"),
                "content": doc.page_content,
                "score": float(score),
            }
            for doc, score in results
        ]

    async def query_inline_project_context(self, query: str, file_path: str, target: str) -> List[Dict[str, Any]]:
        if target != "default":
            logger.debug("No dedicated strategy for target %r; using similarity search", target)
        # Over-fetch so that dropping the querying file's own chunks still fills the limit
        k = self.inline_context_limit * 3
        results = await asyncio.to_thread(self.vector_store.similarity_search_with_score, query, k)

        contexts = []
        for doc, score in results:
            if doc.metadata.get("file_path") == file_path:
                continue
            contexts.append({
                "filePath": doc.metadata.get("file_path"),
                "content": doc.page_content,
                "score": float(score),
            })
            if len(contexts) >= self.inline_context_limit:
                break
        return contexts

    async def clear(self) -> None:
        await asyncio.to_thread(self.vector_store.reset_collection)
        logger.info("🧹 Cleared index at %s", self.persist_directory)

    def _build_index(self, files: List[str], root: str, scope: str) -> None:
        self.root = root
        # Nested workspace folders report the same file more than once
        files = list(dict.fromkeys(files))
        if scope == IndexScope.ALL.value:
            self.vector_store.reset_collection()
        else:
            self._delete_files(files)
        self._add_files(files)
        logger.info("✅ Indexed %d files under %s", len(files), root)

    def _update_index(self, files: List[str], mode: UpdateMode) -> None:
        files = list(dict.fromkeys(files))
        self._delete_files(files)
        if mode is not UpdateMode.REMOVE:
            self._add_files(files)

    def _max_batch_size(self) -> int:
        max_size = self.vector_store._client.get_max_batch_size()
        if self.batch_size is not None:
            return min(self.batch_size, max_size)
        return max_size

    def _add_files(self, files: List[str]) -> None:
        documents = self.chunker.chunk_files(files, self.root)
        if not documents:
            return
        ids = [f"{doc.metadata['file_path']}#{doc.metadata['chunk_index']}" for doc in documents]
        # Chroma rejects a single upsert larger than the client's max batch size
        size = self._max_batch_size()
        for start in range(0, len(documents), size):
            self.vector_store.add_documents(
                documents=documents[start:start + size],
                ids=ids[start:start + size],
            )

    def _delete_files(self, files: List[str]) -> None:
        for file_path in files:
            existing = self.vector_store.get(where={"file_path": file_path})
            ids = existing.get("ids") or []
            if ids:
                self.vector_store.delete(ids=ids)


def _client_slug(client_name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", client_name) or "unknown"


def start(library_dir: str, client_name: str, root: str) -> ChromaProjectIndex:
    """
    Engine entry point used by the default engine factory.

    Raises:
        ValueError: If OpenAI API key is not set
    """
    if not has_api_key():
        raise ValueError("OpenAI API key is not set. Set OPENAI_API_KEY environment variable")

    settings = load_settings()
    persist_directory = str(Path(library_dir) / "index" / _client_slug(client_name))
    logger.info("📂 Opening project index at %s for %s", persist_directory, root)
    return ChromaProjectIndex(persist_directory, embedding_model=settings.embedding_model)
