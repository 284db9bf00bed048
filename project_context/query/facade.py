import logging

from project_context.engine import EngineLifecycleManager
from project_context.errors import EngineCallError
from project_context.models import (
    QueryInlineProjectContextParams,
    QueryInlineProjectContextResult,
    QueryVectorIndexParams,
    QueryVectorIndexResult,
)

logger = logging.getLogger(__name__)


class ContextQueryFacade:
    """
    Query operations over the engine that always produce a result.

    When the engine is absent, or a call fails, the empty form of the result
    is returned instead of raising.
    """

    def __init__(self, lifecycle: EngineLifecycleManager):
        self.lifecycle = lifecycle

    async def query_vector_index(self, params: QueryVectorIndexParams) -> QueryVectorIndexResult:
        engine = self.lifecycle.engine()
        if engine is None:
            return QueryVectorIndexResult(chunks=[])

        try:
            resp = await engine.query_vector_index(params.query)
            return QueryVectorIndexResult(chunks=list(resp or []))
        except Exception as e:
            logger.error("❌ %s", EngineCallError(f"Error in query_vector_index: {e}"))
            return QueryVectorIndexResult(chunks=[])

    async def query_inline_project_context(
        self, params: QueryInlineProjectContextParams
    ) -> QueryInlineProjectContextResult:
        engine = self.lifecycle.engine()
        if engine is None:
            return QueryInlineProjectContextResult(inline_project_context=[])

        try:
            resp = await engine.query_inline_project_context(params.query, params.file_path, params.target)
            return QueryInlineProjectContextResult(inline_project_context=list(resp or []))
        except Exception as e:
            logger.error("❌ %s", EngineCallError(f"Error in query_inline_project_context: {e}"))
            return QueryInlineProjectContextResult(inline_project_context=[])
