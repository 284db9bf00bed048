"""Data models and engine contract"""
from .models import (
    EngineFactory,
    IndexScope,
    QueryInlineProjectContextParams,
    QueryInlineProjectContextResult,
    QueryVectorIndexParams,
    QueryVectorIndexResult,
    UpdateMode,
    VectorLibAPI,
    WorkspaceFolder,
)

__all__ = [
    "EngineFactory",
    "IndexScope",
    "QueryInlineProjectContextParams",
    "QueryInlineProjectContextResult",
    "QueryVectorIndexParams",
    "QueryVectorIndexResult",
    "UpdateMode",
    "VectorLibAPI",
    "WorkspaceFolder",
]
