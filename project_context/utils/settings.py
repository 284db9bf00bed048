"""Environment-driven settings.

Entry points call ``load_dotenv()`` before :func:`load_settings`, so values may
also come from a ``.env`` file.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from project_context.utils.fs import default_library_directory

DEFAULT_FILE_EXTENSIONS: Tuple[str, ...] = (".java",)
DEFAULT_ENGINE_MODULE = "project_context.storage.vector_store"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"

_TRUTHY = {"1", "true", "yes", "on"}


def normalize_extensions(extensions) -> Tuple[str, ...]:
    """Lowercase extensions and make sure each carries a leading dot."""
    normalized = []
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        if ext not in normalized:
            normalized.append(ext)
    return tuple(normalized)


@dataclass(frozen=True)
class Settings:
    file_extensions: Tuple[str, ...] = DEFAULT_FILE_EXTENSIONS
    library_dir: str = field(default_factory=default_library_directory)
    engine_module: str = DEFAULT_ENGINE_MODULE
    ordered_updates: bool = False
    embedding_model: str = DEFAULT_EMBEDDING_MODEL


def load_settings(environ: Optional[dict] = None) -> Settings:
    """Build :class:`Settings` from the environment (or an explicit mapping)."""
    env = os.environ if environ is None else environ

    raw_extensions = env.get("PROJECT_CONTEXT_FILE_EXTENSIONS")
    extensions = (
        normalize_extensions(raw_extensions.split(","))
        if raw_extensions
        else DEFAULT_FILE_EXTENSIONS
    )

    return Settings(
        file_extensions=extensions or DEFAULT_FILE_EXTENSIONS,
        library_dir=env.get("PROJECT_CONTEXT_LIBRARY_DIR") or default_library_directory(),
        engine_module=env.get("PROJECT_CONTEXT_ENGINE_MODULE") or DEFAULT_ENGINE_MODULE,
        ordered_updates=env.get("PROJECT_CONTEXT_ORDERED_UPDATES", "").strip().lower() in _TRUTHY,
        embedding_model=env.get("PROJECT_CONTEXT_EMBEDDING_MODEL") or DEFAULT_EMBEDDING_MODEL,
    )
