import logging
import os
from typing import Dict, Iterable, List, Sequence

from project_context.errors import FilesystemReadError
from project_context.models import WorkspaceFolder
from project_context.utils.fs import uri_to_path
from project_context.utils.settings import DEFAULT_FILE_EXTENSIONS, normalize_extensions

logger = logging.getLogger(__name__)


class SourceFileDiscoverer:
    """Walk workspace directories and collect files eligible for indexing."""

    def __init__(self, file_extensions: Iterable[str] = DEFAULT_FILE_EXTENSIONS):
        self.file_extensions = frozenset(normalize_extensions(file_extensions))

    def is_source_file(self, name: str) -> bool:
        ext = os.path.splitext(name)[1].lower()
        return ext in self.file_extensions

    def discover(self, directory: str) -> List[str]:
        """Return matching files under ``directory`` in traversal order.

        An unreadable directory contributes nothing; files already collected
        from its siblings are kept and no error is raised.
        """
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            error = FilesystemReadError(f"Error reading directory {directory}: {e}")
            logger.error("❌ %s", error)
            return []

        source_files: List[str] = []
        for entry in entries:
            file_path = os.path.join(directory, entry.name)
            # Symlinked directories are not descended into
            if entry.is_dir(follow_symlinks=False):
                source_files.extend(self.discover(file_path))
            elif self.is_source_file(entry.name):
                source_files.append(file_path)
        return source_files

    def discover_workspace(self, workspace_folders: Sequence[WorkspaceFolder]) -> List[str]:
        """Collect source files across every workspace folder.

        Nested folders overlap; each file is reported once, at its first position.
        """
        workspace_source_files: Dict[str, None] = {}
        for folder in workspace_folders:
            logger.info("📂 Processing workspace: %s", folder.name)
            try:
                workspace_source_files.update(dict.fromkeys(self.discover(uri_to_path(folder.uri))))
            except Exception as e:
                logger.error(f"❌ Error processing {folder.name}: {e}")
        logger.info("✅ Found %d source files", len(workspace_source_files))
        return list(workspace_source_files)
