import logging
import os
from typing import List, Sequence

from project_context.errors import ConfigurationError
from project_context.models import WorkspaceFolder
from project_context.utils.fs import uri_to_path

logger = logging.getLogger(__name__)


def find_common_workspace_root(workspace_folders: Sequence[WorkspaceFolder]) -> str:
    """
    Compute the single directory that scopes indexing for a set of workspace folders.

    Args:
        workspace_folders: Folders declared by the client, in declaration order

    Returns:
        The deepest directory shared by every folder. When the folders share
        nothing below the filesystem root, the first folder's path is returned.

    Raises:
        ConfigurationError: If no workspace folders are given
    """
    if not workspace_folders:
        raise ConfigurationError("No workspace folders provided")
    if len(workspace_folders) == 1:
        return uri_to_path(workspace_folders[0].uri)

    paths = [uri_to_path(folder.uri) for folder in workspace_folders]
    split_paths: List[List[str]] = [[s for s in p.split(os.sep) if s] for p in paths]
    min_length = min(len(p) for p in split_paths)

    shared = 0
    for i in range(min_length):
        segment = split_paths[0][i]
        if all(p[i] == segment for p in split_paths):
            shared = i + 1
        else:
            break

    if shared == 0:
        logger.debug("No common root for %s; falling back to %s", paths, paths[0])
        return paths[0]
    return os.sep + os.sep.join(split_paths[0][:shared])
