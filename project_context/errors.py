"""Error taxonomy for the project context core.

None of these reach the transport boundary: the core logs them and degrades
to a no-op or an empty result. The one exception is ``ConfigurationError``
raised by :func:`find_common_workspace_root` when called directly.
"""


class ProjectContextError(Exception):
    """Base class for all project context errors."""


class ConfigurationError(ProjectContextError):
    """The workspace configuration cannot produce a workspace root."""


class EngineStartError(ProjectContextError):
    """The indexing engine failed to load or start."""


class EngineCallError(ProjectContextError):
    """An indexing engine call (build, update, query, clear) failed."""


class FilesystemReadError(ProjectContextError):
    """A directory could not be read during source discovery."""
