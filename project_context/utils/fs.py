from pathlib import Path
import logging

logger = logging.getLogger(__name__)

FILE_SCHEME = "file:"


def fin_root() -> str:
    """Return the root directory of the project."""
    return str(Path(__file__).parent.parent.parent.resolve())


def default_library_directory() -> str:
    """Return the default directory handed to the indexing engine on start."""
    return str(Path(fin_root()) / "data" / "indexing")


def uri_to_path(uri: str) -> str:
    """Strip the file scheme from a URI, leaving the path untouched.

    ``file:///a/b.java`` and ``file:/a/b.java`` both become ``/a/b.java``;
    a host such as ``file://server/share/b.java`` is dropped, giving
    ``/share/b.java``. No case folding, symlink resolution or percent-decoding
    is applied; the engine receives paths exactly as the client spelled them.
    """
    if uri.startswith("file://"):
        rest = uri[len("file://"):]
        if rest.startswith("/"):
            return rest
        slash = rest.find("/")
        return rest[slash:] if slash != -1 else "/"
    if uri.startswith(FILE_SCHEME):
        return uri[len(FILE_SCHEME):]
    return uri


def path_to_uri(path: str) -> str:
    return "file://" + path
