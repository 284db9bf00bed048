"""
Core API for the project context index.

This package provides an interface-agnostic API that can be driven by the
HTTP server, the CLI, or any other transport.
"""
from .controller import ProjectContextController
from .session import ProjectContextSession

__all__ = ["ProjectContextController", "ProjectContextSession"]
