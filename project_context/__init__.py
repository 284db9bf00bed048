"""
Project Context - workspace index orchestration

This is a pure library module with NO CLI or server code.
Import this in your CLI, server, or any other application.

Usage:
    from project_context import ProjectContextSession

    # every handler except on_initialize() is async
    session.on_initialize("my-ide", folders); await session.on_initialized()
"""

from project_context.api import ProjectContextController, ProjectContextSession

__all__ = ["ProjectContextController", "ProjectContextSession"]
