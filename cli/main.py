"""
CLI Application Logic

Provides an interactive command-line interface over a project context session.
"""
import logging
import os
from typing import List, Optional, Sequence

from project_context import ProjectContextSession
from project_context.models import (
    EngineFactory,
    QueryInlineProjectContextParams,
    QueryVectorIndexParams,
    WorkspaceFolder,
)
from project_context.utils.fs import path_to_uri

logger = logging.getLogger(__name__)


def workspace_folders_from_paths(paths: Sequence[str]) -> List[WorkspaceFolder]:
    folders = []
    for p in paths:
        absolute = os.path.abspath(p)
        folders.append(WorkspaceFolder(uri=path_to_uri(absolute), name=os.path.basename(absolute) or absolute))
    return folders


async def interactive_session(session: ProjectContextSession) -> None:
    """
    Run an interactive query loop against an initialized session.

    Args:
        session: Session whose engine has been started
    """
    logger.info("\n%s", "=" * 70)
    logger.info("💬 INTERACTIVE PROJECT CONTEXT")
    logger.info("%s", "=" * 70)

    while True:
        try:
            step = input("🔄 Step (🔍 query, 📎 inline, 🔁 reindex, 👋 exit): ").strip().lower()

            if step == "query":
                user_input = input("\n🤔 Query: ").strip()
                if not user_input:
                    continue
                result = await session.query_vector_index(QueryVectorIndexParams(query=user_input))
                logger.info("\n💡 %d chunks", len(result.chunks))
                for chunk in result.chunks:
                    logger.info("📄 %s", chunk)
                continue

            if step == "inline":
                file_path = input("📄 File path: ").strip()
                user_input = input("🤔 Code around cursor: ").strip()
                if not user_input:
                    continue
                result = await session.query_inline_project_context(
                    QueryInlineProjectContextParams(query=user_input, file_path=file_path)
                )
                logger.info("\n📎 %d context snippets", len(result.inline_project_context))
                for context in result.inline_project_context:
                    logger.info("📄 %s", context)
                continue

            if step == "reindex":
                await session.on_configuration_changed()
                continue

            if step == 'exit':
                logger.info("\n👋 Goodbye!")
                break

            logger.warning("❓ Unknown command: %s", step)
        except (KeyboardInterrupt, EOFError):
            logger.info("\n👋 Goodbye!")
            break
        except Exception as e:
            logger.exception("❌ Error during step: %s", e)


async def run_cli(
    paths: Optional[Sequence[str]] = None,
    client_name: str = "project-context-cli",
    engine_factory: Optional[EngineFactory] = None,
    interactive: bool = True
) -> ProjectContextSession:
    """
    Run the CLI application.

    Args:
        paths: Workspace folders to index (defaults to the current directory)
        client_name: Client name reported to the engine
        engine_factory: Engine factory override (defaults to the configured engine module)
        interactive: Whether to start the interactive loop

    Returns:
        The session, with its engine disposed
    """
    logger.info("=" * 70)
    logger.info("🚀 PROJECT CONTEXT CLI")
    logger.info("=" * 70)

    session = ProjectContextSession(engine_factory=engine_factory)
    session.on_initialize(client_name, workspace_folders_from_paths(paths or [os.getcwd()]))

    logger.info("⚙️  Initializing engine...")
    await session.on_initialized()

    try:
        if interactive:
            await interactive_session(session)
    finally:
        await session.dispose()

    return session


async def main(argv: Optional[Sequence[str]] = None) -> None:
    """Default CLI entry point: workspace folders come from the command line."""
    await run_cli(paths=list(argv or []), interactive=True)
