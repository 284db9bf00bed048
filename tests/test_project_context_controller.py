import asyncio

import pytest

from project_context.api import ProjectContextController
from project_context.engine import Disposed, EngineLifecycleManager, NotStarted, Ready, Unavailable
from project_context.errors import ConfigurationError, EngineStartError
from project_context.models import (
    QueryInlineProjectContextParams,
    QueryVectorIndexParams,
    UpdateMode,
)
from project_context.utils.settings import Settings


def _controller(settings, folders, factory) -> ProjectContextController:
    return ProjectContextController("test-ide", folders, engine_factory=factory, settings=settings)


def _inline_params() -> QueryInlineProjectContextParams:
    return QueryInlineProjectContextParams(query="x", file_path="/a.java", target="default")


@pytest.mark.asyncio
async def test_queries_are_empty_before_init(settings, make_folder, java_workspace, engine_factory):
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)

    vector = await controller.query_vector_index(QueryVectorIndexParams(query="anything"))
    inline = await controller.query_inline_project_context(_inline_params())

    assert vector.chunks == []
    assert inline.inline_project_context == []
    assert isinstance(controller.lifecycle.state, NotStarted)
    assert engine_factory.starts == []


@pytest.mark.asyncio
async def test_update_index_is_noop_without_engine(settings, make_folder, java_workspace, engine_factory):
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)

    await controller.update_index(["/a.java"], UpdateMode.ADD)

    assert engine_factory.engine.calls == []


@pytest.mark.asyncio
async def test_init_starts_engine_and_builds_full_index(settings, make_folder, java_workspace, engine_factory):
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)

    await controller.init()

    assert isinstance(controller.lifecycle.state, Ready)
    assert controller.engine_state == "ready"
    assert engine_factory.starts == [(settings.library_dir, "test-ide", str(java_workspace))]
    (name, files, root, scope), = engine_factory.engine.calls
    assert name == "build_index"
    assert set(files) == {str(java_workspace / "a.java"), str(java_workspace / "sub" / "c.java")}
    assert root == str(java_workspace)
    assert scope == "all"


@pytest.mark.asyncio
async def test_init_start_failure_degrades_to_unavailable(
    settings, make_folder, java_workspace, make_engine_factory
):
    factory = make_engine_factory(error=RuntimeError("no native library"))
    controller = _controller(settings, [make_folder(java_workspace)], factory)

    await controller.init()

    assert isinstance(controller.lifecycle.state, Unavailable)
    assert isinstance(controller.lifecycle.state.error, EngineStartError)
    assert factory.engine.calls == []
    result = await controller.query_vector_index(QueryVectorIndexParams(query="q"))
    assert result.chunks == []


@pytest.mark.asyncio
async def test_init_without_folders_never_starts_engine(settings, engine_factory):
    controller = _controller(settings, [], engine_factory)

    await controller.init()

    assert engine_factory.starts == []
    assert isinstance(controller.lifecycle.state, Unavailable)
    assert isinstance(controller.lifecycle.state.error, ConfigurationError)
    assert controller.workspace_root is None


@pytest.mark.asyncio
async def test_engine_is_started_at_most_once(settings, make_folder, java_workspace, engine_factory):
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)

    await controller.init()
    await controller.init()

    assert len(engine_factory.starts) == 1


@pytest.mark.asyncio
async def test_build_failure_is_swallowed(
    settings, make_folder, java_workspace, make_engine, make_engine_factory
):
    factory = make_engine_factory(make_engine(fail_on={"build_index"}))
    controller = _controller(settings, [make_folder(java_workspace)], factory)

    await controller.init()
    await controller.update_configuration()

    assert factory.engine.names() == ["build_index", "build_index"]
    assert controller.lifecycle.is_ready()


@pytest.mark.asyncio
async def test_update_configuration_uses_configured_extensions(
    tmp_path, make_folder, java_workspace, engine_factory
):
    settings = Settings(file_extensions=(".txt",), library_dir=str(tmp_path / "lib"))
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)

    await controller.init()

    _, files, _, _ = engine_factory.engine.calls[0]
    assert files == [str(java_workspace / "b.txt")]


@pytest.mark.asyncio
async def test_update_index_forwards_batch_and_mode(settings, make_folder, java_workspace, engine_factory):
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)
    await controller.init()

    await controller.update_index(["/repo/A.java", "/repo/B.java"], UpdateMode.UPDATE)
    await controller.update_index(["/repo/C.java"], "remove")

    assert engine_factory.engine.calls[1:] == [
        ("update_index_v2", ["/repo/A.java", "/repo/B.java"], "update"),
        ("update_index_v2", ["/repo/C.java"], "remove"),
    ]


@pytest.mark.asyncio
async def test_update_failure_is_swallowed(
    settings, make_folder, java_workspace, make_engine, make_engine_factory
):
    factory = make_engine_factory(make_engine(fail_on={"update_index_v2"}))
    controller = _controller(settings, [make_folder(java_workspace)], factory)
    await controller.init()

    await controller.update_index(["/repo/A.java"], UpdateMode.ADD)

    assert factory.engine.names()[-1] == "update_index_v2"


@pytest.mark.asyncio
async def test_unknown_update_mode_is_ignored(settings, make_folder, java_workspace, engine_factory):
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)
    await controller.init()

    await controller.update_index(["/repo/A.java"], "rename")

    assert engine_factory.engine.names() == ["build_index"]


@pytest.mark.asyncio
async def test_queries_forward_verbatim_when_ready(settings, make_folder, java_workspace, engine_factory):
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)
    await controller.init()

    vector = await controller.query_vector_index(QueryVectorIndexParams(query="auth flow"))
    inline = await controller.query_inline_project_context(_inline_params())

    assert vector.chunks == [{"content": "class A {}"}]
    assert inline.inline_project_context == [{"content": "void b() {}"}]
    assert engine_factory.engine.calls[1:] == [
        ("query_vector_index", "auth flow"),
        ("query_inline_project_context", "x", "/a.java", "default"),
    ]


@pytest.mark.asyncio
async def test_query_failures_return_empty(
    settings, make_folder, java_workspace, make_engine, make_engine_factory
):
    engine = make_engine(fail_on={"query_vector_index", "query_inline_project_context"})
    controller = _controller(settings, [make_folder(java_workspace)], make_engine_factory(engine))
    await controller.init()

    vector = await controller.query_vector_index(QueryVectorIndexParams(query="q"))
    inline = await controller.query_inline_project_context(_inline_params())

    assert vector.chunks == []
    assert inline.inline_project_context == []


@pytest.mark.asyncio
async def test_none_engine_response_becomes_empty(
    settings, make_folder, java_workspace, make_engine, make_engine_factory
):
    engine = make_engine()
    engine.chunks = None
    engine.contexts = None
    controller = _controller(settings, [make_folder(java_workspace)], make_engine_factory(engine))
    await controller.init()

    assert (await controller.query_vector_index(QueryVectorIndexParams(query="q"))).chunks == []
    assert (await controller.query_inline_project_context(_inline_params())).inline_project_context == []


@pytest.mark.asyncio
async def test_dispose_clears_engine_and_queries_go_empty(
    settings, make_folder, java_workspace, engine_factory
):
    controller = _controller(settings, [make_folder(java_workspace)], engine_factory)
    await controller.init()
    assert (await controller.query_vector_index(QueryVectorIndexParams(query="q"))).chunks

    await controller.dispose()
    await controller.dispose()

    assert isinstance(controller.lifecycle.state, Disposed)
    assert engine_factory.engine.names().count("clear") == 1
    assert (await controller.query_vector_index(QueryVectorIndexParams(query="q"))).chunks == []
    await controller.update_index(["/a.java"], UpdateMode.ADD)
    assert "update_index_v2" not in engine_factory.engine.names()


@pytest.mark.asyncio
async def test_dispose_releases_handle_even_if_clear_fails(
    settings, make_folder, java_workspace, make_engine, make_engine_factory
):
    factory = make_engine_factory(make_engine(fail_on={"clear"}))
    controller = _controller(settings, [make_folder(java_workspace)], factory)
    await controller.init()

    await controller.dispose()

    assert controller.lifecycle.engine() is None


@pytest.mark.asyncio
async def test_dispose_racing_update_skips_engine_call(
    settings, make_folder, java_workspace, engine_factory
):
    ordered = Settings(
        file_extensions=settings.file_extensions, library_dir=settings.library_dir, ordered_updates=True
    )
    controller = _controller(ordered, [make_folder(java_workspace)], engine_factory)
    await controller.init()

    # Hold the ordering lock so the update suspends after its first readiness check
    await controller.dispatcher._lock.acquire()
    pending = asyncio.create_task(controller.update_index(["/a.java"], UpdateMode.ADD))
    await asyncio.sleep(0)
    await controller.dispose()
    controller.dispatcher._lock.release()
    await pending

    assert "update_index_v2" not in engine_factory.engine.names()


@pytest.mark.asyncio
async def test_ordered_updates_apply_in_arrival_order(tmp_path, make_folder, java_workspace, make_engine):
    class SlowFirstEngine(make_engine):
        async def update_index_v2(self, files, mode):
            if files == ["/first.java"]:
                await asyncio.sleep(0.05)
            await super().update_index_v2(files, mode)

    engine = SlowFirstEngine()

    async def factory(library_dir, client_name, root):
        return engine

    settings = Settings(library_dir=str(tmp_path / "lib"), ordered_updates=True)
    controller = _controller(settings, [make_folder(java_workspace)], factory)
    await controller.init()

    await asyncio.gather(
        controller.update_index(["/first.java"], UpdateMode.ADD),
        controller.update_index(["/second.java"], UpdateMode.ADD),
    )

    updates = [c[1] for c in engine.calls if c[0] == "update_index_v2"]
    assert updates == [["/first.java"], ["/second.java"]]


@pytest.mark.asyncio
async def test_dispose_while_starting_discards_late_engine(settings, make_engine):
    engine = make_engine()
    release = asyncio.Event()

    async def slow_factory(library_dir, client_name, root):
        await release.wait()
        return engine

    lifecycle = EngineLifecycleManager(slow_factory, library_dir=settings.library_dir)
    starting = asyncio.create_task(lifecycle.start("/repo", "test-ide"))
    await asyncio.sleep(0)

    await lifecycle.dispose()
    release.set()

    assert await starting is False
    assert isinstance(lifecycle.state, Disposed)
    assert lifecycle.engine() is None
    assert engine.names() == ["clear"]
