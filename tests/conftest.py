from __future__ import annotations

import pytest

from project_context.models import WorkspaceFolder
from project_context.utils.settings import Settings


class FakeEngine:
    """Records every engine call; optionally fails a named call."""

    def __init__(self, fail_on: set | None = None, chunks=None, contexts=None):
        self.calls: list[tuple] = []
        self.fail_on = fail_on or set()
        self.chunks = chunks if chunks is not None else [{"content": "class A {}"}]
        self.contexts = contexts if contexts is not None else [{"content": "void b() {}"}]

    def _record(self, name: str, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise RuntimeError(f"{name} exploded")

    async def build_index(self, files, root, scope):
        self._record("build_index", list(files), root, scope)

    async def update_index_v2(self, files, mode):
        self._record("update_index_v2", list(files), mode)

    async def query_vector_index(self, query):
        self._record("query_vector_index", query)
        return self.chunks

    async def query_inline_project_context(self, query, file_path, target):
        self._record("query_inline_project_context", query, file_path, target)
        return self.contexts

    async def clear(self):
        self._record("clear")

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakeEngineFactory:
    def __init__(self, engine: FakeEngine | None = None, error: Exception | None = None):
        self.engine = engine or FakeEngine()
        self.error = error
        self.starts: list[tuple] = []

    async def __call__(self, library_dir, client_name, root):
        self.starts.append((library_dir, client_name, root))
        if self.error is not None:
            raise self.error
        return self.engine


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(file_extensions=(".java",), library_dir=str(tmp_path / "indexing"))


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def engine_factory(fake_engine) -> FakeEngineFactory:
    return FakeEngineFactory(fake_engine)


@pytest.fixture
def java_workspace(tmp_path):
    """A workspace with two java files, one text file and a nested package."""
    root = tmp_path / "repo"
    (root / "sub").mkdir(parents=True)
    (root / "a.java").write_text("class A {}")
    (root / "b.txt").write_text("notes")
    (root / "sub" / "c.java").write_text("class C {}")
    return root


def folder_for(path) -> WorkspaceFolder:
    return WorkspaceFolder(uri=f"file://{path}", name=path.name)


@pytest.fixture
def make_folder():
    return folder_for


@pytest.fixture
def make_engine():
    return FakeEngine


@pytest.fixture
def make_engine_factory():
    return FakeEngineFactory
