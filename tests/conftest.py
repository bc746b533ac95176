"""Shared fixtures: a memory-backed repository over a temp directory."""

import pytest

from kvlet import init


@pytest.fixture
def repo(tmp_path):
    return init(tmp_path, storage="memory")


@pytest.fixture
def write(tmp_path):
    def _write(name: str, text: str) -> None:
        (tmp_path / name).write_text(text)

    return _write


@pytest.fixture
def read(tmp_path):
    def _read(name: str) -> str:
        return (tmp_path / name).read_text()

    return _read
