"""pytest fixture plugin.

Usage::

    # conftest.py
    pytest_plugins = ["deferfs._pytest_plugin"]

This makes the ``files`` fixture automatically available::

    async def test_something(files):
        await files.write("notes/a.md", "hello")
"""

import pytest

from ._files import Files


@pytest.fixture
def files(tmp_path) -> Files:
    """A :class:`Files` whose cwd, home and temp directories live under ``tmp_path``.

    Provides an independent instance per test (function scope).
    """
    return Files(cwd=tmp_path, home=tmp_path / "home", tmp=tmp_path / "tmp")
