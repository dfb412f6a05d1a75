import pytest

from deferfs._pytest_plugin import files  # noqa: F401
from tests.helpers.tree import DEMO_TREE, build_tree


@pytest.fixture
def demo(tmp_path):
    """The demo tree under ``tmp_path / "demo"``; returns the set of file paths."""
    return build_tree(tmp_path / "demo", DEMO_TREE)
