import os

import pytest

from deferfs import DescentWalk, FindWalk, NativeWalkError
from tests.helpers.tree import DEMO_TREE, build_tree

needs_find = pytest.mark.skipif(not FindWalk().available(), reason="find not available")
needs_symlinks = pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges")


# ------------------------------------------------------------------
# FindWalk output parsing
# ------------------------------------------------------------------


def test_find_parse_splits_on_nul():
    out = b"/r/a\0/r/b/c\0\0"
    assert FindWalk._parse("/r", out) == ["/r/a", "/r/b/c"]


def test_find_parse_empty_output():
    assert FindWalk._parse("/r", b"") == []


def test_find_parse_rejects_relative_entries():
    with pytest.raises(NativeWalkError, match="unexpected entry"):
        FindWalk._parse("/r", b"relative/path\0")


def test_find_parse_rejects_sibling_prefix():
    with pytest.raises(NativeWalkError):
        FindWalk._parse("/r", b"/rx/a\0")


def test_find_unavailable_without_executable():
    assert FindWalk("definitely-not-a-find-binary").available() is False


def test_descent_always_available():
    assert DescentWalk().available() is True


def test_native_walk_error_is_oserror():
    err = NativeWalkError("/r", "bad", 1)
    assert isinstance(err, OSError)
    assert err.returncode == 1
    assert "/r" in str(err)


# ------------------------------------------------------------------
# Walking real trees
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_descent_lists_regular_files_only(tmp_path):
    expected = build_tree(tmp_path, DEMO_TREE)
    (tmp_path / "empty" / "deeper").mkdir(parents=True)
    result = await DescentWalk().walk(str(tmp_path))
    assert set(result) == expected
    assert len(result) == len(expected)


@needs_find
@pytest.mark.asyncio
async def test_find_lists_regular_files_only(tmp_path):
    expected = build_tree(tmp_path, DEMO_TREE)
    (tmp_path / "empty").mkdir()
    result = await FindWalk().walk(str(tmp_path))
    assert set(result) == expected


@needs_find
@pytest.mark.asyncio
async def test_strategies_agree(tmp_path):
    tree = {f"d{i}/s{j}/f{k}.bin": b"x" for i in range(3) for j in range(3) for k in range(2)}
    tree["top.txt"] = "top"
    build_tree(tmp_path, tree)
    native = await FindWalk().walk(str(tmp_path))
    portable = await DescentWalk().walk(str(tmp_path))
    assert sorted(native) == sorted(portable)


@needs_find
@pytest.mark.asyncio
async def test_find_handles_trailing_separator(tmp_path):
    expected = build_tree(tmp_path, {"a/b.txt": "b"})
    result = await FindWalk().walk(str(tmp_path) + os.sep)
    assert set(result) == expected


@needs_find
@pytest.mark.asyncio
async def test_find_missing_root_raises(tmp_path):
    with pytest.raises(NativeWalkError) as info:
        await FindWalk().walk(str(tmp_path / "missing"))
    assert info.value.returncode != 0


@needs_find
@pytest.mark.asyncio
async def test_find_names_with_newlines(tmp_path):
    expected = build_tree(tmp_path, {"odd\nname.txt": "x"})
    assert set(await FindWalk().walk(str(tmp_path))) == expected


@needs_symlinks
@pytest.mark.asyncio
async def test_symlinks_are_not_followed(tmp_path):
    outside = tmp_path / "outside"
    build_tree(outside, {"secret.txt": "s"})
    root = tmp_path / "root"
    expected = build_tree(root, {"real.txt": "r"})
    os.symlink(outside, root / "dirlink")
    os.symlink(outside / "secret.txt", root / "filelink")

    portable = await DescentWalk().walk(str(root))
    assert set(portable) == expected
    if FindWalk().available():
        native = await FindWalk().walk(str(root))
        assert set(native) == expected


@needs_symlinks
@pytest.mark.asyncio
async def test_symlinked_root_is_followed(tmp_path):
    real = tmp_path / "real"
    build_tree(real, {"a.txt": "a", "sub/b.txt": "b"})
    link = tmp_path / "link"
    os.symlink(real, link)
    expected = {str(link / "a.txt"), str(link / "sub" / "b.txt")}

    assert set(await DescentWalk().walk(str(link))) == expected
    if FindWalk().available():
        assert set(await FindWalk().walk(str(link))) == expected


@pytest.mark.asyncio
async def test_descent_permission_failure_propagates(tmp_path, monkeypatch):
    build_tree(tmp_path, {"open/a.txt": "a", "locked/b.txt": "b"})
    original = DescentWalk._scan

    def scan(directory):
        if os.path.basename(directory) == "locked":
            raise PermissionError(13, "Permission denied", directory)
        return original(directory)

    monkeypatch.setattr(DescentWalk, "_scan", staticmethod(scan))
    with pytest.raises(PermissionError):
        await DescentWalk().walk(str(tmp_path))
