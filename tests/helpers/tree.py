import os
from pathlib import Path

DEMO_TREE: dict[str, str] = {
    "readme.md": "# Hello!\n",
    "test.json": '{"hello":"world"}',
    "a/readme.md": "# Hello!",
    "a/b/readme.md": "# Sub-sub-level\n",
    "a/b/notes.txt": "not markdown",
}


def build_tree(root: str | os.PathLike[str], files: dict[str, str | bytes]) -> set[str]:
    """Create *files* under *root* and return their absolute paths."""
    created: set[str] = set()
    for rel, content in files.items():
        path = Path(root, rel)
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        created.add(str(path))
    return created
