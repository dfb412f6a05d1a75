import os

_SEPARATORS = os.sep + (os.altsep or "")


def is_root(path: str) -> bool:
    return os.path.dirname(path) == path


def strip_trailing(path: str) -> str:
    if not path or is_root(path):
        return path
    stripped = path.rstrip(_SEPARATORS)
    return stripped or path[0]


def _split_home(name: str) -> str | None:
    """Return *name* without its ``~`` prefix, or None if it has none."""
    if name == "~":
        return ""
    if len(name) >= 2 and name[0] == "~" and name[1] in _SEPARATORS:
        return name[2:]
    return None


def absolute(name: str, base: object, cwd: str, home: str) -> str:
    """Join *name* onto *base* and normalize, leaving absolute names untouched.

    A ``~`` prefix swaps the base for *home*. A base that is not a usable
    path string falls back to *cwd*; a relative base is resolved against it.
    A trailing separator on a non-empty relative name survives normalization.
    """
    if os.path.isabs(name):
        return name
    rest = _split_home(name)
    if rest is not None:
        base, name = home, rest
    if not isinstance(base, str) or not base:
        base = cwd
    elif not os.path.isabs(base):
        base = os.path.join(cwd, base)
    joined = os.path.normpath(os.path.join(base, name))
    if name and name[-1] in _SEPARATORS and not joined.endswith(os.sep):
        joined += os.sep
    return joined


def basename(path: str) -> str:
    return os.path.basename(strip_trailing(path))


def parent(path: str) -> str:
    return os.path.dirname(strip_trailing(path))


def ancestors(path: str) -> list[str]:
    """Every prefix of an absolute *path*, root first, *path* last."""
    current = strip_trailing(path)
    chain = [current]
    while not is_root(current):
        current = os.path.dirname(current)
        chain.append(current)
    chain.reverse()
    return chain
