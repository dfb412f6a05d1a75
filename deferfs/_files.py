from __future__ import annotations

import asyncio
import errno
import json
import logging
import os
import shutil
import tempfile
from collections.abc import AsyncIterable, Callable
from functools import partial
from typing import Any

from . import _path
from ._deferred import Deferred, settle
from ._exceptions import UnsafeOperationError
from ._handle import CHUNK_SIZE, AsyncFileHandle, stream_file
from ._typing import READ_TYPES, EntryKind, ReadType
from ._walk import DescentWalk, FindWalk, WalkStrategy

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
#  Content normalization
# ---------------------------------------------------------------------------


def _encode_chunk(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    raise TypeError(f"Stream chunks must be str or bytes, not {type(chunk).__name__!r}")


def _encode(body: Any) -> bytes:
    if isinstance(body, (str, bytes, bytearray, memoryview)):
        return _encode_chunk(body)
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


def _write_bytes(file: str, data: bytes) -> None:
    with open(file, "wb") as f:
        f.write(data)


def _write_stream(file: str, stream: Any) -> None:
    with open(file, "wb") as f:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            f.write(_encode_chunk(chunk))


def _read_bytes(file: str) -> bytes:
    with open(file, "rb") as f:
        return f.read()


# ---------------------------------------------------------------------------
#  Files
# ---------------------------------------------------------------------------


class Files:
    """Filesystem operations that take deferred inputs and return
    :class:`Deferred` results.

    Process-wide defaults are constructor arguments so a test can point the
    whole instance at a scratch directory:

    cwd:
        Base for relative paths. ``None`` reads ``os.getcwd()`` on each call.
    home:
        Target of ``~`` and base of :meth:`home`. ``None`` means the user's
        home directory.
    tmp:
        Base of :meth:`tmp`. ``None`` means :func:`tempfile.gettempdir`.
    native_walk:
        Try ``find`` before the portable walk where it is available.
    walkers:
        Explicit ``(native, portable)`` strategy pair; overrides *native_walk*.
    """

    def __init__(
        self,
        cwd: str | os.PathLike[str] | None = None,
        home: str | os.PathLike[str] | None = None,
        tmp: str | os.PathLike[str] | None = None,
        native_walk: bool = True,
        walkers: tuple[WalkStrategy | None, WalkStrategy] | None = None,
    ) -> None:
        self._cwd: str | None = os.path.abspath(cwd) if cwd is not None else None
        self._home: str | None = os.path.abspath(home) if home is not None else None
        self._tmp: str | None = os.path.abspath(tmp) if tmp is not None else None
        if walkers is None:
            walkers = (FindWalk() if native_walk else None, DescentWalk())
        self._native: WalkStrategy | None = walkers[0]
        self._portable: WalkStrategy = walkers[1]

    # -- configuration --

    @property
    def cwd(self) -> str:
        return self._cwd if self._cwd is not None else os.getcwd()

    @property
    def home_dir(self) -> str:
        return self._home if self._home is not None else os.path.expanduser("~")

    @property
    def temp_dir(self) -> str:
        return self._tmp if self._tmp is not None else tempfile.gettempdir()

    def _defer(self, fn: Callable[..., Any], *args: Any) -> Deferred[Any]:
        return Deferred(partial(fn, *args)).begin()

    # -- path helpers --

    async def _abs(self, name: Any = None, base: Any = None) -> str:
        name = await settle(name)
        base = await settle(base)
        name = "." if name is None else os.fspath(name)
        if isinstance(base, os.PathLike):
            base = os.fspath(base)
        return _path.absolute(name, base, self.cwd, self.home_dir)

    async def _join(self, *parts: Any) -> str:
        resolved = [os.fspath(p) for p in await asyncio.gather(*map(settle, parts))]
        if not resolved:
            return await self._abs()
        return await self._abs(os.path.join(*resolved))

    async def _stat(self, name: Any) -> os.stat_result | None:
        file = await self._abs(name)
        try:
            return await asyncio.to_thread(os.lstat, file)
        except (FileNotFoundError, NotADirectoryError):
            return None

    # -- public API --

    def abs(self, name: Any = None, base: Any = None) -> Deferred[str]:
        return self._defer(self._abs, name, base)

    def join(self, *parts: Any) -> Deferred[str]:
        return self._defer(self._join, *parts)

    def name(self, path: Any) -> Deferred[str]:
        async def run() -> str:
            return _path.basename(os.fspath(await settle(path)))

        return self._defer(run)

    def dir(self, path: Any = None) -> Deferred[str]:
        async def run() -> str:
            return _path.parent(await self._abs(path))

        return self._defer(run)

    def exists(self, path: Any) -> Deferred[bool]:
        async def run() -> bool:
            return await asyncio.to_thread(os.path.exists, await self._abs(path))

        return self._defer(run)

    def stat(self, path: Any) -> Deferred[os.stat_result | None]:
        """``lstat`` of *path*, or ``None`` if it does not exist."""
        return self._defer(self._stat, path)

    def kind(self, path: Any) -> Deferred[EntryKind | None]:
        async def run() -> EntryKind | None:
            st = await self._stat(path)
            return None if st is None else EntryKind.from_stat(st)

        return self._defer(run)

    def list(self, directory: Any = None) -> Deferred[list[str]]:
        """Absolute paths of the immediate children of *directory*, sorted."""
        return self._defer(self._list, directory)

    ls = list

    async def _list(self, directory: Any) -> list[str]:
        folder = await self._abs(directory)
        names = await asyncio.to_thread(os.listdir, folder)
        return [os.path.join(folder, n) for n in sorted(names)]

    def walk(self, directory: Any = None) -> Deferred[list[str]]:
        """Absolute paths of every regular file below *directory*.

        A missing directory (or a path that is not a directory) yields ``[]``.
        Result order depends on the strategy used.
        """
        return self._defer(self._walk, directory)

    async def _walk(self, directory: Any) -> list[str]:
        root = os.path.normpath(await self._abs(directory))
        if not await asyncio.to_thread(os.path.isdir, root):
            return []
        native = self._native
        if native is not None and native.available():
            try:
                return await native.walk(root)
            except Exception as exc:
                logger.debug(
                    "Native walk (%s) of %s failed, using %s: %s",
                    native.name, root, self._portable.name, exc,
                )
        return await self._portable.walk(root)

    def mkdir(self, directory: Any = None) -> Deferred[str]:
        """Create *directory* and any missing ancestors. Idempotent."""
        return self._defer(self._mkdir, directory)

    async def _mkdir(self, directory: Any) -> str:
        folder = await self._abs(directory)
        for prefix in _path.ancestors(folder):
            if await asyncio.to_thread(os.path.exists, prefix):
                continue
            try:
                await asyncio.to_thread(os.mkdir, prefix)
                logger.debug("Created directory %s", prefix)
            except FileExistsError:
                pass
        if not await asyncio.to_thread(os.path.isdir, folder):
            raise FileExistsError(errno.EEXIST, "Exists and is not a directory", folder)
        return folder

    def remove(self, path: Any = None) -> Deferred[str]:
        """Delete a file or a whole tree. Missing paths are a no-op.

        Raises :class:`UnsafeOperationError` for the filesystem root.
        """
        return self._defer(self._remove, path)

    async def _remove(self, path: Any) -> str:
        file = await self._abs(path)
        target = os.path.normpath(_path.strip_trailing(file))
        if _path.is_root(target):
            raise UnsafeOperationError("remove", target)
        st = await self._stat(target)
        if st is None:
            return file
        if EntryKind.from_stat(st) is EntryKind.DIRECTORY:
            try:
                await self.list(target).map(self.remove)
                await asyncio.to_thread(os.rmdir, target)
            except FileNotFoundError:
                pass
        else:
            try:
                await asyncio.to_thread(os.unlink, target)
            except FileNotFoundError:
                pass
        logger.debug("Removed %s", target)
        return file

    def move(self, src: Any, dst: Any) -> Deferred[str]:
        """Rename *src* to *dst*, replacing an existing file, copying then
        removing across devices."""
        return self._defer(self._move, src, dst)

    rename = move

    async def _move(self, src: Any, dst: Any) -> str:
        source, target = await asyncio.gather(self._abs(src), self._abs(dst))
        await self._mkdir(_path.parent(target))
        try:
            await asyncio.to_thread(os.replace, source, target)
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise
            logger.debug("Cross-device move %s -> %s, copying instead", source, target)
            await self._copy(source, target)
            await self._remove(source)
        return target

    def copy(self, src: Any, dst: Any) -> Deferred[str]:
        """Copy a file or a directory tree, creating *dst*'s parents."""
        return self._defer(self._copy, src, dst)

    async def _copy(self, src: Any, dst: Any) -> str:
        source, target = await asyncio.gather(self._abs(src), self._abs(dst))
        st = await self._stat(source)
        if st is None:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), source)
        await self._mkdir(_path.parent(target))
        if EntryKind.from_stat(st) is EntryKind.DIRECTORY:
            await asyncio.to_thread(
                shutil.copytree, source, target, symlinks=True, dirs_exist_ok=True
            )
        else:
            await asyncio.to_thread(shutil.copy2, source, target, follow_symlinks=False)
        return target

    def write(self, path: Any, body: Any = "") -> Deferred[str]:
        """Write *body* to *path*, creating parent directories.

        *body* may be text, bytes, a JSON-serializable value, a file-like
        object with ``read()``, an async iterable of chunks, or an awaitable
        of any of those.
        """
        return self._defer(self._write, path, body)

    async def _write(self, path: Any, body: Any) -> str:
        file, body = await asyncio.gather(self._abs(path), settle(body))
        await self._mkdir(_path.parent(file))
        if isinstance(body, AsyncIterable):
            async with await AsyncFileHandle.open(file, "wb") as handle:
                async for chunk in body:
                    await handle.write(_encode_chunk(chunk))
        elif callable(getattr(body, "read", None)):
            await asyncio.to_thread(_write_stream, file, body)
        else:
            await asyncio.to_thread(_write_bytes, file, _encode(body))
        return file

    def read(self, path: Any, type: ReadType = "text") -> Deferred[Any]:
        """Read *path* as ``text``, ``json``, ``bytes``, a ``stream`` of byte
        chunks, or an open async ``file`` handle.

        Resolves to ``None`` when *path* is not a regular file.
        """
        return self._defer(self._read, path, type)

    async def _read(self, path: Any, type: str) -> Any:
        if type not in READ_TYPES:
            raise ValueError(
                f"Invalid read type '{type}'. Expected one of {READ_TYPES}."
            )
        file = await self._abs(path)
        if not await asyncio.to_thread(os.path.isfile, file):
            return None
        if type == "stream":
            return stream_file(file)
        if type == "file":
            return await AsyncFileHandle.open(file, "rb")
        data = await asyncio.to_thread(_read_bytes, file)
        if type == "bytes":
            return data
        text = data.decode("utf-8")
        if type == "json":
            return json.loads(text)
        return text

    def home(self, *parts: Any) -> Deferred[str]:
        """Path under the home directory, created if missing."""

        async def run() -> str:
            return await self._mkdir(await self._join(self.home_dir, *parts))

        return self._defer(run)

    def tmp(self, *parts: Any) -> Deferred[str]:
        """Path under the temp directory, created if missing."""

        async def run() -> str:
            return await self._mkdir(await self._join(self.temp_dir, *parts))

        return self._defer(run)
