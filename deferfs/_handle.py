"""Async wrapper around a real binary file object.

All I/O is delegated to :func:`asyncio.to_thread`, so the event loop is never
blocked by the underlying file.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import BinaryIO

CHUNK_SIZE = 64 * 1024


class AsyncFileHandle:
    """Async wrapper for a single open binary file."""

    def __init__(self, _sync_handle: BinaryIO) -> None:
        self._h = _sync_handle

    @classmethod
    async def open(cls, path: str, mode: str = "rb") -> AsyncFileHandle:
        if "b" not in mode:
            raise ValueError(f"Invalid mode '{mode}'. Only binary modes are supported.")
        h = await asyncio.to_thread(open, path, mode)
        return cls(h)

    @property
    def name(self) -> str:
        return self._h.name

    @property
    def closed(self) -> bool:
        return self._h.closed

    async def read(self, size: int = -1) -> bytes:
        return await asyncio.to_thread(self._h.read, size)

    async def write(self, data: bytes) -> int:
        return await asyncio.to_thread(self._h.write, data)

    async def seek(self, offset: int, whence: int = 0) -> int:
        return await asyncio.to_thread(self._h.seek, offset, whence)

    async def tell(self) -> int:
        return await asyncio.to_thread(self._h.tell)

    async def flush(self) -> None:
        await asyncio.to_thread(self._h.flush)

    async def close(self) -> None:
        await asyncio.to_thread(self._h.close)

    async def chunks(self, size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        while True:
            chunk = await self.read(size)
            if not chunk:
                return
            yield chunk

    async def __aenter__(self) -> AsyncFileHandle:
        return self

    async def __aexit__(self, *args) -> None:  # type: ignore[no-untyped-def]
        await self.close()


async def stream_file(path: str, size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Yield the contents of *path* in chunks, closing the file when done."""
    async with await AsyncFileHandle.open(path, "rb") as handle:
        async for chunk in handle.chunks(size):
            yield chunk
