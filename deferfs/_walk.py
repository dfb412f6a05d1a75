"""Tree walk strategies.

Both strategies report every regular file below a directory as an absolute
path. Symbolic links below the root are neither followed nor reported; a
symlinked root is followed.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import sys
from abc import ABC, abstractmethod

from ._exceptions import NativeWalkError


class WalkStrategy(ABC):
    """Enumerates the regular files under a directory."""

    name: str = "abstract"

    @abstractmethod
    def available(self) -> bool: ...

    @abstractmethod
    async def walk(self, root: str) -> list[str]: ...


class FindWalk(WalkStrategy):
    """One ``find`` process for the whole subtree (Linux and macOS)."""

    name = "find"
    PLATFORMS: tuple[str, ...] = ("linux", "darwin")

    def __init__(self, executable: str = "find") -> None:
        self._executable = executable

    def available(self) -> bool:
        if not sys.platform.startswith(self.PLATFORMS):
            return False
        return shutil.which(self._executable) is not None

    async def walk(self, root: str) -> list[str]:
        proc = await asyncio.create_subprocess_exec(
            self._executable,
            "-H",
            root,
            "-type",
            "f",
            "-print0",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            reason = stderr.decode(errors="replace").strip() or "non-zero exit status"
            raise NativeWalkError(root, reason, proc.returncode)
        return self._parse(root, stdout)

    @staticmethod
    def _parse(root: str, output: bytes) -> list[str]:
        prefix = root.rstrip(os.sep) + os.sep
        paths: list[str] = []
        for raw in output.split(b"\0"):
            if not raw:
                continue
            path = os.fsdecode(raw)
            if not path.startswith(prefix):
                raise NativeWalkError(root, f"unexpected entry in output: {path!r}")
            paths.append(path)
        return paths


class DescentWalk(WalkStrategy):
    """Portable recursive descent: one ``scandir`` per directory."""

    name = "descent"

    def available(self) -> bool:
        return True

    async def walk(self, root: str) -> list[str]:
        files, subdirs = await asyncio.to_thread(self._scan, root)
        nested = await asyncio.gather(*(self.walk(d) for d in subdirs))
        for chunk in nested:
            files.extend(chunk)
        return files

    @staticmethod
    def _scan(directory: str) -> tuple[list[str], list[str]]:
        files: list[str] = []
        subdirs: list[str] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(entry.path)
                elif entry.is_file(follow_symlinks=False):
                    files.append(entry.path)
        return files, subdirs
