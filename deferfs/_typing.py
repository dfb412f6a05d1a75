import enum
import os
import stat
from typing import Literal

ReadType = Literal["text", "json", "bytes", "stream", "file"]

READ_TYPES: tuple[str, ...] = ("text", "json", "bytes", "stream", "file")


class EntryKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "EntryKind":
        """Classify an ``lstat`` result. Symbolic links are ``OTHER``."""
        if stat.S_ISREG(st.st_mode):
            return cls.FILE
        if stat.S_ISDIR(st.st_mode):
            return cls.DIRECTORY
        return cls.OTHER
