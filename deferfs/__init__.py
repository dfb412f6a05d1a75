import logging
import os

from ._deferred import Deferred, deferred, settle
from ._exceptions import NativeWalkError, UnsafeOperationError
from ._files import Files
from ._handle import AsyncFileHandle
from ._typing import EntryKind, ReadType
from ._walk import DescentWalk, FindWalk, WalkStrategy

logging.getLogger(__name__).addHandler(logging.NullHandler())

sep = os.sep

# Module-level operations are bound to one process-wide instance.
_default = Files()

abs = _default.abs
copy = _default.copy
dir = _default.dir
exists = _default.exists
home = _default.home
join = _default.join
kind = _default.kind
list = _default.list
ls = _default.ls
mkdir = _default.mkdir
move = _default.move
name = _default.name
read = _default.read
remove = _default.remove
rename = _default.rename
stat = _default.stat
tmp = _default.tmp
walk = _default.walk
write = _default.write

__all__ = [
    "Files",
    "Deferred",
    "deferred",
    "settle",
    "AsyncFileHandle",
    "EntryKind",
    "ReadType",
    "WalkStrategy",
    "FindWalk",
    "DescentWalk",
    "UnsafeOperationError",
    "NativeWalkError",
    "sep",
    "abs",
    "copy",
    "dir",
    "exists",
    "home",
    "join",
    "kind",
    "list",
    "ls",
    "mkdir",
    "move",
    "name",
    "read",
    "remove",
    "rename",
    "stat",
    "tmp",
    "walk",
    "write",
]
__version__ = "0.1.0"
