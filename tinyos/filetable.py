"""The system-wide table of open file descriptions."""

from __future__ import annotations

import errno
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, List

FILE_TABLE_SIZE = 2048
FILE_NAME_SIZE = 32


class FileType(IntEnum):
    UNKNOWN = 0
    TTY = 1
    NORMAL = 2
    DIR = 3


@dataclass(eq=False)
class OpenFile:
    """One open file description, shared by every descriptor that refers to it."""

    file_name: str = ""
    type: FileType = FileType.UNKNOWN
    size: int = 0
    ref: int = 0
    dev_id: int = 0
    pos: int = 0
    sblk: int = 0
    cblk: int = 0
    p_index: int = 0
    mode: int = 0
    fs: Any = None


class FileTable:
    """A fixed pool of open file descriptions with reference counts."""

    def __init__(self, size: int = FILE_TABLE_SIZE) -> None:
        if size < 1:
            raise ValueError(f"table size must be positive: {size}")
        self._lock = threading.Lock()
        self._slots: List[OpenFile] = [OpenFile() for _ in range(size)]

    def alloc(self) -> OpenFile:
        """Take a free slot, reset it and give it one reference.

        Raises OSError(ENFILE) when every slot is in use.
        """
        with self._lock:
            for index, slot in enumerate(self._slots):
                if slot.ref == 0:
                    fresh = OpenFile(ref=1)
                    self._slots[index] = fresh
                    return fresh
        raise OSError(errno.ENFILE, "file table is full")

    def free(self, file: OpenFile) -> None:
        """Drop one reference, never going below zero."""
        with self._lock:
            if file.ref:
                file.ref -= 1

    def inc_ref(self, file: OpenFile) -> None:
        """Add one reference."""
        with self._lock:
            file.ref += 1