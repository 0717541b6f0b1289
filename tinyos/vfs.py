"""The virtual file system layer: mount points, per-task descriptors and dispatch to file systems."""

from __future__ import annotations

import errno
import os
import threading
from dataclasses import dataclass
from typing import Any, List, Optional

from tinyos.filetable import FILE_NAME_SIZE, FileTable, FileType, OpenFile
from tinyos.klib import strncmp

FS_TABLE_SIZE = 10
FS_MOUNTP_SIZE = 512
TASK_OFILE_NR = 128
ROOT_MOUNT_POINT = "/home"

O_ACCMODE = os.O_RDONLY | os.O_WRONLY | os.O_RDWR


class VfsError(OSError):
    """Raised for bad descriptors, exhausted tables and failed mounts."""


def path_to_num(path: str) -> int:
    """Read the decimal number at the start of ``path``, stopping at '/'."""
    n = 0
    for ch in path:
        if ch == "/":
            break
        n = n * 10 + ord(ch) - ord("0")
    return n


def path_begin_with(path: str, prefix: str) -> bool:
    """True if ``path`` starts with ``prefix``."""
    return path.startswith(prefix)


def path_next_child(path: str) -> Optional[str]:
    """Drop the first component of ``path``; None when nothing follows it.

    '/dev/tty0' gives 'tty0' and 'home/a.txt' gives 'a.txt'.
    """
    i, n = 0, len(path)
    while i < n:
        ch = path[i]
        i += 1
        if ch != "/":
            break
    while i < n:
        ch = path[i]
        i += 1
        if ch == "/":
            break
    return path[i:] if i < n else None


@dataclass
class _Mount:
    mount_point: str
    fs: Any


class Vfs:
    """Dispatches file calls to the file system mounted under the path.

    Names that start with no mount point are looked up on the root file
    system, which is also mounted at ``/home``.
    """

    def __init__(self, root_fs: Any) -> None:
        self._lock = threading.RLock()
        self._mounts: List[_Mount] = []
        self._files = FileTable()
        self._fds: List[Optional[OpenFile]] = [None] * TASK_OFILE_NR
        self.root_fs = root_fs
        self.mount(ROOT_MOUNT_POINT, root_fs)

    def mount(self, mount_point: str, fs: Any) -> None:
        """Make ``fs`` reachable under ``mount_point``."""
        with self._lock:
            for existing in self._mounts:
                if strncmp(existing.mount_point, mount_point, FS_MOUNTP_SIZE) == 0:
                    raise VfsError(errno.EBUSY, "file system already mounted", mount_point)
            if len(self._mounts) >= FS_TABLE_SIZE:
                raise VfsError(errno.ENOSPC, "no free file system slot", mount_point)
            self._mounts.append(_Mount(mount_point[:FS_MOUNTP_SIZE - 1], fs))

    def _alloc_fd(self, file: OpenFile) -> int:
        for fd, slot in enumerate(self._fds):
            if slot is None:
                self._fds[fd] = file
                return fd
        raise VfsError(errno.EMFILE, "no free file descriptor")

    def _file(self, fd: int) -> OpenFile:
        file = self._fds[fd] if 0 <= fd < TASK_OFILE_NR else None
        if file is None:
            raise VfsError(errno.EBADF, f"file {fd} is not open")
        return file

    def _resolve(self, name: str):
        for mount in self._mounts:
            if path_begin_with(name, mount.mount_point):
                child = path_next_child(name)
                if child is None:
                    raise FileNotFoundError(errno.ENOENT, "no file named", name)
                return mount.fs, child
        return self.root_fs, name

    def open(self, name: str, flags: int = os.O_RDONLY) -> int:
        """Open ``name`` and return a new descriptor."""
        with self._lock:
            file = self._files.alloc()
            try:
                fd = self._alloc_fd(file)
            except VfsError:
                self._files.free(file)
                raise
            try:
                fs, path = self._resolve(name)
                file.mode = flags
                file.fs = fs
                file.file_name = path[:FILE_NAME_SIZE - 1]
                fs.open(path, file)
            except BaseException:
                self._fds[fd] = None
                self._files.free(file)
                raise
            return fd

    def dup(self, fd: int) -> int:
        """Return a new descriptor sharing ``fd``'s open file."""
        with self._lock:
            file = self._file(fd)
            new_fd = self._alloc_fd(file)
            self._files.inc_ref(file)
            return new_fd

    def read(self, fd: int, size: int) -> bytes:
        """Read up to ``size`` bytes."""
        with self._lock:
            file = self._file(fd)
            if size <= 0:
                return b""
            if file.mode & O_ACCMODE == os.O_WRONLY:
                raise VfsError(errno.EBADF, f"file {fd} is write only")
            return file.fs.read(size, file)

    def write(self, fd: int, data: bytes) -> int:
        """Write ``data`` and return the number of bytes written."""
        with self._lock:
            file = self._file(fd)
            if not data:
                return 0
            if file.mode & O_ACCMODE == os.O_RDONLY:
                raise VfsError(errno.EBADF, f"file {fd} is read only")
            return file.fs.write(bytes(data), file)

    def lseek(self, fd: int, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the file position and return it."""
        with self._lock:
            file = self._file(fd)
            return file.fs.seek(file, offset, whence)

    def close(self, fd: int) -> None:
        """Release ``fd``; the file is closed when its last descriptor goes."""
        with self._lock:
            file = self._file(fd)
            if file.ref <= 0:
                raise VfsError(errno.EBADF, f"file {fd} has no references")
            if file.ref == 1:
                file.fs.close(file)
            self._files.free(file)
            self._fds[fd] = None

    def isatty(self, fd: int) -> bool:
        """True if ``fd`` refers to a terminal."""
        with self._lock:
            try:
                file = self._file(fd)
            except VfsError:
                return False
            return file.type == FileType.TTY

    def listdir(self, name: str = "") -> list:
        """The entries of the root file system's directory."""
        with self._lock:
            return list(self.root_fs.listdir())

    def unlink(self, path: str) -> None:
        """Remove ``path`` from the root file system."""
        with self._lock:
            self.root_fs.unlink(path)