"""File operations on a FAT16 volume: open, read, write, seek, listing and removal."""

from __future__ import annotations

import errno
import os
from typing import Iterator

from tinyos.fatvolume import (
    DIRITEM_NAME_END,
    DIRITEM_NAME_FREE,
    DIRITEM_SIZE,
    FAT_CLUSTER_INVALID,
    DirItem,
    FatError,
    FatVolume,
    cluster_is_valid,
)
from tinyos.filetable import FileType, OpenFile
from tinyos.klib import up2

O_RDONLY = os.O_RDONLY
O_WRONLY = os.O_WRONLY
O_RDWR = os.O_RDWR
O_CREAT = os.O_CREAT
O_TRUNC = os.O_TRUNC

SEEK_SET = 0


class FatFileSystem:
    """Files in the root directory of a FAT16 volume."""

    def __init__(self, volume: FatVolume) -> None:
        self.volume = volume

    @property
    def _cluster_size(self) -> int:
        return self.volume.cluster_byte_size

    def _cluster_sector(self, cluster: int) -> int:
        return self.volume.data_start + (cluster - 2) * self.volume.sec_per_cluster

    @staticmethod
    def _load_from_item(file: OpenFile, item: DirItem, index: int) -> None:
        file.type = item.file_type()
        file.size = item.file_size
        file.pos = 0
        file.sblk = item.first_cluster
        file.cblk = file.sblk
        file.p_index = index

    def _expand_file(self, file: OpenFile, inc_bytes: int) -> None:
        """Give the file enough clusters for ``inc_bytes`` more bytes past its end."""
        size = self._cluster_size
        if file.size == 0 or file.size % size == 0:
            cluster_cnt = up2(inc_bytes, size) // size
        else:
            cfree = size - file.size % size
            if cfree >= inc_bytes:
                return
            cluster_cnt = up2(inc_bytes - cfree, size) // size

        start = self.volume.alloc_clusters(cluster_cnt)
        if not cluster_is_valid(file.sblk):
            file.cblk = file.sblk = start
        else:
            self.volume.set_next_cluster(file.cblk, start)

    def _move_pos(self, file: OpenFile, move_bytes: int, expand: bool) -> None:
        size = self._cluster_size
        if file.pos % size + move_bytes >= size:
            following = self.volume.next_cluster(file.cblk)
            if following == FAT_CLUSTER_INVALID and expand:
                self._expand_file(file, size)
                following = self.volume.next_cluster(file.cblk)
            file.cblk = following
        file.pos += move_bytes

    def open(self, path: str, file: OpenFile) -> None:
        """Fill ``file`` from the root-directory entry named ``path``.

        Honours O_TRUNC and O_CREAT in ``file.mode``. Raises FileNotFoundError
        when the file does not exist and cannot be created.
        """
        found = None
        p_index = -1
        for index in range(self.volume.root_ent_cnt):
            item = self.volume.read_dir_entry(index)
            if item.name[0] == DIRITEM_NAME_END:
                p_index = index
                break
            if item.name[0] == DIRITEM_NAME_FREE:
                p_index = index
                continue
            if item.name_match(path):
                found = item
                p_index = index
                break

        if found is not None:
            self._load_from_item(file, found, p_index)
            if file.mode & O_TRUNC:
                self.volume.free_chain(file.sblk)
                file.cblk = file.sblk = FAT_CLUSTER_INVALID
                file.size = 0
            return

        if file.mode & O_CREAT and p_index >= 0:
            item = DirItem.create(0, path)
            self.volume.write_dir_entry(item, p_index)
            self._load_from_item(file, item, p_index)
            return

        raise FileNotFoundError(errno.ENOENT, "no such file", path)

    def read(self, size: int, file: OpenFile) -> bytes:
        """Read up to ``size`` bytes from the current position."""
        cluster_size = self._cluster_size
        nbytes = max(0, min(size, file.size - file.pos))
        chunks = []
        try:
            while nbytes > 0 and cluster_is_valid(file.cblk):
                offset = file.pos % cluster_size
                cluster = self.volume.device.read(
                    self._cluster_sector(file.cblk), self.volume.sec_per_cluster
                )
                if offset == 0 and nbytes == cluster_size:
                    curr_read = cluster_size
                    chunks.append(cluster[:cluster_size])
                else:
                    curr_read = min(nbytes, cluster_size - offset)
                    chunks.append(cluster[offset:offset + curr_read])
                nbytes -= curr_read
                self._move_pos(file, curr_read, expand=False)
        except (IndexError, FatError):
            pass
        return b"".join(chunks)

    def write(self, data: bytes, file: OpenFile) -> int:
        """Write ``data`` at the current position; return the number of bytes written."""
        cluster_size = self._cluster_size
        if file.pos + len(data) > file.size:
            try:
                self._expand_file(file, file.pos + len(data) - file.size)
            except FatError:
                return 0

        view = memoryview(bytes(data))
        total = 0
        try:
            while total < len(view) and cluster_is_valid(file.cblk):
                nbytes = len(view) - total
                offset = file.pos % cluster_size
                sector = self._cluster_sector(file.cblk)
                if offset == 0 and nbytes == cluster_size:
                    curr_write = cluster_size
                    self.volume.device.write(sector, view[total:total + cluster_size].tobytes())
                else:
                    curr_write = min(nbytes, cluster_size - offset)
                    cluster = bytearray(
                        self.volume.device.read(sector, self.volume.sec_per_cluster)
                    )
                    cluster[offset:offset + curr_write] = view[total:total + curr_write]
                    self.volume.device.write(sector, bytes(cluster))
                total += curr_write
                file.size = max(file.size, file.pos + curr_write)
                self._move_pos(file, curr_write, expand=True)
        except (IndexError, FatError):
            pass
        return total

    def close(self, file: OpenFile) -> None:
        """Record the file's size and first cluster in its directory entry."""
        if file.mode == O_RDONLY:
            return
        try:
            item = self.volume.read_dir_entry(file.p_index)
        except IndexError:
            return
        item.file_size = file.size
        item.first_cluster = file.sblk
        self.volume.write_dir_entry(item, file.p_index)

    def seek(self, file: OpenFile, offset: int, whence: int = SEEK_SET) -> int:
        """Move to ``offset`` from the start of the file and return the new position.

        Only SEEK_SET is supported; raises OSError(EINVAL) otherwise or when the
        position lies beyond the file's cluster chain.
        """
        if whence != SEEK_SET:
            raise OSError(errno.EINVAL, f"unsupported seek origin: {whence}")
        if offset < 0:
            raise OSError(errno.EINVAL, f"negative seek offset: {offset}")
        cluster_size = self._cluster_size
        cluster = file.sblk
        pos = 0
        remaining = offset
        while remaining > 0:
            c_off = pos % cluster_size
            if c_off + remaining < cluster_size:
                pos += remaining
                break
            step = cluster_size - c_off
            pos += step
            remaining -= step
            cluster = self.volume.next_cluster(cluster)
            if not cluster_is_valid(cluster):
                raise OSError(errno.EINVAL, f"seek offset {offset} beyond end of chain")
        file.pos = pos
        file.cblk = cluster
        return pos

    def listdir(self) -> Iterator[DirItem]:
        """Yield the root-directory entries that are regular files or directories."""
        for index in range(self.volume.root_ent_cnt):
            item = self.volume.read_dir_entry(index)
            if item.name[0] == DIRITEM_NAME_END:
                return
            if item.name[0] == DIRITEM_NAME_FREE:
                continue
            if item.file_type() in (FileType.NORMAL, FileType.DIR):
                yield item

    def unlink(self, path: str) -> None:
        """Remove the file ``path`` and free its clusters."""
        for index in range(self.volume.root_ent_cnt):
            item = self.volume.read_dir_entry(index)
            if item.name[0] == DIRITEM_NAME_END:
                break
            if item.name[0] == DIRITEM_NAME_FREE:
                continue
            if item.name_match(path):
                self.volume.free_chain(item.first_cluster)
                self.volume.write_dir_entry(DirItem.unpack(bytes(DIRITEM_SIZE)), index)
                return
        raise FileNotFoundError(errno.ENOENT, "no such file", path)