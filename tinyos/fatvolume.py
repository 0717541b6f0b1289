"""FAT16 volume structures: directory items, the allocation table and the root directory."""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace
from typing import Optional

from tinyos.blockdev import BlockDevice
from tinyos.filetable import FileType

FAT_CLUSTER_INVALID = 0xFFF8
FAT_CLUSTER_FREE = 0x00

DIRITEM_NAME_FREE = 0xE5
DIRITEM_NAME_END = 0x00

DIRITEM_ATTR_READ_ONLY = 0x01
DIRITEM_ATTR_HIDDEN = 0x02
DIRITEM_ATTR_SYSTEM = 0x04
DIRITEM_ATTR_VOLUME_ID = 0x08
DIRITEM_ATTR_DIRECTORY = 0x10
DIRITEM_ATTR_ARCHIVE = 0x20
DIRITEM_ATTR_LONG_NAME = 0x0F

SFN_LEN = 11
SECTOR_SIZE = 512

_DIRITEM = struct.Struct("<11sBBBHHHHHHHI")
_DBR = struct.Struct("<3s8sHBHBHHBHHHIIBBBI11s8s")
_CLUSTER = struct.Struct("<H")

DIRITEM_SIZE = _DIRITEM.size


class FatError(Exception):
    """Raised for malformed volumes and failed FAT operations."""


def cluster_is_valid(cluster: int) -> bool:
    """True for a cluster number that can hold data (neither reserved nor an end mark)."""
    return 0x2 <= cluster < FAT_CLUSTER_INVALID


def to_sfn(name: str) -> bytes:
    """Convert a file name to the 11-byte short form, e.g. 'a.txt' -> 'A       TXT'."""
    dest = bytearray(b" " * SFN_LEN)
    curr = 0
    for c in name.encode("utf-8"):
        if curr >= SFN_LEN:
            break
        if c == ord("."):
            curr = 8
            continue
        if ord("a") <= c <= ord("z"):
            c -= ord("a") - ord("A")
        dest[curr] = c
        curr += 1
    return bytes(dest)


@dataclass
class DirItem:
    """A 32-byte FAT directory entry."""

    name: bytes = b" " * SFN_LEN
    attr: int = 0
    nt_res: int = 0
    crt_time_tenth: int = 0
    crt_time: int = 0
    crt_date: int = 0
    last_acc_date: int = 0
    fst_clus_hi: int = 0
    wrt_time: int = 0
    wrt_date: int = 0
    fst_clus_lo: int = 0
    file_size: int = 0

    @classmethod
    def unpack(cls, raw: bytes) -> "DirItem":
        if len(raw) < DIRITEM_SIZE:
            raise FatError(f"directory entry needs {DIRITEM_SIZE} bytes, got {len(raw)}")
        return cls(*_DIRITEM.unpack_from(raw))

    def pack(self) -> bytes:
        return _DIRITEM.pack(
            self.name, self.attr, self.nt_res, self.crt_time_tenth, self.crt_time,
            self.crt_date, self.last_acc_date, self.fst_clus_hi, self.wrt_time,
            self.wrt_date, self.fst_clus_lo, self.file_size,
        )

    @classmethod
    def create(cls, attr: int, name: str) -> "DirItem":
        """A new empty entry with no clusters and fixed zero timestamps."""
        return cls(
            name=to_sfn(name),
            attr=attr,
            fst_clus_hi=(FAT_CLUSTER_INVALID >> 16) & 0xFFFF,
            fst_clus_lo=FAT_CLUSTER_INVALID & 0xFFFF,
        )

    @property
    def first_cluster(self) -> int:
        return (self.fst_clus_hi << 16) | self.fst_clus_lo

    @first_cluster.setter
    def first_cluster(self, cluster: int) -> None:
        self.fst_clus_hi = (cluster >> 16) & 0xFFFF
        self.fst_clus_lo = cluster & 0xFFFF

    def name_match(self, path: str) -> bool:
        return to_sfn(path) == self.name

    def display_name(self) -> str:
        """The name as 'BASE.EXT', or 'BASE' when there is no extension."""
        base = self.name[:8].replace(b" ", b"").decode("latin-1")
        ext = self.name[8:SFN_LEN].replace(b" ", b"").decode("latin-1")
        return f"{base}.{ext}" if ext else base

    def file_type(self) -> FileType:
        if self.attr & (DIRITEM_ATTR_VOLUME_ID | DIRITEM_ATTR_HIDDEN | DIRITEM_ATTR_SYSTEM):
            return FileType.UNKNOWN
        return FileType.DIR if self.attr & DIRITEM_ATTR_DIRECTORY else FileType.NORMAL


class FatVolume:
    """A mounted FAT16 volume with a one-sector cache for table and directory access."""

    def __init__(self, device: BlockDevice) -> None:
        self.device = device
        try:
            boot = device.read(0, 1)
            fields = _DBR.unpack_from(boot)
        except (IndexError, struct.error) as exc:
            raise FatError(f"cannot read boot record: {exc}") from exc
        (_, _, bytes_per_sec, sec_per_clus, rsvd_sec_cnt, num_fats, root_ent_cnt,
         _, _, fat_sz16, _, _, _, _, _, _, _, _, _, fs_type) = fields

        self.bytes_per_sec = bytes_per_sec
        self.tbl_start = rsvd_sec_cnt
        self.tbl_sectors = fat_sz16
        self.tbl_cnt = num_fats
        self.root_ent_cnt = root_ent_cnt
        self.sec_per_cluster = sec_per_clus
        self.cluster_byte_size = sec_per_clus * bytes_per_sec
        self.root_start = self.tbl_start + self.tbl_sectors * self.tbl_cnt
        self.data_start = self.root_start + self.root_ent_cnt * 32 // SECTOR_SIZE

        if self.tbl_cnt != 2:
            raise FatError(f"expected 2 FAT tables, found {self.tbl_cnt}")
        if fs_type[:5] != b"FAT16":
            raise FatError("not a FAT16 file system")
        if bytes_per_sec != device.sector_size:
            raise FatError(
                f"volume sector size {bytes_per_sec} differs from device sector size "
                f"{device.sector_size}"
            )

        self._buffer = bytearray(boot)
        self._curr_sector: Optional[int] = None

    def _load_sector(self, sector: int) -> None:
        if sector == self._curr_sector:
            return
        try:
            self._buffer = bytearray(self.device.read(sector, 1))
        except IndexError as exc:
            raise FatError(f"cannot read sector {sector}") from exc
        self._curr_sector = sector

    def _store_sector(self, sector: int) -> None:
        try:
            self.device.write(sector, bytes(self._buffer))
        except IndexError as exc:
            raise FatError(f"cannot write sector {sector}") from exc

    def _table_position(self, cluster: int) -> Optional[tuple]:
        offset = cluster * _CLUSTER.size
        sector, in_sector = divmod(offset, self.bytes_per_sec)
        if sector >= self.tbl_sectors:
            return None
        return sector, in_sector

    def next_cluster(self, cluster: int) -> int:
        """The cluster after ``cluster`` in its chain, or FAT_CLUSTER_INVALID."""
        if not cluster_is_valid(cluster):
            return FAT_CLUSTER_INVALID
        position = self._table_position(cluster)
        if position is None:
            return FAT_CLUSTER_INVALID
        sector, in_sector = position
        self._load_sector(self.tbl_start + sector)
        return _CLUSTER.unpack_from(self._buffer, in_sector)[0]

    def set_next_cluster(self, cluster: int, next_cluster: int) -> None:
        """Link ``cluster`` to ``next_cluster`` in every copy of the table."""
        if not cluster_is_valid(cluster):
            raise FatError(f"invalid cluster: {cluster:#x}")
        position = self._table_position(cluster)
        if position is None:
            raise FatError(f"cluster too big: {cluster}")
        sector, in_sector = position
        self._load_sector(self.tbl_start + sector)
        _CLUSTER.pack_into(self._buffer, in_sector, next_cluster & 0xFFFF)
        for copy in range(self.tbl_cnt):
            self._store_sector(self.tbl_start + sector + copy * self.tbl_sectors)

    def free_chain(self, start: int) -> None:
        """Mark every cluster of the chain beginning at ``start`` free."""
        while cluster_is_valid(start):
            following = self.next_cluster(start)
            self.set_next_cluster(start, FAT_CLUSTER_FREE)
            start = following

    def alloc_clusters(self, count: int) -> int:
        """Chain ``count`` free clusters together and return the first one."""
        if count < 1:
            raise ValueError(f"cluster count must be at least 1: {count}")
        total = self.tbl_sectors * self.bytes_per_sec // _CLUSTER.size
        start = prev = FAT_CLUSTER_INVALID
        remaining = count
        try:
            for curr in range(2, total):
                if not remaining:
                    break
                if self.next_cluster(curr) != FAT_CLUSTER_FREE:
                    continue
                if not cluster_is_valid(start):
                    start = curr
                if cluster_is_valid(prev):
                    self.set_next_cluster(prev, curr)
                prev = curr
                remaining -= 1
            if remaining == 0:
                self.set_next_cluster(prev, FAT_CLUSTER_INVALID)
                return start
        except FatError:
            self.free_chain(start)
            raise
        self.free_chain(start)
        raise FatError(f"not enough free clusters for {count}")

    def _dir_position(self, index: int) -> tuple:
        if not 0 <= index < self.root_ent_cnt:
            raise IndexError(f"directory index {index} out of range 0..{self.root_ent_cnt - 1}")
        offset = index * DIRITEM_SIZE
        return self.root_start + offset // self.bytes_per_sec, offset % self.bytes_per_sec

    def read_dir_entry(self, index: int) -> DirItem:
        """Read entry ``index`` of the root directory."""
        sector, in_sector = self._dir_position(index)
        self._load_sector(sector)
        return DirItem.unpack(bytes(self._buffer[in_sector:in_sector + DIRITEM_SIZE]))

    def write_dir_entry(self, item: DirItem, index: int) -> None:
        """Write ``item`` as entry ``index`` of the root directory."""
        sector, in_sector = self._dir_position(index)
        self._load_sector(sector)
        self._buffer[in_sector:in_sector + DIRITEM_SIZE] = replace(item).pack()
        self._store_sector(sector)