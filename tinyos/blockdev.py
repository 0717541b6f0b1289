"""An in-memory block device addressed in fixed-size sectors."""

from __future__ import annotations

import os
from typing import Union

DEFAULT_SECTOR_SIZE = 512


class BlockDevice:
    """A disk image held in memory and read and written whole sectors at a time."""

    def __init__(self, data: bytes = b"", sector_size: int = DEFAULT_SECTOR_SIZE) -> None:
        if sector_size <= 0:
            raise ValueError(f"sector size must be positive: {sector_size}")
        if len(data) % sector_size:
            raise ValueError(
                f"image size {len(data)} is not a multiple of the sector size {sector_size}"
            )
        self.sector_size = sector_size
        self._data = bytearray(data)

    @classmethod
    def from_file(
        cls, path: Union[str, os.PathLike], sector_size: int = DEFAULT_SECTOR_SIZE
    ) -> "BlockDevice":
        """Load a disk image from ``path``."""
        with open(path, "rb") as image:
            return cls(image.read(), sector_size)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def sector_count(self) -> int:
        """Number of sectors on the device."""
        return len(self._data) // self.sector_size

    def _check_range(self, sector: int, count: int) -> None:
        if sector < 0 or count < 0 or sector + count > self.sector_count():
            raise IndexError(
                f"sectors {sector}..{sector + count - 1} outside device of "
                f"{self.sector_count()} sectors"
            )

    def read(self, sector: int, count: int = 1) -> bytes:
        """Return ``count`` sectors starting at ``sector``."""
        self._check_range(sector, count)
        start = sector * self.sector_size
        return bytes(self._data[start:start + count * self.sector_size])

    def write(self, sector: int, data: bytes) -> int:
        """Write whole sectors starting at ``sector``; return the number written."""
        if len(data) % self.sector_size:
            raise ValueError(
                f"data size {len(data)} is not a multiple of the sector size {self.sector_size}"
            )
        count = len(data) // self.sector_size
        self._check_range(sector, count)
        start = sector * self.sector_size
        self._data[start:start + len(data)] = data
        return count