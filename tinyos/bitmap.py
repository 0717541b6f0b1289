"""Fixed-size bitmaps used to track allocation of pages and other resources."""

from __future__ import annotations


def byte_count(bit_count: int) -> int:
    """Number of bytes needed to hold ``bit_count`` bits, rounded up."""
    return (bit_count + 8 - 1) // 8


class Bitmap:
    """A bitmap whose bit ``i`` lives in byte ``i // 8`` at position ``i % 8``."""

    def __init__(self, count: int, init_bit: int = 0) -> None:
        if count < 0:
            raise ValueError(f"bit count must not be negative: {count}")
        self.bit_count = count
        fill = 0xFF if init_bit else 0x00
        self.bits = bytearray([fill]) * byte_count(count)

    def __len__(self) -> int:
        return self.bit_count

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.bit_count:
            raise IndexError(f"bit index {index} out of range 0..{self.bit_count - 1}")

    def get_bit(self, index: int) -> int:
        """Return the bit at ``index`` as 0 or 1."""
        self._check_index(index)
        return (self.bits[index // 8] >> (index % 8)) & 1

    def is_set(self, index: int) -> bool:
        """Return True if the bit at ``index`` is 1."""
        return self.get_bit(index) == 1

    def set_bits(self, index: int, count: int, bit: int) -> None:
        """Set ``count`` bits starting at ``index``; bits past the end are ignored."""
        if index < 0:
            raise IndexError(f"bit index {index} must not be negative")
        for i in range(index, min(index + count, self.bit_count)):
            mask = 1 << (i % 8)
            if bit:
                self.bits[i // 8] |= mask
            else:
                self.bits[i // 8] &= ~mask & 0xFF

    def alloc(self, bit: int, count: int) -> int:
        """Find ``count`` consecutive bits equal to ``bit``, invert them and
        return the index of the first one.

        Raises LookupError if no such run exists.
        """
        if count < 1:
            raise ValueError(f"count must be at least 1: {count}")
        wanted = 1 if bit else 0
        run_start = 0
        run_length = 0
        for index in range(self.bit_count):
            if self.get_bit(index) != wanted:
                run_length = 0
                continue
            if run_length == 0:
                run_start = index
            run_length += 1
            if run_length == count:
                self.set_bits(run_start, count, 1 - wanted)
                return run_start
        raise LookupError(f"no run of {count} bits equal to {wanted}")