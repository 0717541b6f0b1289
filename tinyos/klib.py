"""Small helpers for alignment, string handling and kernel-style formatting."""

from __future__ import annotations

from itertools import takewhile
from typing import Iterable, Optional

_UINT32_MASK = 0xFFFFFFFF
_DIGIT_FORMATS = {2: "b", 8: "o", 10: "d", 16: "X"}


def up2(size: int, bound: int) -> int:
    """Round ``size`` up to a multiple of the power-of-two ``bound``."""
    return (size + bound - 1) & ~(bound - 1) & _UINT32_MASK


def down2(size: int, bound: int) -> int:
    """Round ``size`` down to a multiple of the power-of-two ``bound``."""
    return size & ~(bound - 1) & _UINT32_MASK


def strings_count(strings: Optional[Iterable[Optional[str]]]) -> int:
    """Count the strings before the first None; None itself counts as empty."""
    if strings is None:
        return 0
    return sum(1 for _ in takewhile(lambda s: s is not None, strings))


def get_file_name(path: str) -> str:
    """Return the part of ``path`` after the last '/' or '\\'."""
    cut = max(path.rfind("/"), path.rfind("\\"))
    return path[cut + 1:]


def strncmp(s1: str, s2: str, size: int) -> int:
    """Compare at most ``size`` characters.

    Returns 0 when the strings match, where one string ending early also
    counts as a match, and 1 otherwise.
    """
    i = 0
    while i < len(s1) and i < len(s2) and s1[i] == s2[i] and size:
        i += 1
        size -= 1
    c1 = s1[i] if i < len(s1) else ""
    c2 = s2[i] if i < len(s2) else ""
    return 0 if (not c1 or not c2 or c1 == c2) else 1


def _to_int32(num: int) -> int:
    return ((num + 0x80000000) & _UINT32_MASK) - 0x80000000


def itoa(num: int, base: int) -> str:
    """Convert a 32-bit integer to text in base 2, 8, 10 or 16.

    Negative numbers carry a sign only in base 10; other bases show the
    unsigned 32-bit value. Hex digits are upper case.
    """
    if base not in _DIGIT_FORMATS:
        raise ValueError(f"unsupported base: {base}")
    value = _to_int32(num)
    if value < 0 and base == 10:
        return "-" + format(-value, "d")
    return format(value & _UINT32_MASK, _DIGIT_FORMATS[base])


def kformat(fmt: str, *args) -> str:
    """Format like the kernel's printf: supports %d, %x, %c and %s.

    Any other character after '%' is dropped without consuming an argument.
    """
    values = iter(args)

    def next_arg():
        try:
            return next(values)
        except StopIteration:
            raise ValueError(f"not enough arguments for format {fmt!r}") from None

    parts = []
    chars = iter(fmt)
    for ch in chars:
        if ch != "%":
            parts.append(ch)
            continue
        spec = next(chars, None)
        if spec == "d":
            parts.append(itoa(next_arg(), 10))
        elif spec == "x":
            parts.append(itoa(next_arg(), 16))
        elif spec == "c":
            value = next_arg()
            parts.append(value[:1] if isinstance(value, str) else chr(value & 0xFF))
        elif spec == "s":
            value = next_arg()
            if value is not None:
                parts.append(str(value))
    return "".join(parts)