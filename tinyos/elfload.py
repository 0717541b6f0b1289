"""Parsing of 32-bit ELF executables and loading of their segments."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import List

EI_NIDENT = 16
ELF_MAGIC = 0x7F
ET_EXEC = 2
ET_386 = 3
PT_LOAD = 1

SECTOR_SIZE = 512
KERNEL_LOAD_ADDR = 1024 * 1024
BOOT_RAM_REGION_MAX = 10

_EHDR = struct.Struct("<16sHHIIIIIHHHHHH")
_PHDR = struct.Struct("<8I")


class ElfError(ValueError):
    """Raised when data is not a loadable ELF file."""


@dataclass(frozen=True)
class ElfHeader:
    ident: bytes
    type: int
    machine: int
    version: int
    entry: int
    phoff: int
    shoff: int
    flags: int
    ehsize: int
    phentsize: int
    phnum: int
    shentsize: int
    shnum: int
    shstrndx: int


@dataclass(frozen=True)
class ProgramHeader:
    type: int
    offset: int
    vaddr: int
    paddr: int
    filesz: int
    memsz: int
    flags: int
    align: int


def parse_elf_header(data: bytes) -> ElfHeader:
    """Decode the ELF header at the start of ``data`` and check its magic."""
    if len(data) < _EHDR.size:
        raise ElfError(f"file too short for an ELF header: {len(data)} bytes")
    header = ElfHeader(*_EHDR.unpack_from(data, 0))
    if header.ident[:4] != bytes([ELF_MAGIC]) + b"ELF":
        raise ElfError("bad ELF magic")
    return header


def parse_program_headers(data: bytes, header: ElfHeader) -> List[ProgramHeader]:
    """Decode the program header table described by ``header``."""
    end = header.phoff + header.phnum * _PHDR.size
    if end > len(data):
        raise ElfError("program header table runs past end of file")
    return [
        ProgramHeader(*fields)
        for fields in _PHDR.iter_unpack(bytes(data[header.phoff:end]))
    ]


def load_elf(data: bytes, memory: bytearray) -> int:
    """Copy every loadable segment into ``memory`` at its physical address,
    zero-filling the part beyond the file image, and return the entry point.
    """
    header = parse_elf_header(data)
    for ph in parse_program_headers(data, header):
        if ph.type != PT_LOAD:
            continue
        if ph.memsz < ph.filesz:
            raise ElfError("segment memory size is smaller than its file size")
        if ph.offset + ph.filesz > len(data):
            raise ElfError("segment runs past end of file")
        if ph.paddr + ph.memsz > len(memory):
            raise ElfError(f"segment at {ph.paddr:#x} does not fit in memory")
        file_end = ph.paddr + ph.filesz
        memory[ph.paddr:file_end] = data[ph.offset:ph.offset + ph.filesz]
        memory[file_end:ph.paddr + ph.memsz] = bytes(ph.memsz - ph.filesz)
    return header.entry