"""Pieces of a small operating system: bitmaps, lists, an ELF loader, FAT16 and VFS layers, a shell and a snake game."""

__version__ = "1.0.1"