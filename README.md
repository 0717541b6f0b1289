# tinyos

The building blocks of a small teaching operating system, usable as plain
Python: a bit allocator, a doubly linked list, kernel-style string
formatting, an ELF32 loader, a FAT16 volume driver with a file system on
top, a virtual file system with mount points and file descriptors, an
interactive command shell, and a terminal snake game.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

| Command        | What it does                                                        |
|----------------|---------------------------------------------------------------------|
| `tinyos-shell` | An interactive shell with built-in commands and external programs   |
| `tinyos-echo`  | Prints a message, optionally several times (`-n count`); `-h` helps |
| `tinyos-snake` | A snake game for an ANSI terminal, steered with `w`, `a`, `s`, `d`  |

### The shell

`tinyos-shell` prints a greeting, shows a `user >>` prompt and reads one
line at a time. A line is split on spaces (at most ten words are kept); the
first word is looked up among the built-in commands and otherwise started
as a program, trying the name as given and then with `.elf` appended. After
a program ends the shell reports its exit status and process id.

Built-in commands:

| Command               | What it does                                              |
|-----------------------|-----------------------------------------------------------|
| `help`                | Lists every built-in with its usage                       |
| `clear`               | Clears the screen                                         |
| `echo [-n count] msg` | The same as `tinyos-echo`                                 |
| `ls [dir]`            | Lists a directory (default `.`) as `d`/`f`, name and size |
| `less [-l] file`      | Shows a text file; with `-l`, one line per `n`, `q` quits |
| `cp from to`          | Copies a file                                             |
| `rm file`             | Removes a file                                            |
| `quit`                | Leaves the shell                                          |

A built-in that fails reports its error code in red; an unknown command is
reported the same way. The shell stops at end of input or on `quit`.

### echo

```
tinyos-echo hello            # prints "hello"
tinyos-echo -n 3 hello       # prints "hello" three times
tinyos-echo                  # reads one line from standard input and prints it
```

### snake

`tinyos-snake` draws a 25 × 80 field, waits for a key, and then moves the
snake on its own every half second or so; `w`, `a`, `s`, `d` change its
direction. Eating food makes it grow, hitting a wall or itself ends the
game. On a terminal that supports it, input is read without echo or line
buffering while the game runs.

## Using the library

### Bitmaps

```python
from tinyos.bitmap import Bitmap, byte_count

bits = Bitmap(64, 0)         # 64 bits, all clear
start = bits.alloc(0, 4)     # find four clear bits in a row and set them
bits.is_set(start)           # True
byte_count(13)               # 2
```

`alloc` raises `LookupError` when no long enough run exists.

### Kernel string helpers

```python
from tinyos.klib import kformat, itoa, get_file_name, up2

kformat("pid=%d addr=%x name=%s", 7, 255, "init")   # 'pid=7 addr=FF name=init'
itoa(-42, 10)                                        # '-42'
get_file_name("/home/shell.elf")                     # 'shell.elf'
up2(5000, 4096)                                      # 8192
```

`tinyos.klib` also has `down2`, `strings_count` and `strncmp`.

### Linked lists

`tinyos.linkedlist.LinkedList` holds `ListNode` objects and tracks its
first and last nodes and its length; nodes can be inserted at either end
(`insert_first`, `insert_last`), taken from the front (`remove_first`) or
removed from anywhere (`remove`), and the list can be iterated.

### Loading ELF images

`tinyos.elfload.parse_elf_header` and `parse_program_headers` decode an
ELF32 file, and `load_elf(data, memory)` copies every loadable segment into
a writable buffer at its physical address, zero-fills the remainder of each
segment, and returns the entry point. A file that is not ELF, or a segment
that does not fit, raises `ElfError`.

### FAT16 disk images

```python
from tinyos.blockdev import BlockDevice
from tinyos.fatvolume import FatVolume
from tinyos.fatfs import FatFileSystem

device = BlockDevice.from_file("disk.img", 512)
volume = FatVolume(device)          # raises FatError if this is not FAT16
fs = FatFileSystem(volume)
for entry in fs.listdir():
    print(entry.display_name(), entry.file_size)
```

`FatFileSystem` opens, reads, writes, seeks in, closes and removes files in
the root directory, working on `tinyos.filetable.OpenFile` records;
`FatVolume` gives direct access to the cluster chain and the directory
entries (`DirItem`). `BlockDevice` keeps the image in memory; `bytes(device)`
returns its current contents.

### The virtual file system

`tinyos.vfs.Vfs` routes paths to file systems by mount point (the root file
system is also mounted at `/home`), hands out file descriptors backed by a
`FileTable`, and offers `open`, `read`, `write`, `lseek`, `dup`, `close`,
`isatty`, `listdir` and `unlink`. Bad descriptors and failed mounts raise
`VfsError`; a missing file raises `FileNotFoundError`.

## What this package does not do

There is no kernel that runs: no boot, no scheduler, processes or system
calls, no memory paging and no device drivers. The `Vfs` has no device file
system, so nothing under it is a terminal unless a file system you mount
says so. FAT16 support covers the root directory only, and seeking works
only from the start of a file. The shell's `ls`, `less`, `cp` and `rm`, and
the programs it starts, use the host's files, not a FAT16 image.