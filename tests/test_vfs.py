import os
import struct

import pytest

from tinyos.blockdev import BlockDevice
from tinyos.fatfs import FatFileSystem
from tinyos.fatvolume import FatVolume
from tinyos.vfs import (
    TASK_OFILE_NR,
    Vfs,
    VfsError,
    path_begin_with,
    path_next_child,
    path_to_num,
)

_DBR = "<3s8sHBHBHHBHHHIIBBBI11s8s"


def make_fs(sectors=64):
    dev = BlockDevice(bytes(512 * sectors))
    boot = struct.pack(
        _DBR, b"\xeb\x3c\x90", b"TESTOS  ", 512, 1, 1, 2, 16, sectors, 0xF8, 1,
        0, 0, 0, 0, 0x80, 0, 0x29, 0, b"NO NAME    ", b"FAT16   ",
    )
    dev.write(0, boot + bytes(512 - len(boot)))
    return FatFileSystem(FatVolume(dev))


@pytest.fixture
def vfs():
    return Vfs(make_fs())


def names(v):
    return [item.display_name() for item in v.listdir("")]


def test_path_to_num():
    assert path_to_num("12/abc") == 12
    assert path_to_num("7") == 7
    assert path_to_num("") == 0


def test_path_begin_with():
    assert path_begin_with("/dev/tty0", "/dev")
    assert not path_begin_with("/de", "/dev")


def test_path_next_child():
    assert path_next_child("/dev/tty0") == "tty0"
    assert path_next_child("/home/a.txt") == "a.txt"
    assert path_next_child("home/a.txt") == "a.txt"
    assert path_next_child("abc") is None


def test_write_read_round_trip(vfs):
    data = b"hello world" * 100
    fd = vfs.open("a.txt", os.O_CREAT | os.O_RDWR)
    assert vfs.write(fd, data) == len(data)
    assert vfs.lseek(fd, 0, os.SEEK_SET) == 0
    assert vfs.read(fd, len(data)) == data


def test_close_persists_contents(vfs):
    data = bytes(range(256)) * 3
    fd = vfs.open("data.bin", os.O_CREAT | os.O_RDWR)
    vfs.write(fd, data)
    vfs.close(fd)
    fd = vfs.open("data.bin", os.O_RDONLY)
    assert vfs.read(fd, 10000) == data


def test_open_missing_raises(vfs):
    with pytest.raises(FileNotFoundError):
        vfs.open("none.txt", os.O_RDONLY)


def test_failed_open_releases_descriptor(vfs):
    with pytest.raises(FileNotFoundError):
        vfs.open("none.txt", os.O_RDONLY)
    fd = vfs.open("x.txt", os.O_CREAT | os.O_RDWR)
    assert fd == 0


def test_open_through_root_mount_point(vfs):
    fd = vfs.open("/home/b.txt", os.O_CREAT | os.O_RDWR)
    vfs.close(fd)
    assert "B.TXT" in names(vfs)


def test_other_mount_is_separate(vfs):
    other = make_fs()
    vfs.mount("/data", other)
    fd = vfs.open("/data/c.txt", os.O_CREAT | os.O_RDWR)
    vfs.write(fd, b"abc")
    vfs.close(fd)
    assert "C.TXT" not in names(vfs)
    assert [item.display_name() for item in other.listdir()] == ["C.TXT"]


def test_duplicate_mount_rejected(vfs):
    with pytest.raises(VfsError):
        vfs.mount("/home", make_fs())


def test_mount_table_limit(vfs):
    for i in range(9):
        vfs.mount(f"/m{i}", make_fs())
    with pytest.raises(VfsError):
        vfs.mount("/x", make_fs())


def test_dup_shares_file_and_survives_close(vfs):
    fd = vfs.open("d.txt", os.O_CREAT | os.O_RDWR)
    fd2 = vfs.dup(fd)
    assert fd2 != fd
    vfs.write(fd, b"shared")
    vfs.close(fd)
    vfs.lseek(fd2, 0)
    assert vfs.read(fd2, 6) == b"shared"


def test_descriptor_exhaustion(vfs):
    fd = vfs.open("e.txt", os.O_CREAT | os.O_RDWR)
    dups = [vfs.dup(fd) for _ in range(TASK_OFILE_NR - 1)]
    assert len(set(dups + [fd])) == TASK_OFILE_NR
    with pytest.raises(VfsError):
        vfs.dup(fd)


def test_lowest_descriptor_reused(vfs):
    fd0 = vfs.open("f.txt", os.O_CREAT | os.O_RDWR)
    fd1 = vfs.open("g.txt", os.O_CREAT | os.O_RDWR)
    vfs.close(fd0)
    assert vfs.open("f.txt", os.O_RDWR) == fd0
    assert fd1 == fd0 + 1


def test_bad_descriptor_errors(vfs):
    with pytest.raises(VfsError):
        vfs.close(5)
    fd = vfs.open("h.txt", os.O_CREAT | os.O_RDWR)
    vfs.close(fd)
    with pytest.raises(VfsError):
        vfs.read(fd, 1)
    with pytest.raises(VfsError):
        vfs.dup(-1)


def test_access_mode_checks(vfs):
    fd = vfs.open("i.txt", os.O_CREAT | os.O_WRONLY)
    with pytest.raises(VfsError):
        vfs.read(fd, 4)
    vfs.close(fd)
    fd = vfs.open("i.txt", os.O_RDONLY)
    with pytest.raises(VfsError):
        vfs.write(fd, b"no")


def test_isatty(vfs):
    fd = vfs.open("j.txt", os.O_CREAT | os.O_RDWR)
    assert vfs.isatty(fd) is False
    assert vfs.isatty(99) is False


def test_unlink(vfs):
    fd = vfs.open("k.txt", os.O_CREAT | os.O_RDWR)
    vfs.write(fd, b"bye")
    vfs.close(fd)
    assert "K.TXT" in names(vfs)
    vfs.unlink("k.txt")
    assert "K.TXT" not in names(vfs)
    with pytest.raises(FileNotFoundError):
        vfs.unlink("k.txt")


def test_empty_read_and_write(vfs):
    fd = vfs.open("l.txt", os.O_CREAT | os.O_RDWR)
    assert vfs.write(fd, b"") == 0
    assert vfs.read(fd, 0) == b""