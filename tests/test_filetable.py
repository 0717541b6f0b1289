import errno

import pytest

from tinyos.filetable import FileTable, FileType, OpenFile


def test_alloc_gives_one_reference_and_defaults():
    table = FileTable(4)
    f = table.alloc()
    assert f.ref == 1
    assert f.type is FileType.UNKNOWN
    assert f.pos == 0
    assert f.file_name == ""


def test_alloc_returns_distinct_files():
    table = FileTable(4)
    a = table.alloc()
    b = table.alloc()
    assert a is not b
    assert a.ref == b.ref == 1


def test_table_exhaustion_raises_enfile():
    table = FileTable(2)
    table.alloc()
    table.alloc()
    with pytest.raises(OSError) as info:
        table.alloc()
    assert info.value.errno == errno.ENFILE


def test_freed_slot_is_reused_and_reset():
    table = FileTable(1)
    f = table.alloc()
    f.pos = 99
    f.file_name = "a.txt"
    table.free(f)
    assert f.ref == 0
    again = table.alloc()
    assert again.ref == 1
    assert again.pos == 0
    assert again.file_name == ""


def test_free_does_not_go_negative():
    table = FileTable(1)
    f = table.alloc()
    table.free(f)
    table.free(f)
    assert f.ref == 0


def test_inc_ref_keeps_slot_busy():
    table = FileTable(1)
    f = table.alloc()
    table.inc_ref(f)
    assert f.ref == 2
    table.free(f)
    with pytest.raises(OSError):
        table.alloc()
    table.free(f)
    assert table.alloc().ref == 1


def test_file_type_values_match_format():
    assert [t.value for t in FileType] == [0, 1, 2, 3]
    assert OpenFile().type == FileType.UNKNOWN