import pytest

from tinyos.klib import (
    down2,
    get_file_name,
    itoa,
    kformat,
    strings_count,
    strncmp,
    up2,
)

BOUNDS = [1, 2, 4, 8, 512, 4096]


@pytest.mark.parametrize("bound", BOUNDS)
def test_up2_invariants(bound):
    for size in range(0, 5000, 37):
        r = up2(size, bound)
        assert r % bound == 0
        assert size <= r < size + bound


@pytest.mark.parametrize("bound", BOUNDS)
def test_down2_invariants(bound):
    for size in range(0, 5000, 37):
        r = down2(size, bound)
        assert r % bound == 0
        assert size - bound < r <= size


def test_aligned_values_unchanged():
    assert up2(4096, 4096) == 4096
    assert down2(4096, 4096) == 4096


def test_strings_count():
    assert strings_count(["a", "b", None, "c"]) == 2
    assert strings_count(None) == 0
    assert strings_count([]) == 0
    assert strings_count(["x"]) == 1


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/home/shell.elf", "shell.elf"),
        ("a\\b", "b"),
        ("plain", "plain"),
        ("dir/", ""),
    ],
)
def test_get_file_name(path, expected):
    assert get_file_name(path) == expected


def test_strncmp_results():
    assert strncmp("abc", "abc", 3) == 0
    assert strncmp("abc", "abd", 3) == 1
    assert strncmp("tty0", "tty", 3) == 0
    assert strncmp("/dev", "/home", 512) == 1


@pytest.mark.parametrize("base", [2, 8, 10, 16])
@pytest.mark.parametrize("num", [0, 1, 7, 255, 1000, 2**31 - 1])
def test_itoa_round_trip(num, base):
    assert int(itoa(num, base), base) == num


def test_itoa_hex_is_upper_case():
    text = itoa(0xABCDEF, 16)
    assert text == text.upper()
    assert int(text, 16) == 0xABCDEF


def test_itoa_negative_decimal():
    assert itoa(-42, 10) == "-" + itoa(42, 10)
    assert int(itoa(-(2**31), 10)) == -(2**31)


def test_itoa_negative_hex_is_unsigned():
    assert int(itoa(-1, 16), 16) == 2**32 - 1


def test_itoa_bad_base():
    with pytest.raises(ValueError):
        itoa(10, 3)


def test_kformat_numbers():
    assert kformat("pid=%d", 7) == "pid=" + itoa(7, 10)
    assert kformat("dev: %x", 255) == "dev: " + itoa(255, 16)


def test_kformat_strings_and_chars():
    assert kformat("%s:%c", "tty", "x") == "tty:x"
    assert kformat("%c", ord("A")) == "A"
    assert kformat("[%s]", None) == "[]"


def test_kformat_unknown_spec_is_dropped():
    assert kformat("100%%") == "100"
    assert kformat("%q%d", 5) == itoa(5, 10)


def test_kformat_missing_argument():
    with pytest.raises(ValueError):
        kformat("%d %d", 1)