import io

import pytest

from tinyos.echo import main, run_echo


def _run(args, stdin_text=""):
    stdin = io.StringIO(stdin_text)
    stdout = io.StringIO()
    stderr = io.StringIO()
    code = run_echo(args, stdin, stdout, stderr)
    return code, stdout.getvalue(), stderr.getvalue()


def test_prints_message_once_by_default():
    code, out, err = _run(["echo", "hello"])
    assert code == 0
    assert out == "hello\n"
    assert err == ""


@pytest.mark.parametrize("count", [1, 2, 5])
def test_repeat_count(count):
    code, out, _ = _run(["echo", "-n", str(count), "msg"])
    assert code == 0
    assert out.splitlines() == ["msg"] * count


def test_non_numeric_count_prints_nothing():
    code, out, _ = _run(["echo", "-n", "abc", "msg"])
    assert code == 0
    assert out == ""


def test_help_text():
    code, out, _ = _run(["echo", "-h"])
    assert code == 0
    assert out.splitlines() == ["echo echo any message", "Usage: echo [-n count] msg"]


def test_missing_message_is_error():
    code, out, err = _run(["echo", "-n", "2"])
    assert code == -1
    assert out == ""
    assert err == "Message is empty \n"


def test_unknown_option_is_error():
    code, out, err = _run(["echo", "-z", "msg"])
    assert code == -1
    assert out == ""
    assert err.startswith("Unknown option: -z")


def test_no_arguments_echoes_input_line():
    code, out, _ = _run(["echo"], "abc\n")
    assert code == 0
    assert out == "abc\n\n"


def test_input_line_is_limited_to_buffer():
    code, out, _ = _run(["echo"], "a" * 200 + "\n")
    assert code == 0
    assert out == "a" * 127 + "\n"


def test_main_uses_process_streams(capsys):
    assert main(["echo", "-n", "2", "x"]) == 0
    assert capsys.readouterr().out == "x\nx\n"