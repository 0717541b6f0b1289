"""The echo command: print a message, optionally several times, or echo a line of input."""

from __future__ import annotations

import getopt
import re
import sys
from typing import List, Optional, Sequence, TextIO

ECHO_INPUT_SIZE = 128

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    """Parse a leading decimal integer; text without one gives 0."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def run_echo(
    args: Sequence[str],
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Run echo with ``args``, whose first item is the command name.

    With no further arguments one line is read from ``stdin`` and printed.
    Otherwise ``[-n count] msg`` prints ``msg`` ``count`` times. Returns 0 on
    success and -1 on a usage error.
    """
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    stderr = sys.stderr if stderr is None else stderr

    if len(args) <= 1:
        line = stdin.readline(ECHO_INPUT_SIZE - 1)
        stdout.write(line + "\n")
        return 0

    try:
        options, rest = getopt.getopt(list(args[1:]), "n:h")
    except getopt.GetoptError as exc:
        stderr.write(f"Unknown option: -{exc.opt}\n")
        return -1

    count = 1
    for option, value in options:
        if option == "-h":
            stdout.write("echo echo any message\n")
            stdout.write("Usage: echo [-n count] msg\n")
            return 0
        if option == "-n":
            count = _atoi(value)

    if not rest:
        stderr.write("Message is empty \n")
        return -1

    message = rest[0]
    for _ in range(count):
        stdout.write(message + "\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Command entry point."""
    if argv is None:
        argv = sys.argv
    return run_echo(argv, sys.stdin, sys.stdout, sys.stderr)


if __name__ == "__main__":
    sys.exit(main())