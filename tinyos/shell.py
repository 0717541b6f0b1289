"""An interactive command line with built-in commands that can also start programs."""

from __future__ import annotations

import getopt
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, TextIO

from tinyos.echo import run_echo

CLI_INPUT_SIZE = 1024
CLI_MAX_ARG_COUNT = 10
OS_VERSION = "1.0.1"
DEFAULT_PROMPT = "user >>"
COPY_CHUNK_SIZE = 255


def _esc(param: str, cmd: str) -> str:
    return f"\x1b[{param}{cmd}"


ESC_COLOR_ERROR = _esc("31", "m")
ESC_COLOR_DEFAULT = _esc("39", "m")
ESC_CLEAR_SCREEN = _esc("2", "J")
ESC_CURSOR_HOME = "\x1b[0;0H"


@dataclass(frozen=True)
class Command:
    """A built-in command: its name, usage text and handler."""

    name: str
    description: str
    func: Callable[[List[str]], int]


def split_args(line: str) -> List[str]:
    """Split an input line on spaces, dropping any line ending.

    At most CLI_MAX_ARG_COUNT arguments are kept.
    """
    for ending in ("\n", "\r"):
        cut = line.find(ending)
        if cut >= 0:
            line = line[:cut]
    return [token for token in line.split(" ") if token][:CLI_MAX_ARG_COUNT]


def find_exec_path(name: str) -> Optional[str]:
    """Return ``name`` or ``name.elf``, whichever can be opened first, else None."""
    for candidate in (name, f"{name}.elf"):
        try:
            with open(candidate, "rb"):
                return candidate
        except OSError:
            continue
    return None


class Shell:
    """Reads command lines and runs built-in commands or external programs."""

    def __init__(
        self,
        prompt: str = DEFAULT_PROMPT,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.prompt = prompt
        self.stdin = sys.stdin if stdin is None else stdin
        self.stdout = sys.stdout if stdout is None else stdout
        self.stderr = sys.stderr if stderr is None else stderr
        self.commands: List[Command] = [
            Command("help", "help -- list support command", self._do_help),
            Command("clear", "clear -- clear the screen", self._do_clear),
            Command("echo", "echo [-n count] msg  -- echo something", self._do_echo),
            Command("ls", "ls [dir] -- list director", self._do_ls),
            Command("less", "list text file content", self._do_less),
            Command("cp", "cp from to -- copy file", self._do_cp),
            Command("rm", "rm file -- remove file", self._do_remove),
            Command("quit", "quit from shell", self._do_exit),
        ]

    def find_builtin(self, name: str) -> Optional[Command]:
        """The built-in command called ``name``, or None."""
        return next((cmd for cmd in self.commands if cmd.name == name), None)

    def run_line(self, line: str) -> Optional[int]:
        """Run one command line and return its result; None for a blank line.

        The quit command raises SystemExit.
        """
        argv = split_args(line)
        if not argv:
            return None

        cmd = self.find_builtin(argv[0])
        if cmd is not None:
            ret = cmd.func(argv)
            if ret < 0:
                self.stderr.write(f"{ESC_COLOR_ERROR}error: {ret}\n{ESC_COLOR_DEFAULT}")
            return ret

        path = find_exec_path(argv[0])
        if path is not None:
            return self._run_exec_file(path, argv)

        self.stderr.write(f"{ESC_COLOR_ERROR}Unknown command: {argv[0]}\n{ESC_COLOR_DEFAULT}")
        return -1

    def run(self) -> int:
        """Prompt and run lines until input ends or quit is given; return the exit code."""
        while True:
            self.stdout.write(self.prompt)
            self.stdout.flush()
            line = self.stdin.readline(CLI_INPUT_SIZE - 1)
            if not line:
                return 0
            try:
                self.run_line(line)
            except SystemExit as exc:
                return exc.code if isinstance(exc.code, int) else 0

    def _run_exec_file(self, path: str, argv: List[str]) -> int:
        try:
            process = subprocess.Popen(argv, executable=os.path.abspath(path))
        except OSError:
            self.stderr.write(f"exec failed: {path}")
            return -1
        status = process.wait()
        self.stderr.write(f"cmd {path} result: {status}, pid = {process.pid}\n")
        return status

    def _do_help(self, argv: List[str]) -> int:
        for cmd in self.commands:
            self.stdout.write(f"{cmd.name} {cmd.description}\n")
        return 0

    def _do_clear(self, argv: List[str]) -> int:
        self.stdout.write(ESC_CLEAR_SCREEN)
        self.stdout.write(ESC_CURSOR_HOME)
        return 0

    def _do_echo(self, argv: List[str]) -> int:
        return run_echo(argv, self.stdin, self.stdout, self.stderr)

    def _do_exit(self, argv: List[str]) -> int:
        """Flush pending output and leave the shell with status 0."""
        self.stdout.flush()
        self.stderr.flush()
        raise SystemExit(0)

    def _do_less(self, argv: List[str]) -> int:
        try:
            options, rest = getopt.getopt(argv[1:], "lh")
        except getopt.GetoptError as exc:
            self.stderr.write(f"Unknown option: -{exc.opt}\n")
            return -1

        line_mode = False
        for option, _ in options:
            if option == "-h":
                self.stdout.write("show file content\n")
                self.stdout.write("less [-l] file\n")
                self.stdout.write("-l show file line by line.\n")
            elif option == "-l":
                line_mode = True

        if not rest:
            self.stderr.write("no file\n")
            return -1

        try:
            source = open(rest[0], "r")
        except OSError:
            self.stderr.write(f"open file failed. {rest[0]}")
            return -1

        with source:
            for line in source:
                self.stdout.write(line)
                if line_mode and not self._wait_for_next():
                    break
        return 0

    def _wait_for_next(self) -> bool:
        """Read keys until 'n' (go on) or 'q' / end of input (stop)."""
        self.stdout.flush()
        while True:
            ch = self.stdin.read(1)
            if ch == "n":
                return True
            if ch in ("q", ""):
                return False

    def _do_ls(self, argv: List[str]) -> int:
        target = argv[1] if len(argv) > 1 else "."
        try:
            with os.scandir(target) as scan:
                entries = sorted(scan, key=lambda entry: entry.name)
        except OSError:
            self.stdout.write("open dir failed\n")
            return -1

        for entry in entries:
            is_dir = entry.is_dir()
            size = 0 if is_dir else entry.stat().st_size
            kind = "d" if is_dir else "f"
            self.stdout.write(f"{kind} {entry.name.lower()} {size}\n")
        return 0

    def _do_cp(self, argv: List[str]) -> int:
        if len(argv) < 3:
            self.stdout.write("no [from] or no [to]\n")
            return -1

        src = dst = None
        try:
            try:
                src = open(argv[1], "rb")
            except OSError:
                pass
            try:
                dst = open(argv[2], "wb")
            except OSError:
                pass
            if src is None or dst is None:
                self.stdout.write("open file failed.\n")
                return 0
            shutil.copyfileobj(src, dst, COPY_CHUNK_SIZE)
        finally:
            if src is not None:
                src.close()
            if dst is not None:
                dst.close()
        return 0

    def _do_remove(self, argv: List[str]) -> int:
        if len(argv) < 2:
            self.stderr.write("no file")
            return -1
        try:
            os.unlink(argv[1])
        except OSError:
            self.stderr.write(f"rm file failed: {argv[1]}")
            return -1
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Command entry point: greet and run the interactive loop."""
    out = sys.stdout
    out.write("Welcome to the operating system!\n")
    out.write(f"os version:{OS_VERSION}\n")
    out.write("You can type 'help' to see the commands and how to use them.\n")
    return Shell(DEFAULT_PROMPT, sys.stdin, out, sys.stderr).run()


if __name__ == "__main__":
    sys.exit(main())