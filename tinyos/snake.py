"""A terminal snake game drawn with ANSI escape sequences."""

from __future__ import annotations

import contextlib
import random
import select
import sys
import time
from collections import deque
from enum import IntEnum
from typing import Deque, Iterator, List, Optional, TextIO, Tuple

ESC_CLEAR_SCREEN = "\x1b[2J"

KEY_UP = "w"
KEY_DOWN = "s"
KEY_LEFT = "a"
KEY_RIGHT = "d"
KEY_QUIT = "q"

DEFAULT_ROWS = 25
DEFAULT_COLS = 80
START_POSITION = (10, 20)
TICK_SECONDS = 0.01
AUTO_MOVE_TICKS = 50

_STEPS = {
    KEY_LEFT: (0, -1),
    KEY_RIGHT: (0, 1),
    KEY_UP: (-1, 0),
    KEY_DOWN: (1, 0),
}

Position = Tuple[int, int]


class Status(IntEnum):
    """What happened on the snake's last move."""

    NONE = 0
    ITSELF = 1
    WALL = 2
    FOOD = 3


class Game:
    """One snake on a walled board with a single piece of food."""

    def __init__(
        self,
        rows: int = DEFAULT_ROWS,
        cols: int = DEFAULT_COLS,
        out: Optional[TextIO] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if rows < 4 or cols < 4:
            raise ValueError(f"board of {rows}x{cols} is too small")
        self.rows = rows
        self.cols = cols
        self.out = sys.stdout if out is None else out
        self.rng = random.Random() if rng is None else rng
        self.body: Deque[Position] = deque()
        self.food: Optional[Position] = None
        self.status = Status.NONE
        self.dir = KEY_LEFT

    @property
    def head(self) -> Position:
        return self.body[0]

    def _show_char(self, row: int, col: int, c: str) -> None:
        self.out.write(f"\x1b[{row};{col}H{c}\x1b[{row};{col}H")

    def _show_string(self, row: int, col: int, text: str) -> None:
        self.out.write(f"\x1b[{row};{col}H{text}")

    def clear_map(self) -> None:
        self.out.write(ESC_CLEAR_SCREEN)

    def create_map(self) -> None:
        """Clear the screen and draw the surrounding walls."""
        self.clear_map()
        for col in range(1, self.cols - 1):
            self._show_char(0, col, "=")
        for col in range(1, self.cols - 1):
            self._show_char(self.rows - 1, col, "=")
        for row in range(1, self.rows - 1):
            self._show_char(row, 0, "|")
        for row in range(1, self.rows - 1):
            self._show_char(row, self.cols - 1, "|")

    def create_snake(self) -> None:
        """Place a one-part snake at the start position, heading left."""
        self.body = deque([START_POSITION])
        self.status = Status.NONE
        self.dir = KEY_LEFT
        self._show_char(*START_POSITION, "*")

    def create_food(self) -> Position:
        """Put food on a random free cell inside the walls and return its position."""
        occupied = set(self.body)
        while True:
            row = 1 + self.rng.randrange(self.rows - 3)
            col = 1 + self.rng.randrange(self.cols - 3)
            if (row, col) not in occupied:
                self.food = (row, col)
                self._show_char(row, col, "*")
                return self.food

    def is_hit_itself(self) -> bool:
        head = self.head
        return any(part == head for part in list(self.body)[1:])

    def is_hit_wall(self) -> bool:
        row, col = self.head
        return row <= 0 or col <= 0 or row >= self.rows - 1 or col >= self.cols - 1

    def is_hit_food(self) -> bool:
        return self.head == self.food

    def _add_head(self, row: int, col: int) -> None:
        self.body.appendleft((row, col))
        self._show_char(row, col, "*")

    def _remove_tail(self) -> None:
        row, col = self.body.pop()
        self._show_char(row, col, " ")

    def move_forward(self, key: str) -> None:
        """Move one cell in the direction of ``key``; other keys are ignored.

        A move straight back onto the second body part is refused.
        """
        step = _STEPS.get(key)
        if step is None:
            return
        row, col = self.head
        target = (row + step[0], col + step[1])
        if len(self.body) > 1 and self.body[1] == target:
            return

        self._add_head(*target)
        if self.is_hit_itself():
            self.status = Status.ITSELF
            self._remove_tail()
        elif self.is_hit_wall():
            self.status = Status.WALL
            self._remove_tail()
        elif self.is_hit_food():
            self.food = None
            self.create_food()
            self.status = Status.FOOD
        else:
            self._remove_tail()
            self.status = Status.NONE

        self.dir = key
        self.out.flush()

    @property
    def over(self) -> bool:
        return self.status in (Status.ITSELF, Status.WALL)

    def _show_welcome(self) -> None:
        self.clear_map()
        self._show_string(0, 0, "Welcome to sname game")
        self._show_string(1, 0, "Use a.w.s.d to move snake")
        self._show_string(2, 0, "Press any key to start game")
        self.out.flush()

    def _begin(self) -> None:
        self.create_map()
        self.create_snake()
        self.create_food()
        self.out.flush()

    def _show_game_over(self) -> None:
        row, col = self.rows // 2, self.cols // 2
        self._show_string(row, col, "GAME OVER")
        self._show_string(row + 1, col, "Press Any key to continue")
        self.out.flush()


@contextlib.contextmanager
def _raw_input(stream: TextIO) -> Iterator[None]:
    """Turn off echo and line buffering on a terminal for the duration."""
    try:
        import termios
        import tty
    except ImportError:
        yield
        return
    if not stream.isatty():
        yield
        return
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def _key_ready(stream: TextIO) -> bool:
    try:
        ready, _, _ = select.select([stream], [], [], 0)
    except (OSError, ValueError):
        return True
    return bool(ready)


def main(argv: Optional[List[str]] = None) -> int:
    """Command entry point: play until the snake hits a wall or itself."""
    stdin = sys.stdin
    game = Game(DEFAULT_ROWS, DEFAULT_COLS, sys.stdout)
    with _raw_input(stdin):
        game._show_welcome()
        stdin.read(1)
        game._begin()
        ticks = 0
        while True:
            if _key_ready(stdin):
                key = stdin.read(1)
                if not key:
                    break
                game.move_forward(key)
            else:
                ticks += 1
                if ticks % AUTO_MOVE_TICKS == 0:
                    game.move_forward(game.dir)
            if game.over:
                game._show_game_over()
                stdin.read(1)
                break
            time.sleep(TICK_SECONDS)
    game.clear_map()
    game.out.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())