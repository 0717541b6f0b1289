import io
import random
from collections import deque

import pytest

from tinyos.snake import ESC_CLEAR_SCREEN, Game, Status


def make_game(rows=25, cols=80, seed=1):
    out = io.StringIO()
    game = Game(rows, cols, out, random.Random(seed))
    return game, out


def test_create_snake_starts_at_fixed_position():
    game, out = make_game()
    game.create_snake()
    assert list(game.body) == [(10, 20)]
    assert game.status == Status.NONE
    assert game.dir == "a"
    assert "\x1b[10;20H*\x1b[10;20H" in out.getvalue()


def test_create_map_draws_walls():
    game, out = make_game(rows=5, cols=6)
    game.create_map()
    text = out.getvalue()
    assert text.startswith(ESC_CLEAR_SCREEN)
    assert "\x1b[0;1H=" in text
    assert "\x1b[4;1H=" in text
    assert "\x1b[1;0H|" in text
    assert "\x1b[1;5H|" in text
    assert "\x1b[0;0H=" not in text


@pytest.mark.parametrize("seed", range(30))
def test_food_inside_walls_and_off_snake(seed):
    game, _ = make_game(rows=8, cols=10, seed=seed)
    game.body = deque([(2, 2), (2, 3), (2, 4)])
    row, col = game.create_food()
    assert game.food == (row, col)
    assert 1 <= row <= game.rows - 3
    assert 1 <= col <= game.cols - 3
    assert (row, col) not in game.body


def test_move_left_keeps_length():
    game, _ = make_game()
    game.create_snake()
    game.food = (20, 70)
    game.move_forward("a")
    assert list(game.body) == [(10, 19)]
    assert game.status == Status.NONE
    assert game.dir == "a"


def test_unknown_key_is_ignored():
    game, _ = make_game()
    game.create_snake()
    game.food = (20, 70)
    game.move_forward("x")
    assert list(game.body) == [(10, 20)]
    assert game.dir == "a"


def test_eating_food_grows_snake():
    game, _ = make_game()
    game.create_snake()
    game.food = (10, 19)
    game.move_forward("a")
    assert game.status == Status.FOOD
    assert list(game.body) == [(10, 19), (10, 20)]
    assert game.food not in game.body


def test_reversal_is_refused():
    game, _ = make_game()
    game.create_snake()
    game.food = (10, 19)
    game.move_forward("a")
    game.move_forward("d")
    assert list(game.body) == [(10, 19), (10, 20)]
    assert game.dir == "a"


def test_hitting_wall_ends_game():
    game, _ = make_game()
    game.create_snake()
    game.food = (20, 70)
    for _ in range(10):
        game.move_forward("w")
    assert game.status == Status.WALL
    assert game.head == (0, 20)
    assert game.is_hit_wall()
    assert game.over


def test_hitting_itself_ends_game():
    game, _ = make_game()
    game.body = deque([(5, 5), (5, 6), (6, 6), (6, 5), (6, 4)])
    game.food = (20, 70)
    game.move_forward("s")
    assert game.status == Status.ITSELF
    assert game.head == (6, 5)
    assert len(game.body) == 5
    assert game.is_hit_itself()


def test_hit_checks():
    game, _ = make_game(rows=10, cols=10)
    game.body = deque([(9, 3)])
    assert game.is_hit_wall()
    game.body = deque([(3, 3)])
    assert not game.is_hit_wall()
    game.food = (3, 3)
    assert game.is_hit_food()
    assert not game.is_hit_itself()


def test_board_too_small_rejected():
    with pytest.raises(ValueError):
        Game(3, 80, io.StringIO())