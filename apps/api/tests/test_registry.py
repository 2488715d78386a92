"""Unit tests for the character registry (pure board functions)."""

import random

import pytest

from guessboard.modules.board import registry
from guessboard.modules.board.schemas import MAX_CHARACTERS, GamePhase, GameState, RemoteImage

from conftest import remote_char


def _board(n: int):
    return [remote_char(f"c{i}") for i in range(n)]


class TestCapacity:
    def test_single_batch_is_truncated_at_capacity(self):
        out = registry.add_many([], _board(30))
        assert len(out) == MAX_CHARACTERS
        assert [c.name for c in out] == [f"c{i}" for i in range(MAX_CHARACTERS)]

    def test_multiple_batches_never_exceed_capacity(self):
        out = registry.add_many([], _board(15))
        out = registry.add_many(out, [remote_char(f"x{i}") for i in range(15)])
        assert len(out) == MAX_CHARACTERS

    def test_add_on_full_board_is_noop(self):
        full = _board(MAX_CHARACTERS)
        out = registry.add(full, remote_char("extra"))
        assert len(out) == MAX_CHARACTERS
        assert registry.find(out, "id-extra") is None

    def test_duplicate_id_is_ignored(self):
        out = registry.add([remote_char("a")], remote_char("a"))
        assert len(out) == 1


class TestFillToCapacity:
    def test_fills_from_twenty_with_four_placeholders(self):
        start = _board(20)
        out = registry.fill_to_capacity(start)
        assert len(out) == MAX_CHARACTERS
        assert [c.name for c in out[20:]] == ["Person 21", "Person 22", "Person 23", "Person 24"]
        assert all(isinstance(c.image, RemoteImage) for c in out[20:])
        assert all("picsum.photos/seed/" in c.image.url for c in out[20:])

    def test_full_board_adds_nothing(self):
        full = registry.fill_to_capacity(_board(20))
        again = registry.fill_to_capacity(full)
        assert [c.id for c in again] == [c.id for c in full]

    def test_placeholder_ids_are_unique(self):
        out = registry.fill_to_capacity([])
        assert len({c.id for c in out}) == MAX_CHARACTERS

    def test_custom_factory(self):
        out = registry.fill_to_capacity(_board(22), factory=lambda pos, off: remote_char(f"p{pos}"))
        assert [c.name for c in out[22:]] == ["p23", "p24"]


class TestRemoveAndClear:
    def test_remove_returns_removed_character(self):
        board = _board(3)
        out, removed = registry.remove(board, "id-c1")
        assert removed is not None and removed.name == "c1"
        assert [c.name for c in out] == ["c0", "c2"]

    def test_remove_absent_is_noop(self):
        board = _board(3)
        out, removed = registry.remove(board, "nope")
        assert removed is None
        assert out == board

    def test_clear_drops_board_and_secret(self):
        state = GameState(phase=GamePhase.SETUP, characters=_board(3), secret_character_id="id-c0")
        cleared = registry.clear(state)
        assert cleared.characters == []
        assert cleared.secret_character_id is None


class TestElimination:
    def test_toggle_flips_only_target(self):
        board = _board(3)
        out = registry.toggle_eliminated(board, "id-c1")
        assert [c.is_eliminated for c in out] == [False, True, False]
        out = registry.toggle_eliminated(out, "id-c1")
        assert [c.is_eliminated for c in out] == [False, False, False]

    def test_toggle_does_not_mutate_input(self):
        board = _board(2)
        registry.toggle_eliminated(board, "id-c0")
        assert board[0].is_eliminated is False

    def test_toggle_absent_is_noop(self):
        board = _board(2)
        out = registry.toggle_eliminated(board, "nope")
        assert out == board

    @pytest.mark.parametrize("seed", [0, 1, 7, 42])
    def test_counts_always_add_up(self, seed):
        rng = random.Random(seed)
        board = _board(MAX_CHARACTERS)
        for _ in range(200):
            board = registry.toggle_eliminated(board, f"id-c{rng.randrange(MAX_CHARACTERS + 3)}")
            assert registry.remaining_count(board) + registry.eliminated_count(board) == len(board)

    def test_reset_eliminations(self):
        board = [remote_char("a", eliminated=True), remote_char("b")]
        out = registry.reset_eliminations(board)
        assert [c.is_eliminated for c in out] == [False, False]
        assert [(c.id, c.name, c.image) for c in out] == [(c.id, c.name, c.image) for c in board]


class TestReplace:
    def test_replace_builds_fresh_board(self):
        rows = [(f"r{i}", f"Saved {i}", f"https://cdn.example/{i}.png") for i in range(5)]
        out = registry.replace(rows)
        assert [c.id for c in out] == [f"r{i}" for i in range(5)]
        assert all(not c.is_eliminated for c in out)
        assert out[0].image == RemoteImage(url="https://cdn.example/0.png")
