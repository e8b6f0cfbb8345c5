"""Tests for the grid model and board engine."""

import random

import pytest

from block_rise.game import Board, GameGrid, calculate_score
from block_rise.game.rules import ScoringRules


def positions(board):
    return sorted((p.x, p.y, p.width) for p in board.pieces)


class TestGrid:
    def test_block_at(self):
        board = Board.from_pieces([(2, 9, 3)])
        piece = board.block_at(2, 9)
        assert piece is not None
        assert board.block_at(4, 9) is piece
        assert board.block_at(5, 9) is None
        assert board.block_at(2, 8) is None

    def test_can_place_bounds(self):
        grid = GameGrid(8, 10)
        assert grid.can_place(0, 0, 4)
        assert grid.can_place(4, 10, 4)
        assert not grid.can_place(-1, 0, 1)
        assert not grid.can_place(5, 0, 4)
        assert not grid.can_place(0, -1, 1)
        assert not grid.can_place(0, 11, 1)

    def test_can_place_collision(self):
        board = Board.from_pieces([(2, 9, 3)])
        assert not board.can_place(0, 9, 3)
        assert board.can_place(0, 9, 2)
        assert board.can_place(5, 9, 3)

    def test_from_pieces_rejects_overlap(self):
        with pytest.raises(ValueError):
            Board.from_pieces([(0, 9, 4), (3, 9, 2)])

    def test_occupancy_holds_widths(self):
        board = Board.from_pieces([(0, 9, 4), (6, 10, 2)])
        grid = board.occupancy()
        assert grid.shape == (11, 8)
        assert list(grid[9]) == [4, 4, 4, 4, 0, 0, 0, 0]
        assert list(grid[10]) == [0, 0, 0, 0, 0, 0, 2, 2]


class TestGravity:
    def test_single_piece_falls_to_floor(self):
        board = Board.from_pieces([(0, 3, 2)])
        movements = board.settle()
        piece = board.pieces[0]
        assert piece.y == 9
        assert movements == {piece.id: (3, 9)}

    def test_piece_rests_on_partial_support(self):
        board = Board.from_pieces([(0, 9, 2), (1, 2, 3)])
        board.settle()
        assert positions(board) == [(0, 9, 2), (1, 8, 3)]

    def test_cascading_collapse(self):
        board = Board.from_pieces([(0, 4, 2), (0, 5, 2), (0, 6, 2)])
        board.settle()
        assert positions(board) == [(0, 7, 2), (0, 8, 2), (0, 9, 2)]

    def test_preview_row_is_not_affected(self):
        board = Board.from_pieces([(0, 10, 3), (4, 1, 1)])
        board.settle()
        assert positions(board) == [(0, 10, 3), (4, 9, 1)]

    def test_settle_is_idempotent(self):
        board = Board.from_pieces([(0, 1, 3), (2, 4, 4), (5, 0, 2), (1, 6, 1)])
        board.settle()
        once = positions(board)
        assert board.settle() == {}
        assert positions(board) == once

    @pytest.mark.parametrize("seed", range(15))
    def test_generated_boards_are_settled(self, seed):
        board = Board(rng=random.Random(seed))
        assert board.is_settled()
        for piece in board.playable_pieces():
            below_free = board.grid.span_is_free(piece.x, piece.y + 1, piece.width, ignore=(piece.id,))
            assert piece.y == board.floor_row or not below_free
        # no overlaps: every piece contributes its full width to the occupancy grid
        assert int((board.occupancy() > 0).sum()) == sum(p.width for p in board.pieces)

    @pytest.mark.parametrize("seed", range(15))
    def test_generated_preview_row(self, seed):
        board = Board(rng=random.Random(seed))
        preview = board.preview_pieces_on_board()
        assert 1 <= len(preview) <= 4
        assert all(1 <= p.width <= 4 for p in board.pieces)
        assert len(board.playable_pieces()) <= 12


class TestMoves:
    def test_can_move(self):
        board = Board.from_pieces([(0, 9, 2), (3, 9, 2)])
        left, right = sorted(board.pieces, key=lambda p: p.x)
        assert board.can_move(left, 1)
        assert not board.can_move(left, 2)
        assert not board.can_move(left, -1)
        assert board.can_move(right, 6)
        assert not board.can_move(right, 7)

    def test_move_reassigns_column(self):
        board = Board.from_pieces([(0, 9, 2)])
        piece = board.pieces[0]
        board.move(piece, 5)
        assert piece.x == 5
        assert board.block_at(6, 9) is piece


class TestLines:
    def test_single_full_row_piece(self):
        board = Board.from_pieces([(0, 0, 8)])
        assert board.check_complete_lines() == [0]
        board.clear_lines([0])
        assert board.pieces == []

    def test_clear_drops_rows_above(self):
        board = Board.from_pieces([(0, 9, 4), (4, 9, 4), (2, 8, 2), (6, 8, 1)])
        assert board.check_complete_lines() == [9]
        removed = board.clear_lines([9])
        assert sorted((p.x, p.width) for p in removed) == [(0, 4), (4, 4)]
        assert positions(board) == [(2, 9, 2), (6, 9, 1)]

    def test_lines_are_ascending(self):
        board = Board.from_pieces([(0, 9, 4), (4, 9, 4), (0, 8, 4), (4, 8, 4), (0, 7, 1)])
        assert board.check_complete_lines() == [8, 9]

    def test_preview_row_never_counts(self):
        board = Board.from_pieces([(0, 10, 4), (4, 10, 4)])
        assert board.check_complete_lines() == []

    def test_clear_order_does_not_matter(self):
        layout = [(0, 9, 4), (4, 9, 4), (0, 8, 3), (3, 8, 3), (6, 8, 2), (1, 7, 2), (5, 6, 3)]
        a = Board.from_pieces(layout)
        b = Board.from_pieces(layout)
        removed_a = a.clear_lines([8, 9])
        removed_b = b.clear_lines([9, 8, 9])
        assert len(removed_a) == len(removed_b) == 5
        assert positions(a) == positions(b) == [(1, 9, 2), (5, 9, 3)]


class TestRaise:
    def test_raise_rejected_when_top_row_occupied(self):
        board = Board.from_pieces([(0, 0, 2), (3, 10, 2)])
        before = positions(board)
        assert board.raise_rows() is False
        assert positions(board) == before

    def test_raise_promotes_preview(self):
        board = Board.from_pieces([(0, 9, 2), (3, 10, 2)], rng=random.Random(3))
        old_ids = {p.id: (p.x, p.width) for p in board.pieces}
        assert board.raise_rows() is True
        by_id = {p.id: p for p in board.pieces}
        promoted = [pid for pid, (x, w) in old_ids.items() if x == 3]
        stayed = [pid for pid, (x, w) in old_ids.items() if x == 0]
        assert by_id[stayed[0]].y == 8
        assert by_id[promoted[0]].y == 9
        new_preview = board.preview_pieces_on_board()
        assert 1 <= len(new_preview) <= 4
        assert all(p.id not in old_ids for p in new_preview)

    def test_copy_is_independent(self):
        board = Board.from_pieces([(0, 5, 2)])
        clone = board.copy()
        clone.settle()
        assert positions(board) == [(0, 5, 2)]
        assert positions(clone) == [(0, 9, 2)]


class TestScoring:
    @pytest.mark.parametrize("lines,expected", [(0, 0), (1, 100), (2, 300), (3, 700), (4, 1500)])
    def test_calculate_score(self, lines, expected):
        assert calculate_score(lines) == expected

    def test_custom_base(self):
        assert ScoringRules(base_score=10).calculate_score(3) == 70
