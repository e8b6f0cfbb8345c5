from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .grid import GameGrid
from .pieces import MAX_WIDTH, MIN_WIDTH, Piece, PieceArena


DEFAULT_WIDTH = 8
DEFAULT_PLAYABLE_ROWS = 10

INITIAL_PIECES = (8, 12)
PREVIEW_PIECES = (2, 4)
PREVIEW_ATTEMPTS = 20

# piece id -> (start_row, end_row)
Movements = Dict[int, Tuple[int, int]]


class Board:
    """Board engine: placed pieces, gravity, line clearing and the rising preview row."""

    def __init__(
        self,
        width: int = DEFAULT_WIDTH,
        playable_rows: int = DEFAULT_PLAYABLE_ROWS,
        rng: Optional[random.Random] = None,
        populate: bool = True,
        initial_pieces: Tuple[int, int] = INITIAL_PIECES,
        preview_pieces: Tuple[int, int] = PREVIEW_PIECES,
    ) -> None:
        self.rng = rng or random.Random()
        self.grid = GameGrid(width, playable_rows)
        self.initial_pieces = initial_pieces
        self.preview_pieces = preview_pieces
        if populate:
            self.init()

    @classmethod
    def from_pieces(
        cls,
        pieces: Iterable[Tuple[int, int, int]],
        width: int = DEFAULT_WIDTH,
        playable_rows: int = DEFAULT_PLAYABLE_ROWS,
        rng: Optional[random.Random] = None,
    ) -> "Board":
        """Build a board from explicit ``(x, y, width)`` spans without settling.

        Raises ``ValueError`` if a span is out of bounds or overlaps another.
        """
        board = cls(width, playable_rows, rng=rng, populate=False)
        for x, y, w in pieces:
            if not board.grid.can_place(x, y, w):
                raise ValueError(f"cannot place piece at x={x} y={y} width={w}")
            board.arena.create(x, y, w)
        return board

    # ---------- Accessors ----------
    @property
    def arena(self) -> PieceArena:
        return self.grid.arena

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def playable_rows(self) -> int:
        return self.grid.playable_rows

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def preview_row(self) -> int:
        return self.grid.preview_row

    @property
    def floor_row(self) -> int:
        return self.grid.floor_row

    @property
    def pieces(self) -> List[Piece]:
        return list(self.arena)

    def get(self, piece_id: int) -> Optional[Piece]:
        return self.arena.get(piece_id)

    def block_at(self, col: int, row: int) -> Optional[Piece]:
        return self.grid.block_at(col, row)

    def can_place(self, col: int, row: int, width: int) -> bool:
        return self.grid.can_place(col, row, width)

    def occupancy(self) -> np.ndarray:
        return self.grid.occupancy()

    def playable_pieces(self) -> List[Piece]:
        return [p for p in self.arena if 0 <= p.y < self.playable_rows]

    def preview_pieces_on_board(self) -> List[Piece]:
        return [p for p in self.arena if p.y == self.preview_row]

    def copy(self) -> "Board":
        clone = Board(self.width, self.playable_rows, rng=random.Random(), populate=False,
                      initial_pieces=self.initial_pieces, preview_pieces=self.preview_pieces)
        clone.rng.setstate(self.rng.getstate())
        clone.grid.arena = self.arena.copy()
        return clone

    # ---------- Generation ----------
    def init(self) -> None:
        self.grid.arena = PieceArena()
        self.generate_initial_pieces()
        self.settle()
        self.generate_preview_row()

    def generate_initial_pieces(self) -> int:
        lo, hi = self.initial_pieces
        count = self.rng.randint(lo, hi)
        band_top = self.playable_rows // 2
        placed = 0
        for _ in range(count):
            width = self.rng.randint(MIN_WIDTH, MAX_WIDTH)
            x = self.rng.randint(0, self.width - width)
            y = self.rng.randint(band_top, self.floor_row)
            if self.grid.can_place(x, y, width):
                self.arena.create(x, y, width)
                placed += 1
        return placed

    def generate_preview_row(self) -> int:
        """Replace the preview row with 2-4 random pieces; collisions yield fewer pieces."""
        for piece in self.preview_pieces_on_board():
            self.arena.remove(piece.id)
        lo, hi = self.preview_pieces
        count = self.rng.randint(lo, hi)
        placed = 0
        for _ in range(count):
            width = self.rng.randint(MIN_WIDTH, MAX_WIDTH)
            for _attempt in range(PREVIEW_ATTEMPTS):
                x = self.rng.randint(0, self.width - width)
                if self.grid.can_place(x, self.preview_row, width):
                    self.arena.create(x, self.preview_row, width)
                    placed += 1
                    break
        return placed

    # ---------- Movement ----------
    def can_move(self, piece: Piece, new_x: int) -> bool:
        if new_x < 0 or new_x + piece.width > self.width:
            return False
        return self.grid.span_is_free(new_x, piece.y, piece.width, ignore=(piece.id,))

    def move(self, piece: Piece, new_x: int) -> None:
        # Caller validates with can_move
        piece.x = int(new_x)

    def drop(self, piece: Piece) -> bool:
        """Let one piece fall as far as it can above the preview row."""
        target = piece.y
        for y in range(piece.y + 1, self.floor_row + 1):
            if self.grid.span_is_free(piece.x, y, piece.width, ignore=(piece.id,)):
                target = y
            else:
                break
        moved = target != piece.y
        piece.y = target
        return moved

    def settle(self) -> Movements:
        """Run gravity to a fixed point and return the rows each moved piece fell through."""
        movements: Movements = {}
        any_moved = True
        while any_moved:
            any_moved = False
            playable = sorted(self.playable_pieces(), key=lambda p: p.y, reverse=True)
            for piece in playable:
                start = piece.y
                if self.drop(piece):
                    any_moved = True
                    first = movements.get(piece.id, (start, start))[0]
                    movements[piece.id] = (first, piece.y)
        return movements

    def is_settled(self) -> bool:
        for piece in self.playable_pieces():
            if piece.y == self.floor_row:
                continue
            if self.grid.span_is_free(piece.x, piece.y + 1, piece.width, ignore=(piece.id,)):
                return False
        return True

    # ---------- Lines ----------
    def check_complete_lines(self) -> List[int]:
        return [row for row in range(self.playable_rows) if self.grid.row_fill(row) == self.width]

    def clear_lines(self, rows: Sequence[int], settle: bool = True) -> List[Piece]:
        """Remove every piece on any of ``rows`` as one batch, then settle."""
        targets = set(rows)
        if not targets:
            return []
        removed = [p for p in self.arena if p.y in targets and p.y < self.preview_row]
        for piece in removed:
            self.arena.remove(piece.id)
        if settle:
            self.settle()
        return removed

    # ---------- Raise ----------
    def has_piece_at_top(self) -> bool:
        return any(p.y == 0 for p in self.playable_pieces())

    def raise_rows(self) -> bool:
        """Shift playable rows up one and promote the preview row.

        Returns False without touching the board when a piece already sits on
        row 0; that is the game-over signal.
        """
        if self.has_piece_at_top():
            return False
        for piece in self.arena:
            if piece.y < self.preview_row:
                piece.y -= 1
            elif piece.y == self.preview_row:
                piece.y = self.floor_row
        self.generate_preview_row()
        return True
