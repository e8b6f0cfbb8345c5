from __future__ import annotations

from typing import Iterable, Optional

import numpy as np

from .pieces import Piece, PieceArena


class GameGrid:
    """Occupancy queries over a fixed ``width`` x ``height`` cell grid.

    Rows ``0..playable_rows-1`` are the playable surface (row 0 is the top).
    Row ``playable_rows`` is the hidden preview row. The grid never mutates
    pieces; the board engine does.
    """

    def __init__(self, width: int, playable_rows: int, arena: Optional[PieceArena] = None) -> None:
        self.width = int(width)
        self.playable_rows = int(playable_rows)
        self.height = self.playable_rows + 1
        self.arena = arena if arena is not None else PieceArena()

    @property
    def preview_row(self) -> int:
        return self.playable_rows

    @property
    def floor_row(self) -> int:
        return self.playable_rows - 1

    def block_at(self, col: int, row: int) -> Optional[Piece]:
        for piece in self.arena:
            if piece.occupies(col, row):
                return piece
        return None

    def can_place(self, col: int, row: int, width: int) -> bool:
        if col < 0 or col + width > self.width or row < 0 or row > self.preview_row:
            return False
        for c in range(col, col + width):
            if self.block_at(c, row) is not None:
                return False
        return True

    def span_is_free(self, col: int, row: int, width: int, ignore: Iterable[int] = ()) -> bool:
        """True if every cell of the span is empty or owned by an ignored piece id."""
        ignored = set(ignore)
        for c in range(col, col + width):
            other = self.block_at(c, row)
            if other is not None and other.id not in ignored:
                return False
        return True

    def occupancy(self) -> np.ndarray:
        """``height`` x ``width`` array with the occupying piece's width per cell, 0 when empty."""
        grid = np.zeros((self.height, self.width), dtype=np.int8)
        for piece in self.arena:
            if 0 <= piece.y < self.height:
                lo = max(0, piece.x)
                hi = min(self.width, piece.x + piece.width)
                grid[piece.y, lo:hi] = piece.width
        return grid

    def row_fill(self, row: int) -> int:
        return sum(1 for c in range(self.width) if self.block_at(c, row) is not None)
