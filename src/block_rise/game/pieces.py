from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List


MIN_WIDTH = 1
MAX_WIDTH = 4


@dataclass
class Piece:
    """Horizontal block spanning ``width`` cells starting at column ``x`` on row ``y``."""

    id: int
    x: int
    y: int
    width: int

    def occupies(self, col: int, row: int) -> bool:
        return self.y == row and self.x <= col < self.x + self.width

    def copy(self) -> "Piece":
        return Piece(self.id, self.x, self.y, self.width)


class PieceArena:
    """Pieces indexed by a stable integer id.

    Ids are never reused within an arena, so a selection that stores an id
    resolves to ``None`` once its piece has been cleared.
    """

    def __init__(self) -> None:
        self._pieces: Dict[int, Piece] = {}
        self._order: List[int] = []
        self._next_id = 1

    def create(self, x: int, y: int, width: int) -> Piece:
        piece = Piece(self._next_id, int(x), int(y), int(width))
        self._next_id += 1
        self._pieces[piece.id] = piece
        self._order.append(piece.id)
        return piece

    def get(self, piece_id: int) -> Piece | None:
        return self._pieces.get(piece_id)

    def remove(self, piece_id: int) -> None:
        if self._pieces.pop(piece_id, None) is not None:
            self._order.remove(piece_id)

    def ids(self) -> List[int]:
        return list(self._order)

    def copy(self) -> "PieceArena":
        clone = PieceArena()
        clone._pieces = {pid: p.copy() for pid, p in self._pieces.items()}
        clone._order = list(self._order)
        clone._next_id = self._next_id
        return clone

    def __iter__(self) -> Iterator[Piece]:
        for pid in self._order:
            yield self._pieces[pid]

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, piece_id: object) -> bool:
        return piece_id in self._pieces
