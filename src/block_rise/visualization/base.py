from __future__ import annotations

from typing import Optional, Protocol

from block_rise.game.board import Board, Movements
from block_rise.game.pieces import Piece


class BoardRenderer(Protocol):
    """Read-only consumer of board snapshots; never feeds back into the game."""

    def draw(self, board: Board, selected: Optional[Piece] = None, score: int = 0) -> None:
        ...

    def play_transition(self, kind: str, board: Board, movements: Movements) -> None:
        ...


class NullRenderer:
    """Renderer stand-in for headless evaluation."""

    def draw(self, board: Board, selected: Optional[Piece] = None, score: int = 0) -> None:
        return None

    def play_transition(self, kind: str, board: Board, movements: Movements) -> None:
        return None
