"""Game module for Block Rise.

Exports the core game engine and supporting classes:
- Piece / PieceArena: horizontal blocks indexed by stable id
- GameGrid: occupancy queries over the 8x(10+1) grid
- Board: gravity, line clearing, raise and preview row generation
- ScoringRules: combo scoring (100, 300, 700, 1500, ...)
- BlockRiseGame: turn state machine for human and agent play
"""

from .pieces import Piece, PieceArena
from .grid import GameGrid
from .board import Board
from .rules import ScoringRules, calculate_score
from .core import BlockRiseGame, GameConfig, GameState, TurnResult

__all__ = [
    "Piece",
    "PieceArena",
    "GameGrid",
    "Board",
    "ScoringRules",
    "calculate_score",
    "BlockRiseGame",
    "GameConfig",
    "GameState",
    "TurnResult",
]
