from __future__ import annotations

from typing import NamedTuple, Sequence

import numpy as np

from block_rise.game.board import DEFAULT_PLAYABLE_ROWS, DEFAULT_WIDTH, Board
from block_rise.game.pieces import MAX_WIDTH


INPUT_SIZE = (DEFAULT_PLAYABLE_ROWS + 1) * DEFAULT_WIDTH
# source column + source row (playable rows and preview row) + target column
OUTPUT_SIZE = DEFAULT_WIDTH + (DEFAULT_PLAYABLE_ROWS + 1) + DEFAULT_WIDTH

SURVIVAL_BONUS = 1.0
MIN_MOVES_FOR_FULL_FITNESS = 5
EARLY_DEATH_FACTOR = 0.1


class AgentAction(NamedTuple):
    select_col: int
    select_row: int
    target_col: int


def encode_board(board: Board) -> np.ndarray:
    """Row-major cell features: 0 for empty, ``width / 4`` for occupied cells."""
    return (board.occupancy().astype(np.float32) / float(MAX_WIDTH)).reshape(-1)


def argmax(values: Sequence[float]) -> int:
    """Index of the first maximal element; 0 for an empty sequence."""
    if len(values) == 0:
        return 0
    best_idx = 0
    best_val = values[0]
    for i in range(1, len(values)):
        if values[i] > best_val:
            best_val = values[i]
            best_idx = i
    return best_idx


def decode_action(outputs: Sequence[float], width: int = DEFAULT_WIDTH,
                  playable_rows: int = DEFAULT_PLAYABLE_ROWS) -> AgentAction:
    rows = playable_rows + 1
    needed = width + rows + width
    values = np.asarray(outputs, dtype=np.float64).reshape(-1)
    if values.shape[0] < needed:
        raise ValueError(f"expected at least {needed} outputs, got {values.shape[0]}")
    select_col = argmax(values[:width])
    select_row = argmax(values[width:width + rows])
    target_col = argmax(values[width + rows:needed])
    return AgentAction(select_col, select_row, target_col)


def compute_fitness(score: float, successful_moves: int) -> float:
    fitness = float(score) + SURVIVAL_BONUS
    if successful_moves < MIN_MOVES_FOR_FULL_FITNESS:
        fitness *= EARLY_DEATH_FACTOR
    return max(0.0, fitness)
