from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from .board import (
    DEFAULT_PLAYABLE_ROWS,
    DEFAULT_WIDTH,
    INITIAL_PIECES,
    PREVIEW_PIECES,
    Board,
    Movements,
)
from .pieces import Piece
from .rules import ScoringRules


class GameState(str, Enum):
    IDLE = "idle"
    SELECTED = "selected"
    RESOLVING = "resolving"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    width: int = DEFAULT_WIDTH
    playable_rows: int = DEFAULT_PLAYABLE_ROWS
    random_seed: Optional[int] = None
    # Interactive turns must move the selected piece before confirming
    interactive: bool = True
    initial_pieces: Tuple[int, int] = INITIAL_PIECES
    preview_pieces: Tuple[int, int] = PREVIEW_PIECES


@dataclass
class TurnResult:
    accepted: bool
    score_delta: int = 0
    lines_cleared: List[int] = field(default_factory=list)
    game_over: bool = False


# (kind, board, movements) with kind in {"fall", "clear", "raise"}
TransitionCallback = Callable[[str, Board, Movements], None]


class BlockRiseGame:
    """Turn resolver: selection, horizontal moves and the settle/clear/raise pipeline."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        on_transition: Optional[TransitionCallback] = None,
        board: Optional[Board] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.on_transition = on_transition
        self.rng = random.Random(self.config.random_seed)
        self.board: Board
        self.score = 0
        self.turns_completed = 0
        self.lines_cleared_total = 0
        self.state = GameState.IDLE
        self.selected_id: Optional[int] = None
        self.selected_original_x: Optional[int] = None
        self._state_before_pause = GameState.IDLE
        self.reset(board=board)

    def reset(self, seed: Optional[int] = None, board: Optional[Board] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        if board is not None:
            board.rng = self.rng
            self.board = board
        else:
            self.board = Board(
                self.config.width,
                self.config.playable_rows,
                rng=self.rng,
                initial_pieces=self.config.initial_pieces,
                preview_pieces=self.config.preview_pieces,
            )
        self.score = 0
        self.turns_completed = 0
        self.lines_cleared_total = 0
        self.state = GameState.IDLE
        self._clear_selection()

    # ---------- Queries ----------
    @property
    def game_over(self) -> bool:
        return self.state == GameState.GAME_OVER

    @property
    def is_playing(self) -> bool:
        return self.state in (GameState.IDLE, GameState.SELECTED)

    @property
    def selected_piece(self) -> Optional[Piece]:
        if self.selected_id is None:
            return None
        return self.board.get(self.selected_id)

    # ---------- Selection ----------
    def _clear_selection(self) -> None:
        self.selected_id = None
        self.selected_original_x = None
        if self.state == GameState.SELECTED:
            self.state = GameState.IDLE

    def select(self, piece: Union[Piece, int]) -> bool:
        if not self.is_playing:
            return False
        piece_id = piece if isinstance(piece, int) else piece.id
        target = self.board.get(piece_id)
        if target is None or not (0 <= target.y < self.board.playable_rows):
            return False
        self.selected_id = target.id
        self.selected_original_x = target.x
        self.state = GameState.SELECTED
        return True

    def select_at(self, col: int, row: int) -> bool:
        piece = self.board.block_at(col, row)
        if piece is None:
            return False
        return self.select(piece)

    def cancel(self) -> None:
        if self.state == GameState.SELECTED:
            self._clear_selection()

    def move(self, direction: int) -> bool:
        if self.state != GameState.SELECTED:
            return False
        piece = self.selected_piece
        if piece is None:
            self._clear_selection()
            return False
        new_x = piece.x + direction
        if not self.board.can_move(piece, new_x):
            return False
        self.board.move(piece, new_x)
        return True

    # ---------- Turn resolution ----------
    def confirm(self) -> TurnResult:
        return self._confirm(require_move=self.config.interactive)

    def _confirm(self, require_move: bool) -> TurnResult:
        if self.state != GameState.SELECTED:
            return TurnResult(accepted=False)
        piece = self.selected_piece
        if piece is None or (require_move and piece.x == self.selected_original_x):
            # Selecting without moving is not a turn
            self._clear_selection()
            return TurnResult(accepted=False)
        self.selected_id = None
        self.selected_original_x = None
        self.state = GameState.RESOLVING
        return self._resolve_turn()

    def _resolve_turn(self) -> TurnResult:
        result = TurnResult(accepted=True)
        self._notify("fall", self.board.settle())
        self._clear_pass(result)

        before = {p.id: p.y for p in self.board.pieces}
        if not self.board.raise_rows():
            result.game_over = True
            self.state = GameState.GAME_OVER
            self.turns_completed += 1
            return result
        raised: Movements = {}
        for piece in self.board.pieces:
            start = before.get(piece.id)
            if start is not None and start != piece.y:
                raised[piece.id] = (start, piece.y)
        self._notify("raise", raised)

        self._notify("fall", self.board.settle())
        # Raising can complete fresh lines
        self._clear_pass(result)

        self.turns_completed += 1
        self.state = GameState.IDLE
        return result

    def _clear_pass(self, result: TurnResult) -> None:
        rows = self.board.check_complete_lines()
        if not rows:
            return
        gained = self.rules.calculate_score(len(rows))
        self.score += gained
        self.lines_cleared_total += len(rows)
        result.score_delta += gained
        result.lines_cleared.append(len(rows))
        removed = self.board.clear_lines(rows, settle=False)
        self._notify("clear", {p.id: (p.y, p.y) for p in removed})
        self._notify("fall", self.board.settle())

    def _notify(self, kind: str, movements: Movements) -> None:
        if self.on_transition is not None:
            self.on_transition(kind, self.board, movements)

    # ---------- Agent turns ----------
    def perform_agent_action(self, select_col: int, select_row: int, target_col: int) -> bool:
        """Play one full turn from a decoded agent action.

        Falls back to a random playable piece when the decoded cell is empty,
        and to a one-cell shift when the target column is unreachable.
        Returns False, leaving the board untouched, when no move is possible.
        """
        if not self.is_playing:
            return False
        playable = self.board.playable_pieces()
        if not playable:
            return False

        piece: Optional[Piece] = None
        if 0 <= select_row < self.board.playable_rows:
            piece = self.board.block_at(select_col, select_row)
        if piece is None:
            piece = self.rng.choice(playable)
        self.select(piece)

        moved = False
        if (
            0 <= target_col < self.board.width
            and target_col != piece.x
            and target_col + piece.width <= self.board.width
            and self.board.can_move(piece, target_col)
        ):
            self.board.move(piece, target_col)
            moved = True
        if not moved:
            for step in (-1, 1):
                if self.board.can_move(piece, piece.x + step):
                    self.board.move(piece, piece.x + step)
                    moved = True
                    break

        if not moved:
            self._clear_selection()
            return False
        self._confirm(require_move=False)
        return True

    # ---------- Pause ----------
    def pause(self) -> bool:
        if not self.is_playing:
            return False
        self._state_before_pause = self.state
        self.state = GameState.PAUSED
        return True

    def resume(self) -> bool:
        if self.state != GameState.PAUSED:
            return False
        if self._state_before_pause == GameState.SELECTED and self.selected_piece is not None:
            self.state = GameState.SELECTED
        else:
            self.state = GameState.IDLE
            self.selected_id = None
            self.selected_original_x = None
        return True

    def get_state(self) -> dict:
        return {
            "grid": self.board.occupancy(),
            "score": self.score,
            "turns_completed": self.turns_completed,
            "lines_cleared_total": self.lines_cleared_total,
            "state": self.state.value,
            "selected_id": self.selected_id,
            "game_over": self.game_over,
        }
