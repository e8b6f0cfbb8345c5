from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from block_rise.ai.codec import AgentAction, compute_fitness, decode_action, encode_board
from block_rise.game.core import BlockRiseGame, GameConfig
from block_rise.visualization.base import BoardRenderer
from .interfaces import Genome

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    max_moves: int = 500
    max_consecutive_failures: int = 10


@dataclass
class SimulationResult:
    score: int
    successful_moves: int
    attempts: int
    consecutive_failures: int
    reason: str  # "game_over", "move_cap" or "failure_cap"
    fitness: float


# (game, action, success) after every attempted turn
StepCallback = Callable[[BlockRiseGame, AgentAction, bool], None]


def run_simulation(
    genome: Genome,
    game_config: Optional[GameConfig] = None,
    sim_config: Optional[SimulationConfig] = None,
    game_factory: Optional[Callable[[], BlockRiseGame]] = None,
    renderer: Optional[BoardRenderer] = None,
    on_step: Optional[StepCallback] = None,
) -> SimulationResult:
    """Play one game to completion under ``genome``'s control and score it.

    Each call builds its own game, so concurrent calls share nothing but the
    (read-only) genome.
    """
    sim_config = sim_config or SimulationConfig()
    if game_factory is not None:
        game = game_factory()
    else:
        game = BlockRiseGame(game_config or GameConfig(interactive=False))
    if renderer is not None:
        game.on_transition = renderer.play_transition

    width = game.board.width
    playable_rows = game.board.playable_rows
    attempts = 0
    failures = 0
    while (
        game.is_playing
        and attempts < sim_config.max_moves
        and failures < sim_config.max_consecutive_failures
    ):
        outputs = genome.activate(encode_board(game.board))
        action = decode_action(outputs, width, playable_rows)
        success = game.perform_agent_action(*action)
        if success:
            failures = 0
        else:
            failures += 1
        attempts += 1
        if renderer is not None:
            renderer.draw(game.board, game.selected_piece, game.score)
        if on_step is not None:
            on_step(game, action, success)

    if game.game_over:
        reason = "game_over"
    elif failures >= sim_config.max_consecutive_failures:
        reason = "failure_cap"
        logger.debug("simulation stopped after %d consecutive failed turns", failures)
    else:
        reason = "move_cap"

    return SimulationResult(
        score=game.score,
        successful_moves=game.turns_completed,
        attempts=attempts,
        consecutive_failures=failures,
        reason=reason,
        fitness=compute_fitness(game.score, game.turns_completed),
    )
