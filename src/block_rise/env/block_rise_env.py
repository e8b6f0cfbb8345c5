from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_rise.ai.codec import compute_fitness, encode_board
from block_rise.evolution.runner import SimulationConfig
from block_rise.game import BlockRiseGame, GameConfig


class BlockRiseEnv(gym.Env):
    """One agent turn per step.

    Action: (select column, select row, target column); the preview row index
    is accepted and falls back to a random playable piece like any empty cell.
    Observation: per-cell ``width / 4`` features in row-major order.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 sim_config: Optional[SimulationConfig] = None) -> None:
        super().__init__()
        base = config or GameConfig()
        self.config = replace(base, interactive=False)
        self.sim_config = sim_config or SimulationConfig()
        self.game = BlockRiseGame(self.config)
        self.render_mode = render_mode

        width = self.config.width
        rows = self.config.playable_rows + 1
        # Generated pieces are at most 4 wide, so features stay within [0, 1]
        self.observation_space = spaces.Box(low=0.0, high=1.0, shape=(rows * width,), dtype=np.float32)
        self.action_space = spaces.MultiDiscrete((width, rows, width))

        self._attempts = 0
        self._failures = 0

    def _get_obs(self) -> np.ndarray:
        return np.clip(encode_board(self.game.board), 0.0, 1.0)

    def _get_info(self) -> Dict[str, Any]:
        info = self.game.get_state()
        del info["grid"]
        info["consecutive_failures"] = self._failures
        info["fitness"] = compute_fitness(self.game.score, self.game.turns_completed)
        return info

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is None:
            seed = int(self.np_random.integers(0, 2**31 - 1))
        self.game.reset(seed)
        self._attempts = 0
        self._failures = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        select_col, select_row, target_col = map(int, action)
        score_before = self.game.score
        success = self.game.perform_agent_action(select_col, select_row, target_col)
        self._attempts += 1
        self._failures = 0 if success else self._failures + 1

        reward = float(self.game.score - score_before)
        terminated = bool(self.game.game_over)
        truncated = (
            not terminated
            and (self._attempts >= self.sim_config.max_moves
                 or self._failures >= self.sim_config.max_consecutive_failures)
        )
        info = self._get_info()
        info["turn_completed"] = success
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self.game.board.occupancy()
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        palette = {0: (30, 30, 36), 1: (76, 175, 80), 2: (255, 152, 0), 3: (244, 67, 54), 4: (33, 150, 243)}
        for y in range(h):
            for x in range(w):
                color = palette.get(int(grid[y, x]), (200, 200, 200))
                if y == h - 1 and grid[y, x]:
                    color = tuple(c // 2 for c in color)
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
        return img

    def close(self) -> None:
        pass
