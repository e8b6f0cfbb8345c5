"""Tests for headless simulation runs."""

import numpy as np
import pytest

from block_rise.ai import OUTPUT_SIZE
from block_rise.evolution import SimulationConfig, run_simulation
from block_rise.game import Board, BlockRiseGame, GameConfig
from block_rise.visualization import NullRenderer


class ConstantGenome:
    def __init__(self, value=0.0):
        self.outputs = np.full(OUTPUT_SIZE, value)
        self.score = 0.0
        self.calls = 0

    def activate(self, inputs):
        assert len(inputs) == 88
        self.calls += 1
        return self.outputs


def action_outputs(col, row, target):
    outputs = np.zeros(OUTPUT_SIZE)
    outputs[col] = 1.0
    outputs[8 + row] = 1.0
    outputs[19 + target] = 1.0
    return outputs


def game_from(pieces, seed=0):
    def factory():
        return BlockRiseGame(GameConfig(random_seed=seed, interactive=False), board=Board.from_pieces(pieces))
    return factory


class TestRunSimulation:
    def test_failure_cap_ends_game_early(self):
        genome = ConstantGenome()
        result = run_simulation(genome, game_factory=game_from([]))
        assert result.reason == "failure_cap"
        assert result.attempts == 10
        assert result.consecutive_failures == 10
        assert result.successful_moves == 0
        assert result.fitness == pytest.approx((0 + 1) * 0.1)
        assert genome.calls == 10

    def test_custom_failure_cap(self):
        result = run_simulation(ConstantGenome(), game_factory=game_from([]),
                                sim_config=SimulationConfig(max_consecutive_failures=3))
        assert result.attempts == 3

    def test_game_over(self):
        topped_out = [(0, r, 1) for r in range(10)] + [(3, 9, 2)]
        genome = ConstantGenome()
        genome.outputs = action_outputs(3, 9, 5)
        result = run_simulation(genome, game_factory=game_from(topped_out))
        assert result.reason == "game_over"
        assert result.successful_moves == 1
        assert result.fitness == pytest.approx(0.1)

    def test_move_cap(self):
        result = run_simulation(ConstantGenome(), game_factory=game_from([(0, 9, 2)]),
                                sim_config=SimulationConfig(max_moves=3))
        assert result.reason == "move_cap"
        assert result.attempts == 3
        assert 1 <= result.successful_moves <= 3

    @pytest.mark.parametrize("seed", range(5))
    def test_random_games_terminate_with_valid_fitness(self, seed):
        rng = np.random.default_rng(seed)

        class NoisyGenome:
            score = 0.0

            def activate(self, inputs):
                return rng.normal(size=OUTPUT_SIZE)

        result = run_simulation(NoisyGenome(), game_config=GameConfig(random_seed=seed, interactive=False),
                                sim_config=SimulationConfig(max_moves=60))
        assert result.attempts <= 60
        assert result.reason in ("game_over", "move_cap", "failure_cap")
        assert result.fitness >= 0.0
        assert result.score % 100 == 0

    def test_same_seed_same_result(self):
        config = GameConfig(random_seed=42, interactive=False)
        a = run_simulation(ConstantGenome(0.3), game_config=config, sim_config=SimulationConfig(max_moves=50))
        b = run_simulation(ConstantGenome(0.3), game_config=config, sim_config=SimulationConfig(max_moves=50))
        assert a == b

    def test_renderer_and_step_callback(self):
        steps = []

        class CountingRenderer(NullRenderer):
            frames = 0

            def draw(self, board, selected=None, score=0):
                CountingRenderer.frames += 1

        result = run_simulation(ConstantGenome(), game_factory=game_from([(0, 9, 2)]),
                                sim_config=SimulationConfig(max_moves=4), renderer=CountingRenderer(),
                                on_step=lambda game, action, ok: steps.append(ok))
        assert len(steps) == 4
        assert steps[0] is True
        assert CountingRenderer.frames == result.attempts == 4
