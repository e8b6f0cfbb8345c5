"""Tests for the generation loop."""

import threading
import time

import numpy as np
import pytest

from block_rise.ai import OUTPUT_SIZE
from block_rise.evolution import (
    GenerationOrchestrator,
    GenerationRecord,
    NeuroevolutionOptimizer,
    OptimizerConfig,
    SimulationConfig,
    SimulationResult,
    TrainingConfig,
)
from block_rise.evolution import orchestrator


class ConstantGenome:
    def __init__(self, value):
        self.outputs = np.full(OUTPUT_SIZE, value)
        self.score = 0.0

    def activate(self, inputs):
        return self.outputs


class RecordingOptimizer:
    """Minimal optimizer honoring the population / assign_fitness / evolve contract."""

    def __init__(self, size=4):
        self._population = [ConstantGenome(i * 0.1) for i in range(size)]
        self.generation = 0
        self.calls = []

    @property
    def population(self):
        return self._population

    @property
    def best(self):
        return max(self._population, key=lambda g: g.score)

    def assign_fitness(self, scores):
        if len(scores) != len(self._population):
            raise ValueError("length mismatch")
        self.calls.append(("assign", list(scores)))
        for genome, score in zip(self._population, scores):
            genome.score = score

    def evolve(self):
        self.calls.append(("evolve", None))
        self.generation += 1
        return self._population


FAST = SimulationConfig(max_moves=20)


class TestGenerationLoop:
    def test_fixed_number_of_generations(self):
        opt = RecordingOptimizer()
        orch = GenerationOrchestrator(opt, sim_config=FAST, training_config=TrainingConfig(seed=1))
        history = orch.run(generations=3)
        assert [r.generation for r in history] == [0, 1, 2]
        assert [c[0] for c in opt.calls] == ["assign", "evolve"] * 3
        for record, (_, scores) in zip(history, opt.calls[::2]):
            assert record.best_fitness == pytest.approx(max(scores))
            assert record.avg_fitness == pytest.approx(np.mean(scores))

    def test_scores_follow_population_order(self):
        opt = RecordingOptimizer(size=5)
        orch = GenerationOrchestrator(opt, sim_config=FAST, training_config=TrainingConfig(seed=2))
        orch.run_generation()
        scores = opt.calls[0][1]
        assert scores == [r.fitness for r in orch.last_results]
        assert len(scores) == 5

    def test_parallel_matches_sequential(self):
        seq = GenerationOrchestrator(RecordingOptimizer(6), sim_config=FAST,
                                     training_config=TrainingConfig(seed=5, workers=1))
        par = GenerationOrchestrator(RecordingOptimizer(6), sim_config=FAST,
                                     training_config=TrainingConfig(seed=5, workers=3))
        assert [r.fitness for r in seq.evaluate_population()] == [r.fitness for r in par.evaluate_population()]

    def test_mismatch_is_reported_before_evolving(self):
        class ShortOptimizer(RecordingOptimizer):
            def assign_fitness(self, scores):
                super().assign_fitness(list(scores)[:-1])

        opt = ShortOptimizer()
        orch = GenerationOrchestrator(opt, sim_config=FAST)
        with pytest.raises(ValueError):
            orch.run_generation()
        assert opt.calls == []
        assert orch.history == []

    def test_stop_takes_effect_at_generation_boundary(self):
        opt = RecordingOptimizer()
        seen = []
        orch = GenerationOrchestrator(opt, sim_config=FAST)

        def on_generation(record):
            seen.append(record)
            orch.stop()

        orch.on_generation = on_generation
        history = orch.run()
        assert len(history) == 1
        # the generation that requested the stop still evolved
        assert opt.calls[-1][0] == "evolve"

    def test_pause_holds_loop_between_generations(self):
        opt = RecordingOptimizer(size=2)
        orch = GenerationOrchestrator(opt, sim_config=FAST)
        orch.pause()
        thread = threading.Thread(target=orch.run, kwargs={"generations": 2})
        thread.start()
        time.sleep(0.3)
        assert orch.history == []
        assert orch.paused
        orch.resume()
        thread.join(timeout=30)
        assert not thread.is_alive()
        assert len(orch.history) == 2

    def test_stop_while_paused(self):
        orch = GenerationOrchestrator(RecordingOptimizer(size=2), sim_config=FAST)
        orch.pause()
        thread = threading.Thread(target=orch.run)
        thread.start()
        time.sleep(0.2)
        orch.stop()
        thread.join(timeout=5)
        assert not thread.is_alive()
        assert orch.history == []

    def test_replay_uses_renderer_without_changing_fitness(self):
        draws = []

        class Renderer:
            def draw(self, board, selected=None, score=0):
                draws.append(score)

            def play_transition(self, kind, board, movements):
                pass

        opt = RecordingOptimizer(size=3)
        orch = GenerationOrchestrator(opt, sim_config=FAST, renderer=Renderer(),
                                      training_config=TrainingConfig(replay_best=True, seed=3))
        record = orch.run_generation()
        assert draws
        assert isinstance(record, GenerationRecord)
        assert opt.calls[0][0] == "assign" and len(opt.calls) == 2

    def test_with_neuroevolution_optimizer(self):
        opt = NeuroevolutionOptimizer(OptimizerConfig(population_size=4, hidden_size=8, elitism=1, seed=0))
        orch = GenerationOrchestrator(opt, sim_config=FAST, training_config=TrainingConfig(seed=0))
        records = orch.skip_generations(2)
        assert [r.generation for r in records] == [0, 1]
        assert opt.generation == 2
        assert all(r.best_fitness >= r.avg_fitness >= 0.0 for r in records)

    def test_stop_before_run_is_honored(self):
        opt = RecordingOptimizer(size=2)
        orch = GenerationOrchestrator(opt, sim_config=FAST)
        orch.stop()
        assert orch.run(generations=2) == []
        assert opt.calls == []
        orch.reset_stop()
        assert len(orch.run(generations=1)) == 1

    def test_skip_generations_waits_while_paused(self):
        orch = GenerationOrchestrator(RecordingOptimizer(size=2), sim_config=FAST)
        orch.pause()
        out = []
        thread = threading.Thread(target=lambda: out.extend(orch.skip_generations(2)))
        thread.start()
        time.sleep(0.3)
        assert orch.history == []
        orch.resume()
        thread.join(timeout=30)
        assert not thread.is_alive()
        assert [r.generation for r in out] == [0, 1]

    def test_skip_generations_stops_at_boundary(self):
        orch = GenerationOrchestrator(RecordingOptimizer(size=2), sim_config=FAST)
        orch.stop()
        assert orch.skip_generations(3) == []

    def test_replay_counts_toward_best_ever_score(self, monkeypatch):
        def fake_simulation(genome, game_config=None, sim_config=None, renderer=None):
            return SimulationResult(score=700, successful_moves=9, attempts=9,
                                    consecutive_failures=0, reason="game_over", fitness=701.0)

        monkeypatch.setattr(orchestrator, "run_simulation", fake_simulation)
        orch = GenerationOrchestrator(RecordingOptimizer(size=2), sim_config=FAST)
        result = orch.replay(ConstantGenome(0.0))
        assert result.score == 700
        assert orch.best_ever_score == 700
