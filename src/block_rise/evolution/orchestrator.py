"""Generation loop: evaluate every genome, hand fitness to the optimizer, evolve."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

import numpy as np

from block_rise.game.core import GameConfig
from block_rise.visualization.base import BoardRenderer
from .interfaces import Genome, Optimizer
from .runner import SimulationConfig, SimulationResult, run_simulation

logger = logging.getLogger(__name__)


@dataclass
class TrainingConfig:
    generations: Optional[int] = None  # None runs until stop()
    workers: int = 1
    replay_best: bool = False
    seed: Optional[int] = None


@dataclass(frozen=True)
class GenerationRecord:
    generation: int
    best_fitness: float
    avg_fitness: float


class GenerationOrchestrator:
    """Runs the population once per generation and drives the optimizer between generations.

    The optimizer's population is only touched after every member of the
    current generation has been evaluated; ``stop()`` and ``pause()`` take
    effect at the next generation boundary.
    """

    def __init__(
        self,
        optimizer: Optimizer,
        sim_config: Optional[SimulationConfig] = None,
        game_config: Optional[GameConfig] = None,
        training_config: Optional[TrainingConfig] = None,
        renderer: Optional[BoardRenderer] = None,
        on_generation: Optional[Callable[[GenerationRecord], None]] = None,
    ) -> None:
        self.optimizer = optimizer
        self.sim_config = sim_config or SimulationConfig()
        self.game_config = game_config or GameConfig(interactive=False)
        self.training_config = training_config or TrainingConfig()
        self.renderer = renderer
        self.on_generation = on_generation
        self.rng = np.random.default_rng(self.training_config.seed)
        self.history: List[GenerationRecord] = []
        self.best_ever_score = 0
        self.last_results: List[SimulationResult] = []

        self._stop = threading.Event()
        self._unpaused = threading.Event()
        self._unpaused.set()

    # ---------- Control ----------
    def stop(self) -> None:
        self._stop.set()
        self._unpaused.set()

    def pause(self) -> None:
        self._unpaused.clear()

    def resume(self) -> None:
        self._unpaused.set()

    @property
    def paused(self) -> bool:
        return not self._unpaused.is_set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def reset_stop(self) -> None:
        """Clear a previous ``stop()`` so ``run()`` can be called again."""
        self._stop.clear()

    # ---------- Evaluation ----------
    def _evaluate(self, genome: Genome, seed: int) -> SimulationResult:
        config = replace(self.game_config, random_seed=seed, interactive=False)
        return run_simulation(genome, game_config=config, sim_config=self.sim_config)

    def evaluate_population(self) -> List[SimulationResult]:
        """One simulation per member, results in population order."""
        population = list(self.optimizer.population)
        seeds = [int(s) for s in self.rng.integers(0, 2**31 - 1, size=len(population))]
        workers = max(1, int(self.training_config.workers))
        if workers == 1:
            results = [self._evaluate(g, s) for g, s in zip(population, seeds)]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(self._evaluate, population, seeds))
        for result in results:
            self.best_ever_score = max(self.best_ever_score, result.score)
        return results

    def replay(self, genome: Genome) -> SimulationResult:
        seed = int(self.rng.integers(0, 2**31 - 1))
        config = replace(self.game_config, random_seed=seed, interactive=False)
        result = run_simulation(genome, game_config=config, sim_config=self.sim_config, renderer=self.renderer)
        self.best_ever_score = max(self.best_ever_score, result.score)
        return result

    def run_generation(self, replay: Optional[bool] = None) -> GenerationRecord:
        results = self.evaluate_population()
        self.last_results = results
        scores = [r.fitness for r in results]
        self.optimizer.assign_fitness(scores)

        if replay is None:
            replay = self.training_config.replay_best
        if replay and self.renderer is not None:
            self.replay(self.optimizer.best)

        record = GenerationRecord(
            generation=self.optimizer.generation,
            best_fitness=float(max(scores)) if scores else 0.0,
            avg_fitness=float(np.mean(scores)) if scores else 0.0,
        )
        self.history.append(record)
        logger.info(
            "generation %d: best=%.1f avg=%.1f best_ever_score=%d",
            record.generation, record.best_fitness, record.avg_fitness, self.best_ever_score,
        )
        if self.on_generation is not None:
            self.on_generation(record)

        self.optimizer.evolve()
        return record

    def _wait_for_boundary(self) -> bool:
        """Block while paused; False once ``stop()`` has been requested."""
        while not self._unpaused.wait(timeout=0.1):
            if self._stop.is_set():
                return False
        return not self._stop.is_set()

    def run(self, generations: Optional[int] = None) -> List[GenerationRecord]:
        """Run generations until the budget is spent or ``stop()`` is called."""
        budget = generations if generations is not None else self.training_config.generations
        completed = 0
        while budget is None or completed < budget:
            if not self._wait_for_boundary():
                break
            self.run_generation()
            completed += 1
        return list(self.history)

    def skip_generations(self, count: int) -> List[GenerationRecord]:
        """Run ``count`` generations without replays, then replay the best genome once."""
        records = []
        for _ in range(count):
            if not self._wait_for_boundary():
                break
            records.append(self.run_generation(replay=False))
        if self.renderer is not None and not self._stop.is_set():
            self.replay(self.optimizer.best)
        return records
