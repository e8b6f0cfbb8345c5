"""Elitist neuroevolution over fixed-topology feed-forward genomes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from block_rise.ai.codec import INPUT_SIZE, OUTPUT_SIZE
from .network import FeedForwardGenome, GenomeFormatError

logger = logging.getLogger(__name__)


@dataclass
class OptimizerConfig:
    population_size: int = 50
    input_size: int = INPUT_SIZE
    hidden_size: int = 32
    output_size: int = OUTPUT_SIZE
    mutation_rate: float = 0.3
    mutation_scale: float = 0.3
    elitism: int = 5
    tournament_size: int = 3
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.population_size < 1:
            raise ValueError("population_size must be positive")
        if self.elitism >= self.population_size:
            self.elitism = max(1, self.population_size // 10)


class NeuroevolutionOptimizer:
    """Population of genomes scored externally and evolved between generations."""

    def __init__(self, config: Optional[OptimizerConfig] = None) -> None:
        self.config = config or OptimizerConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.generation = 0
        self._population: List[FeedForwardGenome] = []
        self._best: Optional[FeedForwardGenome] = None
        self.best_fitness = 0.0
        self.avg_fitness = 0.0
        self.initialize_population()

    def initialize_population(self) -> None:
        cfg = self.config
        self._population = []
        for _ in range(cfg.population_size):
            genome = FeedForwardGenome.random(cfg.input_size, cfg.hidden_size, cfg.output_size, self.rng)
            # A few mutations up front for diversity
            for _m in range(int(self.rng.integers(2, 5))):
                genome.mutate(self.rng, cfg.mutation_rate, cfg.mutation_scale)
            self._population.append(genome)
        self._best = None
        self.generation = 0

    @property
    def population(self) -> List[FeedForwardGenome]:
        return self._population

    @property
    def best(self) -> FeedForwardGenome:
        return self._best if self._best is not None else self._population[0]

    def assign_fitness(self, scores: Sequence[float]) -> None:
        """Store scores positionally, then rank the population best-first."""
        if len(scores) != len(self._population):
            raise ValueError(
                f"got {len(scores)} fitness scores for a population of {len(self._population)}"
            )
        for genome, score in zip(self._population, scores):
            genome.score = float(score)
        # Stable sort keeps population order among equal scores
        self._population.sort(key=lambda g: g.score, reverse=True)
        self._best = self._population[0]
        self.best_fitness = self._best.score
        self.avg_fitness = float(np.mean(scores)) if len(scores) else 0.0

    def _select_parent(self) -> FeedForwardGenome:
        k = min(self.config.tournament_size, len(self._population))
        idxs = self.rng.choice(len(self._population), size=k, replace=False)
        return max((self._population[int(i)] for i in idxs), key=lambda g: g.score)

    def evolve(self) -> List[FeedForwardGenome]:
        cfg = self.config
        ranked = sorted(self._population, key=lambda g: g.score, reverse=True)
        next_population: List[FeedForwardGenome] = [g.copy() for g in ranked[:cfg.elitism]]
        while len(next_population) < cfg.population_size:
            child = self._select_parent().crossover(self._select_parent(), self.rng)
            for _m in range(int(self.rng.integers(1, 4))):
                child.mutate(self.rng, cfg.mutation_rate, cfg.mutation_scale)
            next_population.append(child)
        self._population = next_population
        self.generation += 1
        logger.debug("evolved generation %d (%d genomes)", self.generation, len(next_population))
        return self._population

    def export_best(self) -> Dict[str, Any]:
        return self.best.to_dict()

    def import_genome(self, data: Any) -> FeedForwardGenome:
        """Validate ``data`` fully, then install it as the first member and the best genome."""
        genome = FeedForwardGenome.from_dict(data)
        cfg = self.config
        shape = (genome.input_size, genome.hidden_size, genome.output_size)
        expected = (cfg.input_size, cfg.hidden_size, cfg.output_size)
        if shape != expected:
            raise GenomeFormatError(f"genome topology {shape} does not match optimizer topology {expected}")
        self._population[0] = genome
        self._best = genome
        return genome
