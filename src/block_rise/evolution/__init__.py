"""Generational training of block-rise agents.

- runner: one headless (or rendered) agent playthrough -> fitness
- orchestrator: per-generation evaluate / assign fitness / evolve loop
- optimizer, network: numpy neuroevolution implementing the optimizer contract
- persistence: genome JSON, high score and training CSV helpers
"""

from .interfaces import Genome, Optimizer
from .network import FeedForwardGenome, GenomeFormatError
from .optimizer import NeuroevolutionOptimizer, OptimizerConfig
from .runner import SimulationConfig, SimulationResult, run_simulation
from .orchestrator import GenerationOrchestrator, GenerationRecord, TrainingConfig
from .persistence import (
    export_training_csv,
    load_genome,
    load_high_score,
    save_genome,
    save_high_score,
)

__all__ = [
    "Genome",
    "Optimizer",
    "FeedForwardGenome",
    "GenomeFormatError",
    "NeuroevolutionOptimizer",
    "OptimizerConfig",
    "SimulationConfig",
    "SimulationResult",
    "run_simulation",
    "GenerationOrchestrator",
    "GenerationRecord",
    "TrainingConfig",
    "export_training_csv",
    "load_genome",
    "load_high_score",
    "save_genome",
    "save_high_score",
]
