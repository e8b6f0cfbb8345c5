from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from typing import Optional

from block_rise.evolution import (
    GenerationOrchestrator,
    GenerationRecord,
    NeuroevolutionOptimizer,
    OptimizerConfig,
    SimulationConfig,
    TrainingConfig,
    export_training_csv,
    load_genome,
    save_genome,
)
from block_rise.game import GameConfig


def _print_progress(record: GenerationRecord, total: Optional[int], best_ever: int) -> None:
    if total:
        width = 30
        filled = int(width * (record.generation + 1) / max(1, total))
        bar = "=" * filled + "." * (width - filled)
        head = f"[{bar}] {record.generation + 1}/{total}"
    else:
        head = f"gen {record.generation}"
    msg = f"\r{head}  best={record.best_fitness:.1f}  avg={record.avg_fitness:.1f}  best_score={best_ever}"
    print(msg, end="", file=sys.stdout, flush=True)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Evolve Block Rise agents")
    p.add_argument("--generations", type=int, default=50, help="0 runs until interrupted")
    p.add_argument("--population", type=int, default=50)
    p.add_argument("--hidden", type=int, default=32)
    p.add_argument("--elitism", type=int, default=5)
    p.add_argument("--mutation-rate", type=float, default=0.3)
    p.add_argument("--mutation-scale", type=float, default=0.3)
    p.add_argument("--max-moves", type=int, default=500)
    p.add_argument("--max-failures", type=int, default=10)
    p.add_argument("--workers", type=int, default=1)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--init-genome", type=str, default=None, help="genome JSON to seed the population with")
    p.add_argument("--save-path", type=str, default="./models/best_genome.json")
    p.add_argument("--csv", type=str, default="./logs/training-data.csv")
    p.add_argument("--visualize", action="store_true", help="replay the best genome after each generation")
    p.add_argument("--no-progress", action="store_true")
    p.add_argument("--log-level", type=str, default="WARNING")
    return p


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    optimizer = NeuroevolutionOptimizer(OptimizerConfig(
        population_size=args.population,
        hidden_size=args.hidden,
        mutation_rate=args.mutation_rate,
        mutation_scale=args.mutation_scale,
        elitism=args.elitism,
        seed=args.seed,
    ))
    if args.init_genome:
        genome = load_genome(args.init_genome)
        optimizer.import_genome(genome.to_dict())

    renderer = None
    if args.visualize:
        import pygame

        from block_rise.visualization.renderer import Renderer

        pygame.init()
        renderer = Renderer(animation_ms=30)

    total = args.generations or None
    orchestrator = GenerationOrchestrator(
        optimizer,
        sim_config=SimulationConfig(max_moves=args.max_moves, max_consecutive_failures=args.max_failures),
        game_config=GameConfig(interactive=False),
        training_config=TrainingConfig(generations=total, workers=args.workers,
                                       replay_best=args.visualize, seed=args.seed),
        renderer=renderer,
    )
    if not args.no_progress:
        orchestrator.on_generation = lambda rec: _print_progress(rec, total, orchestrator.best_ever_score)

    # Ctrl-C finishes the running generation, then stops
    signal.signal(signal.SIGINT, lambda *_: orchestrator.stop())
    try:
        orchestrator.run()
    finally:
        if renderer is not None:
            import pygame

            pygame.quit()
    if not args.no_progress:
        print()

    os.makedirs(os.path.dirname(args.save_path) or ".", exist_ok=True)
    save_genome(args.save_path, optimizer.best)
    rows = export_training_csv(args.csv, orchestrator.history)
    print(f"Saved best genome to {args.save_path}; wrote {rows} generations to {args.csv}")


if __name__ == "__main__":  # pragma: no cover
    main()
