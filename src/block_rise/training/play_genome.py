from __future__ import annotations

import argparse
from typing import Optional

import pygame

from block_rise.evolution import SimulationConfig, load_genome, run_simulation
from block_rise.game import GameConfig
from block_rise.visualization.renderer import Renderer


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Watch a saved genome play Block Rise")
    p.add_argument("--genome", type=str, required=True)
    p.add_argument("--games", type=int, default=1)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--max-moves", type=int, default=500)
    p.add_argument("--fps", type=int, default=10)
    p.add_argument("--headless", action="store_true", help="skip rendering and only print results")
    return p


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)
    genome = load_genome(args.genome)
    sim_config = SimulationConfig(max_moves=args.max_moves)

    renderer = None
    clock = None
    if not args.headless:
        pygame.init()
        renderer = Renderer(animation_ms=120)
        clock = pygame.time.Clock()

    def on_step(game, action, success) -> None:
        if clock is not None:
            clock.tick(args.fps)

    try:
        for i in range(args.games):
            seed = None if args.seed is None else args.seed + i
            result = run_simulation(genome, game_config=GameConfig(random_seed=seed, interactive=False),
                                    sim_config=sim_config, renderer=renderer, on_step=on_step)
            print(f"game {i + 1}: score={result.score} moves={result.successful_moves} "
                  f"fitness={result.fitness:.1f} ended_by={result.reason}")
    finally:
        if renderer is not None:
            pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    main()
