from __future__ import annotations

import argparse
from typing import Optional

import pygame

from block_rise.evolution.persistence import load_high_score, save_high_score
from block_rise.game import BlockRiseGame, GameConfig, GameState
from .renderer import Renderer


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Rise with mouse and keyboard")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--high-score-file", type=str, default="./block_rise_highscore.json")
    p.add_argument("--cell-size", type=int, default=48)
    p.add_argument("--no-animation", action="store_true")
    return p


def _handle_click(game: BlockRiseGame, renderer: Renderer, pos) -> None:
    col, row = renderer.cell_at(*pos)
    if not game.is_playing:
        return
    piece = game.board.block_at(col, row)
    if piece is not None and row < game.board.playable_rows:
        game.select(piece)
    else:
        game.cancel()


def run(seed: Optional[int] = None, high_score_file: str = "./block_rise_highscore.json",
        cell_size: int = 48, animate: bool = True) -> None:
    pygame.init()
    try:
        renderer = Renderer(cell_size=cell_size, animation_ms=300 if animate else 0)
        game = BlockRiseGame(GameConfig(random_seed=seed, interactive=True), on_transition=renderer.play_transition)
        renderer.ensure_screen(game.board)
        font = pygame.font.SysFont(None, 28)
        high_score = load_high_score(high_score_file)
        recorded = False
        clock = pygame.time.Clock()

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    _handle_click(game, renderer, event.pos)
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in (pygame.K_LEFT, pygame.K_a):
                        game.move(-1)
                    elif event.key in (pygame.K_RIGHT, pygame.K_d):
                        game.move(1)
                    elif event.key in (pygame.K_SPACE, pygame.K_RETURN, pygame.K_DOWN):
                        game.confirm()
                    elif event.key == pygame.K_p:
                        if game.state == GameState.PAUSED:
                            game.resume()
                        else:
                            game.pause()
                    elif event.key == pygame.K_n:
                        game.reset()
                        recorded = False

            if game.game_over and not recorded:
                if game.score > high_score:
                    high_score = game.score
                    save_high_score(high_score_file, high_score)
                recorded = True

            renderer.draw(game.board, game.selected_piece, game.score)
            screen = renderer.screen
            hs = font.render(f"Best: {high_score}", True, (230, 230, 230))
            screen.blit(hs, (screen.get_width() - hs.get_width() - renderer.margin, 4))
            if game.game_over:
                over = font.render("Game Over - N to restart", True, (255, 100, 100))
                screen.blit(over, over.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2)))
            elif game.state == GameState.PAUSED:
                paused = font.render("Paused - P to resume", True, (255, 255, 255))
                screen.blit(paused, paused.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2)))
            pygame.display.flip()
            clock.tick(60)
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    run(args.seed, args.high_score_file, args.cell_size, animate=not args.no_animation)


if __name__ == "__main__":  # pragma: no cover
    main()
