from __future__ import annotations

from typing import Dict, Optional, Tuple

import pygame

from block_rise.game.board import Board, Movements
from block_rise.game.pieces import Piece


Color = Tuple[int, int, int]

# width -> (fill, highlight)
WIDTH_COLORS: Dict[int, Tuple[Color, Color]] = {
    1: ((76, 175, 80), (129, 199, 132)),
    2: ((255, 152, 0), (255, 183, 77)),
    3: ((244, 67, 54), (229, 115, 115)),
    4: ((33, 150, 243), (100, 181, 246)),
}

BACKGROUND: Color = (10, 10, 14)
BOARD_BG: Color = (30, 30, 36)
PREVIEW_BG: Color = (20, 20, 26)
TEXT: Color = (230, 230, 230)


def color_for_width(width: int) -> Tuple[Color, Color]:
    return WIDTH_COLORS.get(width, WIDTH_COLORS[1])


def ease_in_quad(t: float) -> float:
    return t * t


def ease_out_cubic(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


class Renderer:
    def __init__(self, screen: Optional[pygame.Surface] = None, cell_size: int = 40, margin: int = 20,
                 animation_ms: int = 300, fps: int = 60) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.animation_ms = animation_ms
        self.fps = fps
        self.screen = screen
        self._last_score = 0
        self._font: Optional[pygame.font.Font] = None
        self._clock = pygame.time.Clock()

    def window_size(self, board: Board) -> Tuple[int, int]:
        return (board.width * self.cell_size + self.margin * 2,
                board.height * self.cell_size + self.margin * 3)

    def ensure_screen(self, board: Board) -> pygame.Surface:
        if self.screen is None:
            self.screen = pygame.display.set_mode(self.window_size(board))
            pygame.display.set_caption("Block Rise")
        return self.screen

    def cell_at(self, px: int, py: int) -> Tuple[int, int]:
        """Screen pixel -> (column, row)."""
        top = self.margin * 2
        return (px - self.margin) // self.cell_size, (py - top) // self.cell_size

    def _draw_piece(self, surf: pygame.Surface, piece: Piece, row: float, selected: bool, dim: bool) -> None:
        fill, light = color_for_width(piece.width)
        if dim:
            fill = tuple(c // 2 for c in fill)
            light = tuple(c // 2 for c in light)
        rect = pygame.Rect(
            self.margin + piece.x * self.cell_size + 1,
            int(self.margin * 2 + row * self.cell_size) + 1,
            piece.width * self.cell_size - 2,
            self.cell_size - 2,
        )
        pygame.draw.rect(surf, fill, rect, border_radius=4)
        pygame.draw.rect(surf, light, pygame.Rect(rect.x + 3, rect.y + 3, rect.width - 6, 4), border_radius=2)
        if selected:
            pygame.draw.rect(surf, (255, 255, 255), rect, 3, border_radius=4)

    def _draw_frame(self, board: Board, rows: Dict[int, float], selected: Optional[Piece], score: int) -> None:
        surf = self.ensure_screen(board)
        surf.fill(BACKGROUND)
        board_rect = pygame.Rect(self.margin, self.margin * 2, board.width * self.cell_size,
                                 board.playable_rows * self.cell_size)
        pygame.draw.rect(surf, BOARD_BG, board_rect)
        preview_rect = pygame.Rect(self.margin, self.margin * 2 + board.playable_rows * self.cell_size,
                                   board.width * self.cell_size, self.cell_size)
        pygame.draw.rect(surf, PREVIEW_BG, preview_rect)
        selected_id = selected.id if selected is not None else None
        for piece in board.pieces:
            row = rows.get(piece.id, float(piece.y))
            self._draw_piece(surf, piece, row, piece.id == selected_id, piece.y == board.preview_row)
        if self._font is None:
            self._font = pygame.font.SysFont(None, 24)
        surf.blit(self._font.render(f"Score: {score}", True, TEXT), (self.margin, 4))
        pygame.display.flip()

    def draw(self, board: Board, selected: Optional[Piece] = None, score: int = 0) -> None:
        self._last_score = score
        self._draw_frame(board, {}, selected, score)
        pygame.event.pump()

    def play_transition(self, kind: str, board: Board, movements: Movements) -> None:
        """Interpolate the moved pieces from their start to end rows."""
        if not movements or kind == "clear" or self.animation_ms <= 0:
            return
        ease = ease_out_cubic if kind == "raise" else ease_in_quad
        start = pygame.time.get_ticks()
        while True:
            progress = min(1.0, (pygame.time.get_ticks() - start) / float(self.animation_ms))
            t = ease(progress)
            rows = {pid: a + (b - a) * t for pid, (a, b) in movements.items()}
            self._draw_frame(board, rows, None, self._last_score)
            pygame.event.pump()
            if progress >= 1.0:
                break
            self._clock.tick(self.fps)
