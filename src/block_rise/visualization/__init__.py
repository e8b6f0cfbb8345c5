"""Rendering collaborators. ``renderer`` and ``human_play`` import pygame; ``base`` does not."""

from .base import BoardRenderer, NullRenderer

__all__ = ["BoardRenderer", "NullRenderer"]
