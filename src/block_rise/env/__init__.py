"""Gymnasium environment for Block Rise."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .block_rise_env import BlockRiseEnv

register(
    id="BlockRise-8x10-v0",
    entry_point="block_rise.env.block_rise_env:BlockRiseEnv",
)

__all__ = ["BlockRiseEnv"]
