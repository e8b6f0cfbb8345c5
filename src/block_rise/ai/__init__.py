"""Bridge between board state and agent decisions."""

from .codec import (
    INPUT_SIZE,
    OUTPUT_SIZE,
    AgentAction,
    argmax,
    compute_fitness,
    decode_action,
    encode_board,
)

__all__ = [
    "INPUT_SIZE",
    "OUTPUT_SIZE",
    "AgentAction",
    "argmax",
    "compute_fitness",
    "decode_action",
    "encode_board",
]
