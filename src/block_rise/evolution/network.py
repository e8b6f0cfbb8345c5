from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import numpy as np


GENOME_FORMAT = "block_rise.feedforward"
GENOME_VERSION = 1


class GenomeFormatError(ValueError):
    """Raised when serialized genome data cannot be turned into a genome."""


class FeedForwardGenome:
    """Fixed-topology network: inputs -> tanh hidden layer -> linear outputs."""

    def __init__(self, w1: np.ndarray, b1: np.ndarray, w2: np.ndarray, b2: np.ndarray,
                 score: float = 0.0) -> None:
        self.w1 = w1
        self.b1 = b1
        self.w2 = w2
        self.b2 = b2
        self.score = float(score)

    @classmethod
    def random(cls, input_size: int, hidden_size: int, output_size: int,
               rng: Optional[np.random.Generator] = None, scale: float = 0.5) -> "FeedForwardGenome":
        rng = rng or np.random.default_rng()
        w1 = rng.normal(0.0, scale / np.sqrt(input_size), size=(hidden_size, input_size))
        b1 = np.zeros(hidden_size)
        w2 = rng.normal(0.0, scale / np.sqrt(hidden_size), size=(output_size, hidden_size))
        b2 = rng.normal(0.0, scale, size=output_size)
        return cls(w1, b1, w2, b2)

    @property
    def input_size(self) -> int:
        return int(self.w1.shape[1])

    @property
    def hidden_size(self) -> int:
        return int(self.w1.shape[0])

    @property
    def output_size(self) -> int:
        return int(self.w2.shape[0])

    def activate(self, inputs: Sequence[float]) -> np.ndarray:
        x = np.asarray(inputs, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.input_size:
            raise ValueError(f"expected {self.input_size} inputs, got {x.shape[0]}")
        hidden = np.tanh(self.w1 @ x + self.b1)
        return self.w2 @ hidden + self.b2

    def copy(self) -> "FeedForwardGenome":
        return FeedForwardGenome(self.w1.copy(), self.b1.copy(), self.w2.copy(), self.b2.copy(), self.score)

    # ---------- Variation ----------
    def mutate(self, rng: np.random.Generator, rate: float = 0.1, scale: float = 0.3) -> str:
        """Apply one random mutation in place and return its kind."""
        roll = rng.random()
        if roll < 0.6:
            for arr in (self.w1, self.w2):
                mask = rng.random(arr.shape) < rate
                arr += mask * rng.normal(0.0, scale, size=arr.shape)
            return "weights"
        if roll < 0.85:
            for arr in (self.b1, self.b2):
                mask = rng.random(arr.shape) < rate
                arr += mask * rng.normal(0.0, scale, size=arr.shape)
            return "bias"
        arr = self.w1 if rng.random() < 0.5 else self.w2
        idx = tuple(int(rng.integers(0, n)) for n in arr.shape)
        arr[idx] = rng.normal(0.0, 1.0)
        return "reset"

    def crossover(self, other: "FeedForwardGenome", rng: np.random.Generator) -> "FeedForwardGenome":
        """Uniform crossover; every parameter comes from one of the two parents."""
        if self.w1.shape != other.w1.shape or self.w2.shape != other.w2.shape:
            raise ValueError("cannot cross genomes with different topologies")

        def mix(a: np.ndarray, b: np.ndarray) -> np.ndarray:
            return np.where(rng.random(a.shape) < 0.5, a, b)

        return FeedForwardGenome(mix(self.w1, other.w1), mix(self.b1, other.b1),
                                 mix(self.w2, other.w2), mix(self.b2, other.b2))

    # ---------- Serialization ----------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": GENOME_FORMAT,
            "version": GENOME_VERSION,
            "input_size": self.input_size,
            "hidden_size": self.hidden_size,
            "output_size": self.output_size,
            "w1": self.w1.tolist(),
            "b1": self.b1.tolist(),
            "w2": self.w2.tolist(),
            "b2": self.b2.tolist(),
            "score": self.score,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "FeedForwardGenome":
        if not isinstance(data, dict):
            raise GenomeFormatError(f"genome data must be an object, got {type(data).__name__}")
        if data.get("format") != GENOME_FORMAT:
            raise GenomeFormatError(f"unknown genome format: {data.get('format')!r}")
        missing = [k for k in ("input_size", "hidden_size", "output_size", "w1", "b1", "w2", "b2") if k not in data]
        if missing:
            raise GenomeFormatError(f"genome data missing keys: {', '.join(missing)}")
        try:
            n_in = int(data["input_size"])
            n_hidden = int(data["hidden_size"])
            n_out = int(data["output_size"])
            w1 = np.asarray(data["w1"], dtype=np.float64)
            b1 = np.asarray(data["b1"], dtype=np.float64)
            w2 = np.asarray(data["w2"], dtype=np.float64)
            b2 = np.asarray(data["b2"], dtype=np.float64)
            score = float(data.get("score", 0.0))
        except (TypeError, ValueError) as exc:
            raise GenomeFormatError(f"genome data has non-numeric values: {exc}") from exc

        expected = {
            "w1": (w1, (n_hidden, n_in)),
            "b1": (b1, (n_hidden,)),
            "w2": (w2, (n_out, n_hidden)),
            "b2": (b2, (n_out,)),
        }
        for name, (arr, shape) in expected.items():
            if arr.shape != shape:
                raise GenomeFormatError(f"{name} has shape {arr.shape}, expected {shape}")
            if not np.all(np.isfinite(arr)):
                raise GenomeFormatError(f"{name} contains non-finite values")
        return cls(w1, b1, w2, b2, score=score)
