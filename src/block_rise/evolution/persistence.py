from __future__ import annotations

import csv
import json
import logging
import os
from typing import Iterable, Union

from .network import FeedForwardGenome, GenomeFormatError
from .orchestrator import GenerationRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

CSV_HEADER = ["Generation", "Best Fitness", "Avg Fitness"]


def _ensure_parent(path: PathLike) -> None:
    parent = os.path.dirname(os.fspath(path))
    if parent:
        os.makedirs(parent, exist_ok=True)


def save_genome(path: PathLike, genome: FeedForwardGenome) -> None:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(genome.to_dict(), f, indent=2)


def load_genome(path: PathLike) -> FeedForwardGenome:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise GenomeFormatError(f"{os.fspath(path)} is not valid JSON: {exc}") from exc
    return FeedForwardGenome.from_dict(data)


def load_high_score(path: PathLike) -> int:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return max(0, int(data["high_score"]))
    except FileNotFoundError:
        return 0
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        logger.warning("ignoring unreadable high score file %s: %s", os.fspath(path), exc)
        return 0


def save_high_score(path: PathLike, score: int) -> None:
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"high_score": int(score)}, f)


def export_training_csv(path: PathLike, records: Iterable[GenerationRecord]) -> int:
    """Write one row per generation record in order; returns the number of rows."""
    _ensure_parent(path)
    rows = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for record in records:
            writer.writerow([record.generation, record.best_fitness, record.avg_fitness])
            rows += 1
    return rows
