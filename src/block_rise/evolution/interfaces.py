from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Genome(Protocol):
    """Anything that maps a feature vector to an output vector and carries a fitness score."""

    score: float

    def activate(self, inputs: Sequence[float]) -> Sequence[float]:
        ...


class Optimizer(Protocol):
    """Narrow contract the generation loop needs from an evolutionary optimizer.

    ``assign_fitness`` must keep scores aligned positionally with ``population``
    and raise ``ValueError`` on a length mismatch before assigning anything.
    """

    generation: int

    @property
    def population(self) -> List[Genome]:
        ...

    @property
    def best(self) -> Genome:
        ...

    def assign_fitness(self, scores: Sequence[float]) -> None:
        ...

    def evolve(self) -> List[Genome]:
        ...
