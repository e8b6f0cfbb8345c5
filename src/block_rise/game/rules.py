from __future__ import annotations

from dataclasses import dataclass


BASE_SCORE = 100


@dataclass
class ScoringRules:
    base_score: int = BASE_SCORE

    def calculate_score(self, lines: int) -> int:
        # 1 line = 100, 2 = 100 + 200, 3 = 100 + 200 + 400, ...
        if lines <= 0:
            return 0
        return sum(self.base_score * (2 ** i) for i in range(lines))


def calculate_score(lines: int) -> int:
    return ScoringRules().calculate_score(lines)
