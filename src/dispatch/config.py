from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

MAX_CAPACITY = 8
MAX_ELEVATORS = 4

PROBLEM_HEIGHTS: Dict[int, int] = {
    0: 5,
    1: 25,
    2: 25,
}


@dataclass(frozen=True)
class DispatchConfig:
    """Building parameters fixed for the duration of a session."""

    max_height: int
    max_capacity: int = MAX_CAPACITY

    def __post_init__(self) -> None:
        if self.max_height < 1:
            raise ValueError(f"max_height must be positive, got {self.max_height}")
        if self.max_capacity < 1:
            raise ValueError(f"max_capacity must be positive, got {self.max_capacity}")

    @property
    def midpoint(self) -> int:
        return self.max_height // 2

    @classmethod
    def for_problem(cls, problem: int, max_capacity: int = MAX_CAPACITY) -> "DispatchConfig":
        height = PROBLEM_HEIGHTS.get(problem)
        if height is None:
            raise ValueError(
                f"Unknown problem {problem}. Available: {', '.join(str(p) for p in PROBLEM_HEIGHTS)}"
            )
        return cls(max_height=height, max_capacity=max_capacity)


def validate_elevator_count(count: int) -> int:
    if not 1 <= count <= MAX_ELEVATORS:
        raise ValueError(f"Elevator count must be between 1 and {MAX_ELEVATORS}, got {count}")
    return count
