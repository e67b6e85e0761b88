from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dispatch.config import DispatchConfig, validate_elevator_count


@dataclass
class ScenarioSettings:
    """Parameters of one locally simulated session."""

    problem: int = 1
    elevator_count: int = 2
    call_count: int = 50
    arrival_rate_per_floor: float = 0.02
    random_seed: Optional[int] = None
    max_ticks: int = 2000
    calls: List[Dict[str, int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        validate_elevator_count(self.elevator_count)
        if self.max_ticks < 1:
            raise ValueError(f"max_ticks must be positive, got {self.max_ticks}")

    @property
    def dispatch_config(self) -> DispatchConfig:
        return DispatchConfig.for_problem(self.problem)

    @classmethod
    def from_dict(cls, config: Dict) -> "ScenarioSettings":
        return cls(
            problem=config.get("problem", 1),
            elevator_count=config.get("elevator_count", 2),
            call_count=config.get("call_count", 50),
            arrival_rate_per_floor=config.get("arrival_rate_per_floor", 0.02),
            random_seed=config.get("random_seed"),
            max_ticks=config.get("max_ticks", 2000),
            calls=list(config.get("calls", [])),
        )
