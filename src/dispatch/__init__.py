from __future__ import annotations

from typing import Dict, Type

from .config import DispatchConfig
from .coordinator import CycleCoordinator
from .engine import ElevatorDecisionEngine, StrictDecisionEngine
from .errors import DispatchError, InvariantViolation
from .interface import (
    Call,
    Command,
    CommandType,
    CycleSnapshot,
    Direction,
    ElevatorSnapshot,
    ElevatorStatus,
)
from .registry import CallRegistry

__all__ = [
    "Call",
    "CallRegistry",
    "Command",
    "CommandType",
    "CycleCoordinator",
    "CycleSnapshot",
    "Direction",
    "DispatchConfig",
    "DispatchError",
    "ElevatorDecisionEngine",
    "ElevatorSnapshot",
    "ElevatorStatus",
    "InvariantViolation",
    "StrictDecisionEngine",
    "get_engine",
]


ENGINE_REGISTRY: Dict[str, Type[ElevatorDecisionEngine]] = {
    "look": ElevatorDecisionEngine,
    "strict": StrictDecisionEngine,
}


def get_engine(name: str, config: DispatchConfig) -> ElevatorDecisionEngine:
    cls = ENGINE_REGISTRY.get(name.lower())
    if cls is None:
        raise ValueError(f"Unknown engine '{name}'. Available: {', '.join(ENGINE_REGISTRY)}")
    return cls(config)
