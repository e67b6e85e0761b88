from __future__ import annotations

import logging
from typing import Iterable, List

from .engine import ElevatorDecisionEngine
from .errors import InvariantViolation
from .interface import Command, CycleSnapshot, ElevatorSnapshot
from .registry import CallRegistry

logger = logging.getLogger(__name__)


class CycleCoordinator:
    """Runs the decision engine over every elevator of a snapshot.

    Elevators are processed strictly in snapshot order against one shared
    registry; an earlier elevator always wins a contested call. Nothing is
    kept between cycles.
    """

    def __init__(self, engine: ElevatorDecisionEngine) -> None:
        self.engine = engine

    def run_cycle(self, snapshot: CycleSnapshot) -> List[Command]:
        if snapshot.is_end:
            raise ValueError("snapshot marks the end of the session; no commands to compute")
        registry = CallRegistry.build(snapshot.calls)
        return self.decide_all(snapshot.elevators, registry, snapshot.timestamp)

    def decide_all(
        self, elevators: Iterable[ElevatorSnapshot], registry: CallRegistry, timestamp: int = 0
    ) -> List[Command]:
        """Decide for ``elevators`` in order, claiming boarded calls from ``registry``."""

        commands: List[Command] = []
        for elevator in elevators:
            try:
                commands.append(self.engine.decide(elevator, registry))
            except InvariantViolation:
                logger.exception("aborting cycle at timestamp %s", timestamp)
                raise
        return commands
