from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from .config import DispatchConfig
from .errors import InvariantViolation
from .interface import Call, Command, CommandType, Direction, ElevatorSnapshot, ElevatorStatus
from .registry import CallRegistry
from .utils import (
    at_boundary,
    exiting_here,
    filter_by_direction,
    resolve_direction,
    tie_break,
    travel_direction,
)

logger = logging.getLogger(__name__)

Handler = Callable[[ElevatorSnapshot, CallRegistry, Optional[Direction]], Command]


class ElevatorDecisionEngine:
    """Finite-state decision rules for a single elevator.

    ``decide`` is pure with respect to the elevator but removes the calls it
    boards from the registry, so later elevators in the same cycle do not
    see them.
    """

    name = "look"

    def __init__(self, config: DispatchConfig) -> None:
        self.config = config
        self._handlers: Dict[ElevatorStatus, Handler] = {
            ElevatorStatus.STOPPED: self._decide_stopped,
            ElevatorStatus.OPENED: self._decide_opened,
            ElevatorStatus.UPWARD: self._decide_moving,
            ElevatorStatus.DOWNWARD: self._decide_moving,
        }

    def decide(self, elevator: ElevatorSnapshot, registry: CallRegistry) -> Command:
        # Resolved once; the passenger list is fixed for the whole decision.
        direction = resolve_direction(elevator, self.config)
        if elevator.passengers and direction is None:
            raise InvariantViolation(elevator.id, "carries passengers but has no direction")

        handler = self._handlers.get(elevator.status)
        if handler is None:
            raise InvariantViolation(elevator.id, f"no decision rule for status {elevator.status!r}")
        command = handler(elevator, registry, direction)
        logger.debug(
            "elevator %s at floor %s (%s, %d aboard) -> %s %s",
            elevator.id,
            elevator.floor,
            elevator.status.value,
            elevator.load,
            command.command.value,
            command.call_ids or "",
        )
        return command

    def _decide_stopped(
        self, elevator: ElevatorSnapshot, registry: CallRegistry, direction: Optional[Direction]
    ) -> Command:
        if exiting_here(elevator):
            return self._command(elevator, CommandType.OPEN)
        if self._boardable_here(elevator, registry, direction):
            return self._command(elevator, CommandType.OPEN)
        if elevator.passengers:
            return self._command(elevator, direction.command)

        above, below = registry.count_around(elevator.floor, include_current=True)
        if above == 0 and below == 0:
            return self._command(elevator, CommandType.STOP)
        if above > below:
            return self._command(elevator, CommandType.UP)
        if below > above:
            return self._command(elevator, CommandType.DOWN)
        return self._command(elevator, tie_break(elevator.floor, self.config).command)

    def _decide_opened(
        self, elevator: ElevatorSnapshot, registry: CallRegistry, direction: Optional[Direction]
    ) -> Command:
        exiting = exiting_here(elevator)
        if exiting:
            return self._command(elevator, CommandType.EXIT, [p.id for p in exiting])

        waiting = registry.at_floor(elevator.floor)
        if waiting and self._has_room(elevator):
            selected = self._select_boarding(waiting, direction, self._room(elevator))
            if selected:
                for call in selected:
                    registry.remove(call)
                return self._command(elevator, CommandType.ENTER, [call.id for call in selected])
        return self._command(elevator, CommandType.CLOSE)

    def _decide_moving(
        self, elevator: ElevatorSnapshot, registry: CallRegistry, direction: Optional[Direction]
    ) -> Command:
        heading = travel_direction(elevator.status)
        if exiting_here(elevator):
            return self._command(elevator, CommandType.STOP)

        if self._boardable_here(elevator, registry, direction):
            return self._command(elevator, CommandType.STOP)
        if at_boundary(elevator.floor, heading, self.config):
            return self._command(elevator, CommandType.STOP)
        if registry.at_floor(elevator.floor):
            # Nobody here can board: pass them by.
            return self._command(elevator, heading.command)

        above, below = registry.count_around(elevator.floor)
        ahead = above if heading is Direction.UP else below
        if ahead:
            return self._command(elevator, heading.command)
        return self._command(elevator, CommandType.STOP)

    def _select_boarding(
        self, waiting: List[Call], direction: Optional[Direction], room: int
    ) -> List[Call]:
        selected = filter_by_direction(waiting, direction)[:room]
        if not selected:
            selected = waiting[:room]
        return selected

    def _boardable_here(
        self, elevator: ElevatorSnapshot, registry: CallRegistry, direction: Optional[Direction]
    ) -> bool:
        if not self._has_room(elevator):
            return False
        waiting = registry.at_floor(elevator.floor)
        return bool(self._select_boarding(waiting, direction, self._room(elevator)))

    def _room(self, elevator: ElevatorSnapshot) -> int:
        return max(0, self.config.max_capacity - elevator.load)

    def _has_room(self, elevator: ElevatorSnapshot) -> bool:
        return self._room(elevator) > 0

    @staticmethod
    def _command(
        elevator: ElevatorSnapshot, command: CommandType, call_ids: Optional[List[int]] = None
    ) -> Command:
        return Command(elevator_id=elevator.id, command=command, call_ids=call_ids)


class StrictDecisionEngine(ElevatorDecisionEngine):
    """Boards only riders heading the resolved way; closes doors otherwise."""

    name = "strict"

    def _select_boarding(
        self, waiting: List[Call], direction: Optional[Direction], room: int
    ) -> List[Call]:
        return filter_by_direction(waiting, direction)[:room]
