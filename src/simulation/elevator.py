from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, FrozenSet, List

from dispatch.interface import Command, CommandType, ElevatorSnapshot, ElevatorStatus

from .passenger import Passenger

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from .building import Building
    from .simulation import MetricsTracker


LEGAL_COMMANDS: Dict[ElevatorStatus, FrozenSet[CommandType]] = {
    ElevatorStatus.STOPPED: frozenset(
        {CommandType.STOP, CommandType.OPEN, CommandType.UP, CommandType.DOWN}
    ),
    ElevatorStatus.OPENED: frozenset(
        {CommandType.OPEN, CommandType.CLOSE, CommandType.ENTER, CommandType.EXIT}
    ),
    ElevatorStatus.UPWARD: frozenset({CommandType.UP, CommandType.STOP}),
    ElevatorStatus.DOWNWARD: frozenset({CommandType.DOWN, CommandType.STOP}),
}


class CommandRejected(ValueError):
    """Raised when the authority refuses a command."""

    def __init__(self, elevator_id: int, message: str) -> None:
        super().__init__(f"elevator {elevator_id}: {message}")
        self.elevator_id = elevator_id


@dataclass
class Elevator:
    """Authority-side elevator that executes one command per tick."""

    elevator_id: int
    max_height: int
    capacity: int
    floor: int = 1
    status: ElevatorStatus = ElevatorStatus.STOPPED
    passengers: List[Passenger] = field(default_factory=list)

    def validate(self, command: Command, waiting: Dict[int, Passenger]) -> None:
        if command.command not in LEGAL_COMMANDS[self.status]:
            raise CommandRejected(
                self.elevator_id, f"{command.command.value} is not allowed while {self.status.value}"
            )

        if command.command is CommandType.UP and self.floor >= self.max_height:
            raise CommandRejected(self.elevator_id, f"cannot move up from top floor {self.floor}")
        if command.command is CommandType.DOWN and self.floor <= 1:
            raise CommandRejected(self.elevator_id, "cannot move down from floor 1")

        if command.command is CommandType.ENTER:
            self._validate_enter(command, waiting)
        elif command.command is CommandType.EXIT:
            self._validate_exit(command)

    def _validate_enter(self, command: Command, waiting: Dict[int, Passenger]) -> None:
        call_ids = command.call_ids or []
        if not call_ids:
            raise CommandRejected(self.elevator_id, "ENTER requires call_ids")
        if len(set(call_ids)) != len(call_ids):
            raise CommandRejected(self.elevator_id, "ENTER lists a call twice")
        for call_id in call_ids:
            passenger = waiting.get(call_id)
            if passenger is None:
                raise CommandRejected(self.elevator_id, f"call {call_id} is not waiting")
            if passenger.call.start != self.floor:
                raise CommandRejected(
                    self.elevator_id, f"call {call_id} waits at floor {passenger.call.start}, not {self.floor}"
                )
        if len(self.passengers) + len(call_ids) > self.capacity:
            raise CommandRejected(self.elevator_id, f"capacity {self.capacity} exceeded")

    def _validate_exit(self, command: Command) -> None:
        call_ids = command.call_ids or []
        if not call_ids:
            raise CommandRejected(self.elevator_id, "EXIT requires call_ids")
        aboard = {p.id for p in self.passengers}
        missing = [call_id for call_id in call_ids if call_id not in aboard]
        if missing:
            raise CommandRejected(self.elevator_id, f"calls {missing} are not aboard")

    def apply(
        self, command: Command, building: "Building", current_time: int, metrics: "MetricsTracker"
    ) -> None:
        kind = command.command
        if kind is CommandType.STOP:
            self.status = ElevatorStatus.STOPPED
        elif kind is CommandType.OPEN:
            self.status = ElevatorStatus.OPENED
        elif kind is CommandType.CLOSE:
            self.status = ElevatorStatus.STOPPED
        elif kind is CommandType.UP:
            self.status = ElevatorStatus.UPWARD
            self.floor += 1
        elif kind is CommandType.DOWN:
            self.status = ElevatorStatus.DOWNWARD
            self.floor -= 1
        elif kind is CommandType.ENTER:
            for passenger in building.claim(command.call_ids or []):
                passenger.record_boarding(current_time)
                metrics.record_wait_time(passenger)
                self.passengers.append(passenger)
        elif kind is CommandType.EXIT:
            self._handle_exit(command.call_ids or [], building, current_time, metrics)

    def _handle_exit(
        self, call_ids: List[int], building: "Building", current_time: int, metrics: "MetricsTracker"
    ) -> None:
        leaving = set(call_ids)
        remaining: List[Passenger] = []
        for passenger in self.passengers:
            if passenger.id not in leaving:
                remaining.append(passenger)
            elif passenger.call.end == self.floor:
                passenger.record_alighting(current_time)
                metrics.record_ride_time(passenger)
                building.deliver(passenger)
            else:
                passenger.requeue(self.floor)
                building.wait(passenger)
        self.passengers = remaining

    def snapshot(self) -> ElevatorSnapshot:
        return ElevatorSnapshot(
            id=self.elevator_id,
            floor=self.floor,
            status=self.status,
            passengers=[p.call for p in self.passengers],
        )
