from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Set

from dispatch.config import DispatchConfig
from dispatch.interface import Call, Command, CommandType, ElevatorSnapshot

from .elevator import CommandRejected, Elevator
from .passenger import Passenger

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from .simulation import MetricsTracker


@dataclass
class Building:
    """Elevators plus the calls that are waiting or already delivered."""

    config: DispatchConfig
    elevator_count: int
    elevators: List[Elevator] = field(init=False)
    waiting: Dict[int, Passenger] = field(default_factory=dict)
    delivered: List[Passenger] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.elevators = [
            Elevator(i, max_height=self.config.max_height, capacity=self.config.max_capacity)
            for i in range(self.elevator_count)
        ]

    def wait(self, passenger: Passenger) -> None:
        self.waiting[passenger.id] = passenger

    def claim(self, call_ids: List[int]) -> List[Passenger]:
        return [self.waiting.pop(call_id) for call_id in call_ids]

    def deliver(self, passenger: Passenger) -> None:
        self.delivered.append(passenger)

    def validate_action(self, commands: List[Command]) -> None:
        """Check a full action before applying any of it."""

        expected = [elevator.elevator_id for elevator in self.elevators]
        given = [command.elevator_id for command in commands]
        if sorted(given) != sorted(expected):
            raise CommandRejected(
                -1, f"expected exactly one command per elevator {expected}, got {given}"
            )

        claimed: Set[int] = set()
        for command in commands:
            elevator = self._get_elevator(command.elevator_id)
            elevator.validate(command, self.waiting)
            if command.command is CommandType.ENTER:
                contested = claimed.intersection(command.call_ids or [])
                if contested:
                    raise CommandRejected(
                        command.elevator_id, f"calls {sorted(contested)} already entered by another elevator"
                    )
                claimed.update(command.call_ids or [])

    def apply_action(self, commands: List[Command], current_time: int, metrics: "MetricsTracker") -> None:
        self.validate_action(commands)
        for command in commands:
            self._get_elevator(command.elevator_id).apply(command, self, current_time, metrics)

    def visible_calls(self) -> List[Call]:
        calls = [p.call for p in self.waiting.values()]
        return sorted(calls, key=lambda call: (call.timestamp, call.id))

    def elevator_snapshots(self) -> List[ElevatorSnapshot]:
        return [elevator.snapshot() for elevator in self.elevators]

    def snapshot(self) -> dict:
        return {
            "waiting": len(self.waiting),
            "delivered": len(self.delivered),
            "elevators": [
                {
                    "id": elevator.elevator_id,
                    "floor": elevator.floor,
                    "status": elevator.status.value,
                    "passenger_count": len(elevator.passengers),
                }
                for elevator in self.elevators
            ],
        }

    def _get_elevator(self, elevator_id: int) -> Elevator:
        elevator = self._find_elevator(elevator_id)
        if elevator is None:
            raise CommandRejected(elevator_id, "unknown elevator")
        return elevator

    def _find_elevator(self, elevator_id: int) -> Optional[Elevator]:
        for elevator in self.elevators:
            if elevator.elevator_id == elevator_id:
                return elevator
        return None
