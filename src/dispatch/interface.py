from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ElevatorStatus(str, Enum):
    STOPPED = "STOPPED"
    OPENED = "OPENED"
    UPWARD = "UPWARD"
    DOWNWARD = "DOWNWARD"


class CommandType(str, Enum):
    ENTER = "ENTER"
    STOP = "STOP"
    OPEN = "OPEN"
    EXIT = "EXIT"
    CLOSE = "CLOSE"
    UP = "UP"
    DOWN = "DOWN"


class Direction(str, Enum):
    UP = "UP"
    DOWN = "DOWN"

    @property
    def command(self) -> CommandType:
        return CommandType.UP if self is Direction.UP else CommandType.DOWN


CARRIES_CALL_IDS = (CommandType.ENTER, CommandType.EXIT)


@dataclass(frozen=True)
class Call:
    """A request to travel from ``start`` to ``end``."""

    id: int
    timestamp: int
    start: int
    end: int

    @property
    def direction(self) -> Direction:
        # end == start never comes from the authority; it falls on the down side.
        return Direction.UP if self.end > self.start else Direction.DOWN

    def to_dict(self) -> Dict[str, int]:
        return {"id": self.id, "timestamp": self.timestamp, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class ElevatorSnapshot:
    """View of one elevator as reported for the current cycle."""

    id: int
    floor: int
    status: ElevatorStatus
    passengers: List[Call] = field(default_factory=list)

    @property
    def load(self) -> int:
        return len(self.passengers)


@dataclass(frozen=True)
class Command:
    """The single instruction issued to one elevator for the next cycle."""

    elevator_id: int
    command: CommandType
    call_ids: Optional[List[int]] = None

    def __post_init__(self) -> None:
        if self.command not in CARRIES_CALL_IDS or not self.call_ids:
            object.__setattr__(self, "call_ids", None)
        else:
            object.__setattr__(self, "call_ids", list(self.call_ids))

    def to_payload(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "elevator_id": self.elevator_id,
            "command": self.command.value,
        }
        if self.call_ids:
            payload["call_ids"] = list(self.call_ids)
        return payload


@dataclass(frozen=True)
class CycleSnapshot:
    """Everything the authority reports for one cycle."""

    calls: List[Call]
    elevators: List[ElevatorSnapshot]
    timestamp: int = 0
    is_end: bool = False
