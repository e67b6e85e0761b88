"""JSON wire models for the elevator authority protocol."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel

from .interface import (
    Call,
    Command,
    CommandType,
    CycleSnapshot,
    ElevatorSnapshot,
    ElevatorStatus,
)


class CallPayload(BaseModel):
    id: int
    timestamp: int
    start: int
    end: int

    @classmethod
    def from_call(cls, call: Call) -> "CallPayload":
        return cls(**call.to_dict())

    def to_call(self) -> Call:
        return Call(id=self.id, timestamp=self.timestamp, start=self.start, end=self.end)


class ElevatorPayload(BaseModel):
    id: int
    floor: int
    passengers: List[CallPayload] = []
    status: ElevatorStatus

    @classmethod
    def from_snapshot(cls, elevator: ElevatorSnapshot) -> "ElevatorPayload":
        return cls(
            id=elevator.id,
            floor=elevator.floor,
            status=elevator.status,
            passengers=[CallPayload.from_call(p) for p in elevator.passengers],
        )

    def to_snapshot(self) -> ElevatorSnapshot:
        return ElevatorSnapshot(
            id=self.id,
            floor=self.floor,
            status=self.status,
            passengers=[p.to_call() for p in self.passengers],
        )


class CommandPayload(BaseModel):
    elevator_id: int
    command: CommandType
    call_ids: Optional[List[int]] = None

    @classmethod
    def from_command(cls, command: Command) -> "CommandPayload":
        return cls(elevator_id=command.elevator_id, command=command.command, call_ids=command.call_ids)

    def to_command(self) -> Command:
        return Command(elevator_id=self.elevator_id, command=self.command, call_ids=self.call_ids)

    def to_wire(self) -> Dict[str, object]:
        return self.model_dump(mode="json", exclude_none=True)


class StartResponse(BaseModel):
    token: str
    problem: int
    elevator_count: int
    max_height: int
    timestamp: int = 0


class OnCallsResponse(BaseModel):
    token: str
    timestamp: int
    elevators: List[ElevatorPayload]
    calls: List[CallPayload]
    is_end: bool

    @classmethod
    def from_snapshot(cls, token: str, snapshot: CycleSnapshot) -> "OnCallsResponse":
        return cls(
            token=token,
            timestamp=snapshot.timestamp,
            elevators=[ElevatorPayload.from_snapshot(e) for e in snapshot.elevators],
            calls=[CallPayload.from_call(c) for c in snapshot.calls],
            is_end=snapshot.is_end,
        )

    def to_snapshot(self) -> CycleSnapshot:
        return CycleSnapshot(
            calls=[call.to_call() for call in self.calls],
            elevators=[elevator.to_snapshot() for elevator in self.elevators],
            timestamp=self.timestamp,
            is_end=self.is_end,
        )


class ActionRequest(BaseModel):
    commands: List[CommandPayload]

    @classmethod
    def from_commands(cls, commands: List[Command]) -> "ActionRequest":
        return cls(commands=[CommandPayload.from_command(c) for c in commands])

    def to_wire(self) -> Dict[str, object]:
        return {"commands": [command.to_wire() for command in self.commands]}


class ActionResponse(BaseModel):
    token: str
    timestamp: int
    elevators: List[ElevatorPayload]
    is_end: bool
