from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dispatch.interface import Call


@dataclass
class Passenger:
    """Tracks one call through waiting, riding and delivery."""

    call: Call
    board_time: Optional[int] = None
    alight_time: Optional[int] = None

    @property
    def id(self) -> int:
        return self.call.id

    @property
    def arrival_time(self) -> int:
        return self.call.timestamp

    def record_boarding(self, time_step: int) -> None:
        self.board_time = time_step

    def record_alighting(self, time_step: int) -> None:
        self.alight_time = time_step

    def requeue(self, floor: int) -> None:
        """Put a rider who left early back in line from ``floor``."""

        self.call = Call(id=self.call.id, timestamp=self.call.timestamp, start=floor, end=self.call.end)

    @property
    def wait_time(self) -> Optional[int]:
        if self.board_time is None:
            return None
        return self.board_time - self.arrival_time

    @property
    def ride_time(self) -> Optional[int]:
        if self.board_time is None or self.alight_time is None:
            return None
        return self.alight_time - self.board_time
