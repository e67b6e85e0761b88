from __future__ import annotations

from typing import Iterable, List, Optional

from .config import DispatchConfig
from .interface import Call, Direction, ElevatorSnapshot, ElevatorStatus


def tie_break(floor: int, config: DispatchConfig) -> Direction:
    """Pick a direction when counts are even: upper half goes up."""

    return Direction.UP if floor >= config.midpoint else Direction.DOWN


def resolve_direction(elevator: ElevatorSnapshot, config: DispatchConfig) -> Optional[Direction]:
    """Resolve the travel direction of a loaded elevator by passenger majority.

    Returns ``None`` for an empty elevator; direction only has meaning while
    passengers are aboard.
    """

    if not elevator.passengers:
        return None
    up = sum(1 for passenger in elevator.passengers if passenger.direction is Direction.UP)
    down = len(elevator.passengers) - up
    if up > down:
        return Direction.UP
    if down > up:
        return Direction.DOWN
    return tie_break(elevator.floor, config)


def exiting_here(elevator: ElevatorSnapshot) -> List[Call]:
    return [passenger for passenger in elevator.passengers if passenger.end == elevator.floor]


def filter_by_direction(calls: Iterable[Call], direction: Optional[Direction]) -> List[Call]:
    if direction is None:
        return list(calls)
    return [call for call in calls if call.direction is direction]


def travel_direction(status: ElevatorStatus) -> Direction:
    return Direction.UP if status is ElevatorStatus.UPWARD else Direction.DOWN


def at_boundary(floor: int, direction: Direction, config: DispatchConfig) -> bool:
    if direction is Direction.UP:
        return floor >= config.max_height
    return floor <= 1
