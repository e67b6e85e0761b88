from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Set

from dispatch.coordinator import CycleCoordinator
from dispatch.interface import Call, Command, CycleSnapshot

from .building import Building
from .config import ScenarioSettings
from .passenger import Passenger

logger = logging.getLogger(__name__)


@dataclass
class MetricsSnapshot:
    time_step: int
    average_wait: float
    wait_p95: float
    average_ride: float
    ride_p95: float
    throughput: int


class MetricsTracker:
    def __init__(self) -> None:
        self.wait_times: List[int] = []
        self.ride_times: List[int] = []
        self.throughput: int = 0

    def record_wait_time(self, passenger: Passenger) -> None:
        if passenger.wait_time is not None:
            self.wait_times.append(passenger.wait_time)

    def record_ride_time(self, passenger: Passenger) -> None:
        if passenger.ride_time is not None:
            self.ride_times.append(passenger.ride_time)
            self.throughput += 1

    def _average(self, values: List[int]) -> float:
        if not values:
            return 0.0
        return sum(values) / len(values)

    def _percentile(self, values: List[int], percentile: float) -> float:
        if not values:
            return 0.0
        ordered = sorted(values)
        k = (len(ordered) - 1) * percentile
        lower = math.floor(k)
        upper = math.ceil(k)
        if lower == upper:
            return float(ordered[int(k)])
        return float(ordered[lower] * (upper - k) + ordered[upper] * (k - lower))

    def snapshot(self, time_step: int) -> MetricsSnapshot:
        return MetricsSnapshot(
            time_step=time_step,
            average_wait=self._average(self.wait_times),
            wait_p95=self._percentile(self.wait_times, 0.95),
            average_ride=self._average(self.ride_times),
            ride_p95=self._percentile(self.ride_times, 0.95),
            throughput=self.throughput,
        )


class Simulation:
    """Tick-based stand-in for the remote elevator authority.

    Each ``step`` consumes one command per elevator and advances the
    timestamp by one.
    """

    def __init__(self, settings: ScenarioSettings) -> None:
        self.settings = settings
        self.config = settings.dispatch_config
        self.building = Building(config=self.config, elevator_count=settings.elevator_count)
        self.random = random.Random(settings.random_seed)
        self.current_time: int = 0
        self.metrics = MetricsTracker()
        self.event_hooks: Dict[str, List[Callable[[object], None]]] = {}
        self._scheduled: List[Call] = self._parse_calls(settings.calls)
        self.total_calls = len(self._scheduled) if self._scheduled else settings.call_count
        self._released = 0
        self._release_arrivals()

    @property
    def is_end(self) -> bool:
        if self.current_time >= self.settings.max_ticks:
            return True
        return len(self.building.delivered) >= self.total_calls and self._released >= self.total_calls

    def on_calls(self) -> CycleSnapshot:
        return CycleSnapshot(
            calls=self.building.visible_calls(),
            elevators=self.building.elevator_snapshots(),
            timestamp=self.current_time,
            is_end=self.is_end,
        )

    def step(self, commands: List[Command]) -> None:
        self.building.apply_action(commands, self.current_time, self.metrics)
        self.current_time += 1
        self._release_arrivals()

    def run(self, coordinator: CycleCoordinator) -> MetricsSnapshot:
        """Drive the session to its end with ``coordinator`` deciding each cycle."""

        while True:
            snapshot = self.on_calls()
            if snapshot.is_end:
                break
            self.step(coordinator.run_cycle(snapshot))
        result = self.metrics.snapshot(self.current_time)
        logger.info(
            "session ended at tick %s: %d of %d calls delivered",
            self.current_time,
            len(self.building.delivered),
            self.total_calls,
        )
        self._emit("end", result)
        return result

    def on_event(self, event: str, callback: Callable[[object], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def _release_arrivals(self) -> None:
        arrivals = self._scheduled_arrivals() if self._scheduled else self._generated_arrivals()
        for call in arrivals:
            self.building.wait(Passenger(call))
            self._released += 1
        if arrivals:
            self._emit("arrival", {"time": self.current_time, "count": len(arrivals)})

    def _scheduled_arrivals(self) -> List[Call]:
        due: List[Call] = []
        while self._released + len(due) < len(self._scheduled):
            call = self._scheduled[self._released + len(due)]
            if call.timestamp > self.current_time:
                break
            due.append(call)
        return due

    def _generated_arrivals(self) -> List[Call]:
        arrivals: List[Call] = []
        for origin in range(1, self.config.max_height + 1):
            for _ in range(self._poisson(self.settings.arrival_rate_per_floor)):
                if self._released + len(arrivals) >= self.total_calls:
                    return arrivals
                arrivals.append(
                    Call(
                        id=self._released + len(arrivals),
                        timestamp=self.current_time,
                        start=origin,
                        end=self._choose_destination(origin),
                    )
                )
        return arrivals

    def _choose_destination(self, origin: int) -> int:
        possible_floors = [f for f in range(1, self.config.max_height + 1) if f != origin]
        return self.random.choice(possible_floors)

    def _poisson(self, lam: float) -> int:
        if lam <= 0:
            return 0
        threshold = math.exp(-lam)
        k = 0
        p = 1.0
        while p > threshold:
            k += 1
            p *= self.random.random()
        return k - 1

    def _parse_calls(self, raw_calls: List[Dict[str, int]]) -> List[Call]:
        calls = [self._parse_call(raw) for raw in raw_calls]
        seen: Set[int] = set()
        for call in calls:
            if call.id in seen:
                raise ValueError(f"call id {call.id} is used more than once")
            seen.add(call.id)
        return sorted(calls, key=lambda call: (call.timestamp, call.id))

    def _parse_call(self, raw: Dict[str, int]) -> Call:
        call = Call(id=raw["id"], timestamp=raw.get("timestamp", 0), start=raw["start"], end=raw["end"])
        for floor in (call.start, call.end):
            if not 1 <= floor <= self.config.max_height:
                raise ValueError(f"call {call.id} uses floor {floor} outside 1..{self.config.max_height}")
        if call.start == call.end:
            raise ValueError(f"call {call.id} starts and ends at floor {call.start}")
        return call

    def _emit(self, event: str, payload: object) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)
