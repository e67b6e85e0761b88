"""Local stand-in for the remote elevator authority."""

from .building import Building
from .config import ScenarioSettings
from .elevator import CommandRejected, Elevator
from .passenger import Passenger
from .simulation import MetricsSnapshot, MetricsTracker, Simulation

__all__ = [
    "Building",
    "CommandRejected",
    "Elevator",
    "MetricsSnapshot",
    "MetricsTracker",
    "Passenger",
    "ScenarioSettings",
    "Simulation",
]
