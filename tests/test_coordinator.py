import unittest
from unittest.mock import patch

from dispatch import (
    Call,
    CallRegistry,
    Command,
    CommandType,
    CycleCoordinator,
    CycleSnapshot,
    DispatchConfig,
    ElevatorDecisionEngine,
    ElevatorSnapshot,
    ElevatorStatus,
    InvariantViolation,
)


class TestCycleCoordinator(unittest.TestCase):
    """Sequential evaluation of every elevator against one shared registry"""

    def setUp(self):
        self.config = DispatchConfig(max_height=25)
        self.coordinator = CycleCoordinator(ElevatorDecisionEngine(self.config))

    def snapshot(self, calls, elevators):
        return CycleSnapshot(calls=calls, elevators=elevators, timestamp=3)

    def test_one_command_per_elevator_in_snapshot_order(self):
        elevators = [
            ElevatorSnapshot(id=2, floor=1, status=ElevatorStatus.STOPPED),
            ElevatorSnapshot(id=0, floor=9, status=ElevatorStatus.UPWARD),
            ElevatorSnapshot(id=1, floor=4, status=ElevatorStatus.OPENED),
        ]
        commands = self.coordinator.run_cycle(self.snapshot([], elevators))
        self.assertEqual([c.elevator_id for c in commands], [2, 0, 1])
        self.assertEqual(
            [c.command for c in commands],
            [CommandType.STOP, CommandType.STOP, CommandType.CLOSE],
        )

    def test_earlier_elevator_wins_contested_call(self):
        call = Call(id=1, timestamp=0, start=5, end=10)
        elevators = [
            ElevatorSnapshot(id=0, floor=5, status=ElevatorStatus.OPENED),
            ElevatorSnapshot(id=1, floor=5, status=ElevatorStatus.OPENED),
        ]
        first, second = self.coordinator.run_cycle(self.snapshot([call], elevators))
        self.assertEqual(first.command, CommandType.ENTER)
        self.assertEqual(first.call_ids, [1])
        self.assertEqual(second.command, CommandType.CLOSE)
        self.assertIsNone(second.call_ids)

    def test_registry_loses_exactly_the_entered_calls(self):
        calls = [Call(id=i, timestamp=0, start=3 + (i % 3), end=20) for i in range(12)]
        elevators = [
            ElevatorSnapshot(id=0, floor=3, status=ElevatorStatus.OPENED),
            ElevatorSnapshot(id=1, floor=4, status=ElevatorStatus.OPENED),
            ElevatorSnapshot(id=2, floor=3, status=ElevatorStatus.OPENED),
        ]
        registry = CallRegistry.build(calls)
        commands = self.coordinator.decide_all(elevators, registry)

        entered = [cid for c in commands if c.command is CommandType.ENTER for cid in c.call_ids]
        self.assertEqual(len(entered), len(set(entered)))
        remaining = set(registry.ids())
        self.assertEqual(remaining, {c.id for c in calls} - set(entered))

    def test_each_cycle_starts_from_its_own_snapshot(self):
        call = Call(id=1, timestamp=0, start=5, end=10)
        elevators = [ElevatorSnapshot(id=0, floor=5, status=ElevatorStatus.OPENED)]
        first = self.coordinator.run_cycle(self.snapshot([call], elevators))
        second = self.coordinator.run_cycle(self.snapshot([call], elevators))
        self.assertEqual(first, second)
        self.assertEqual(second[0].call_ids, [1])
        self.assertFalse(hasattr(self.coordinator, "last_registry"))

    def test_capacity_is_never_exceeded(self):
        passengers = [Call(id=100 + i, timestamp=0, start=1, end=20) for i in range(7)]
        calls = [Call(id=i, timestamp=0, start=6, end=15) for i in range(5)]
        elevators = [ElevatorSnapshot(id=0, floor=6, status=ElevatorStatus.OPENED, passengers=passengers)]
        (command,) = self.coordinator.run_cycle(self.snapshot(calls, elevators))
        self.assertEqual(command.command, CommandType.ENTER)
        self.assertLessEqual(len(passengers) + len(command.call_ids), self.config.max_capacity)
        self.assertEqual(command.call_ids, [0])

    def test_call_ids_present_only_when_non_empty(self):
        calls = [Call(id=1, timestamp=0, start=8, end=2)]
        elevators = [
            ElevatorSnapshot(id=0, floor=8, status=ElevatorStatus.STOPPED),
            ElevatorSnapshot(id=1, floor=2, status=ElevatorStatus.OPENED),
            ElevatorSnapshot(id=2, floor=8, status=ElevatorStatus.OPENED),
        ]
        commands = self.coordinator.run_cycle(self.snapshot(calls, elevators))
        for command in commands:
            payload = command.to_payload()
            if command.command in (CommandType.ENTER, CommandType.EXIT):
                self.assertTrue(payload["call_ids"])
            else:
                self.assertNotIn("call_ids", payload)

    def test_end_of_session_snapshot_is_refused(self):
        snapshot = CycleSnapshot(calls=[], elevators=[], timestamp=9, is_end=True)
        with self.assertRaises(ValueError):
            self.coordinator.run_cycle(snapshot)

    def test_invariant_violation_aborts_and_is_logged(self):
        elevators = [
            ElevatorSnapshot(
                id=0, floor=3, status=ElevatorStatus.STOPPED,
                passengers=[Call(id=1, timestamp=0, start=1, end=9)],
            )
        ]
        with patch("dispatch.engine.resolve_direction", return_value=None):
            with self.assertLogs("dispatch.coordinator", level="ERROR") as logs:
                with self.assertRaises(InvariantViolation):
                    self.coordinator.run_cycle(self.snapshot([], elevators))
        self.assertIn("aborting cycle at timestamp 3", logs.output[0])


class TestCommandNormalisation(unittest.TestCase):
    def test_empty_call_ids_are_dropped(self):
        self.assertIsNone(Command(elevator_id=0, command=CommandType.ENTER, call_ids=[]).call_ids)

    def test_call_ids_dropped_for_non_passenger_commands(self):
        command = Command(elevator_id=0, command=CommandType.OPEN, call_ids=[1, 2])
        self.assertIsNone(command.call_ids)
        self.assertEqual(command.to_payload(), {"elevator_id": 0, "command": "OPEN"})

    def test_exit_payload_keeps_ids(self):
        command = Command(elevator_id=1, command=CommandType.EXIT, call_ids=[4, 6])
        self.assertEqual(command.to_payload(), {"elevator_id": 1, "command": "EXIT", "call_ids": [4, 6]})


if __name__ == "__main__":
    unittest.main()
