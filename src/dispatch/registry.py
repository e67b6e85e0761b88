from __future__ import annotations

from typing import Dict, Iterable, List, Tuple, Union

from .interface import Call


class CallRegistry:
    """Calls reported by the authority that no elevator has boarded yet.

    Entries are keyed by call id. The ordered view is rebuilt on every
    request so removals made for one elevator are seen by the next one.
    """

    def __init__(self, calls: Iterable[Call] = ()) -> None:
        self._calls: Dict[int, Call] = {}
        for call in calls:
            self._calls.setdefault(call.id, call)

    @classmethod
    def build(cls, calls: Iterable[Call]) -> "CallRegistry":
        return cls(calls)

    def remove(self, call: Union[Call, int]) -> None:
        call_id = call.id if isinstance(call, Call) else call
        self._calls.pop(call_id, None)

    def ordered_view(self) -> List[Call]:
        return sorted(self._calls.values(), key=lambda call: (call.start, call.id))

    def at_floor(self, floor: int) -> List[Call]:
        return [call for call in self.ordered_view() if call.start == floor]

    def count_around(self, floor: int, include_current: bool = False) -> Tuple[int, int]:
        """Return ``(above, below)`` counts of waiting calls relative to ``floor``.

        With ``include_current`` a call starting on ``floor`` counts toward both.
        """

        above = below = 0
        for call in self.ordered_view():
            if call.start > floor:
                above += 1
            elif call.start < floor:
                below += 1
            elif include_current:
                above += 1
                below += 1
        return above, below

    def ids(self) -> List[int]:
        return [call.id for call in self.ordered_view()]

    def __contains__(self, call: object) -> bool:
        if isinstance(call, Call):
            return call.id in self._calls
        return call in self._calls

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self):
        return iter(self.ordered_view())
