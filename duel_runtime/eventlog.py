from typing import List, Tuple
from duel_engine.model import Event

class EventLog:
    """Append-only match event storage for replay and streaming.

    Offsets are positions in the log; a client polls with the offset it got
    back last time to receive only newer events.
    """

    def __init__(self):
        self._log: List[Event] = []

    def __len__(self) -> int:
        return len(self._log)

    def append_many(self, evts: List[Event]) -> int:
        """Append events and return the offset just past them."""
        self._log.extend(evts)
        return len(self._log)

    def since(self, offset: int, limit: int = 1000) -> Tuple[List[Event], int]:
        """Return up to limit events at or after offset, plus the next offset to poll."""
        start = min(max(0, offset), len(self._log))
        chunk = self._log[start:start + limit]
        return chunk, start + len(chunk)

    def clear(self) -> None:
        """Drop everything, e.g. when a new match starts."""
        self._log.clear()
