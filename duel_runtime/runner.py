import asyncio
from typing import List
from duel_engine.engine import Engine
from duel_engine.model import Event, Intent, MatchState
from .eventlog import EventLog

class TickRunner:
    """Async driver that feeds wall-clock time into the engine's match timers."""

    def __init__(self, engine: Engine, tick_ms: int = 200, time_compression: float = 1.0):
        self.engine = engine
        self.tick_ms = tick_ms
        self.time_compression = time_compression
        self.sleep_s = (tick_ms / 1000.0) / max(0.1, time_compression)
        self.events = EventLog()
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def restart(self) -> bool:
        """Start a new match and re-arm the loop. Rejected while a match is running."""
        async with self._lock:
            if self.engine.running:
                print("[TickRunner] Match already running, ignoring start")
                return False
        await self.stop()
        async with self._lock:
            evts = self.engine.start()
            self.events.clear()
            next_offset = self.events.append_many(evts)
        print(f"[TickRunner] Match started, event log at offset {next_offset}")
        self._task = asyncio.create_task(self._loop())
        return True

    async def stop(self):
        """Stop the tick loop gracefully."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self):
        """Main tick loop - advance match time until the match leaves its running phases."""
        while True:
            await asyncio.sleep(self.sleep_s)
            async with self._lock:
                evts: List[Event] = self.engine.step(self.tick_ms)
                running = self.engine.running
            next_offset = self.events.append_many(evts)
            if not running:
                state = self.engine.snapshot()
                print(f"[TickRunner] Match ended {state.user.score}-{state.enemy.score}, {next_offset} events logged")
                return

    async def submit(self, intent: Intent) -> List[Event]:
        """Apply an intent immediately and log what it caused."""
        async with self._lock:
            evts = self.engine.submit(intent)
        self.events.append_many(evts)
        return evts

    async def snapshot(self) -> MatchState:
        """Get current state."""
        async with self._lock:
            return self.engine.snapshot()

    def set_time_compression(self, time_compression: float):
        """Update time compression factor (1.0 = real-time, higher = faster)."""
        self.time_compression = max(0.1, min(1000.0, time_compression))
        self.sleep_s = (self.tick_ms / 1000.0) / self.time_compression
        print(f"[TickRunner] Time compression set to {self.time_compression}x (sleep: {self.sleep_s:.4f}s)")
