from collections import deque
from typing import Dict, Optional

from .geometry import in_bounds, offset
from .model import Position

# Exploration order decides ties between equally short paths
DIRECTIONS = (
    (0, -1),  # Up
    (0, 1),   # Down
    (-1, 0),  # Left
    (1, 0),   # Right
)


def next_step(start: Position, target: Position, obstacle: Position) -> Position:
    """Return the first cell on a shortest 4-connected path from start to target.

    The obstacle cell (the other robot) is treated as a wall. If the target
    cannot be reached the robot stays where it is.
    """
    if start == target:
        return start

    # Each discovered cell remembers the first step taken from start to reach it
    first_step: Dict[Position, Optional[Position]] = {start: None}
    queue = deque([start])

    while queue:
        pos = queue.popleft()
        if pos == target:
            return first_step[pos] or start

        for dx, dy in DIRECTIONS:
            nxt = offset(pos, dx, dy)
            if not in_bounds(nxt) or nxt == obstacle or nxt in first_step:
                continue
            first_step[nxt] = first_step[pos] or nxt
            queue.append(nxt)

    return start
