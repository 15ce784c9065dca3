from typing import Callable

import numpy as np

from .geometry import is_in_range
from .model import GRID_SIZE, SHOOT_RANGE, Action, Move, Position, Reload, RobotState, Shoot

Policy = Callable[[RobotState, Position, Position, Position], Action]

# Grid coordinates indexed [y, x] so flat order is row-major
_YS, _XS = np.indices((GRID_SIZE, GRID_SIZE))


def firing_mask(goal: Position) -> np.ndarray:
    """Boolean [y, x] grid of cells within shooting range of goal."""
    cheb = np.maximum(np.abs(_XS - goal[0]), np.abs(_YS - goal[1]))
    return cheb <= SHOOT_RANGE


def best_firing_spot(pos: Position, goal: Position) -> Position:
    """Closest in-range cell by Manhattan distance, first in row-major order on ties."""
    dist = np.abs(_XS - pos[0]) + np.abs(_YS - pos[1])
    dist = np.where(firing_mask(goal), dist, np.iinfo(dist.dtype).max)
    y, x = np.unravel_index(int(np.argmin(dist)), dist.shape)
    return (int(x), int(y))


def decide(agent: RobotState, opponent_pos: Position, goal: Position, reloader: Position) -> Action:
    """Scripted opponent: reload when empty, shoot when in range, else close in.

    opponent_pos is part of the policy signature so alternative policies can
    react to the other robot; the fixed policy leaves avoidance to the
    pathfinder.
    """
    # 1. Out of ammo: head for the reloader
    if agent.ammo == 0:
        if agent.pos == reloader:
            return Reload()
        return Move(reloader)

    # 2. Already in range
    if is_in_range(agent.pos, goal):
        return Shoot()

    # 3. Move to the nearest firing position
    return Move(best_firing_spot(agent.pos, goal))
