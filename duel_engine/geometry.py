from .model import GRID_SIZE, SHOOT_RANGE, Position


def chebyshev_distance(a: Position, b: Position) -> int:
    """Distance where diagonal steps cost the same as straight ones."""
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def manhattan_distance(a: Position, b: Position) -> int:
    """Grid-step distance with orthogonal moves only."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def is_in_range(shooter: Position, target: Position) -> bool:
    """Check if target is within shooting range of shooter."""
    return chebyshev_distance(shooter, target) <= SHOOT_RANGE


def in_bounds(pos: Position) -> bool:
    return 0 <= pos[0] < GRID_SIZE and 0 <= pos[1] < GRID_SIZE


def offset(pos: Position, dx: int, dy: int) -> Position:
    return (pos[0] + dx, pos[1] + dy)
