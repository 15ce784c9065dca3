from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Literal, Optional, Tuple, Union

RobotId = Literal["user", "enemy"]
Position = Tuple[int, int]  # (x, y) grid cell

# Board layout
GRID_SIZE = 7
MAX_AMMO = 3
SHOOT_RANGE = 3  # Chebyshev distance
MESSAGE_LOG_SIZE = 5

GOAL_LEFT: Position = (0, 0)       # Enemy scoring target
GOAL_RIGHT: Position = (6, 0)      # User scoring target
RELOADER_LEFT: Position = (0, 6)   # User reloader
RELOADER_RIGHT: Position = (6, 6)  # Enemy reloader

USER_START: Position = (2, 5)
ENEMY_START: Position = (4, 5)

GOALS: Dict[str, Position] = {"user": GOAL_RIGHT, "enemy": GOAL_LEFT}
RELOADERS: Dict[str, Position] = {"user": RELOADER_LEFT, "enemy": RELOADER_RIGHT}
STARTS: Dict[str, Position] = {"user": USER_START, "enemy": ENEMY_START}


class Phase(Enum):
    """Match phase"""
    WAITING = "WAITING"
    AUTO = "AUTO"      # Both robots scripted
    TELEOP = "TELEOP"  # User robot driven by intents
    ENDED = "ENDED"


RUNNING_PHASES = (Phase.AUTO, Phase.TELEOP)


@dataclass(frozen=True)
class MatchConfig:
    """Match timings"""
    total_time_s: int = 150
    auto_time_s: int = 30
    tick_rate_ms: int = 600  # AI cadence
    clock_ms: int = 1000


@dataclass(frozen=True)
class RobotState:
    id: RobotId
    pos: Position
    ammo: int = MAX_AMMO
    score: int = 0
    last_shot_ms: int = 0  # For cooldown visuals


@dataclass(frozen=True)
class MatchState:
    phase: Phase
    time_remaining: int
    user: RobotState
    enemy: RobotState
    messages: Tuple[str, ...] = ()  # Most recent first
    ts_ms: int = 0

    @property
    def running(self) -> bool:
        return self.phase in RUNNING_PHASES

    def robot(self, robot_id: RobotId) -> RobotState:
        return self.user if robot_id == "user" else self.enemy

    def other(self, robot_id: RobotId) -> RobotState:
        return self.enemy if robot_id == "user" else self.user

    def with_robot(self, robot: RobotState) -> "MatchState":
        """Return a copy with one robot replaced."""
        if robot.id == "user":
            return replace(self, user=robot)
        return replace(self, enemy=robot)

    def log(self, message: str) -> "MatchState":
        """Return a copy with message pushed onto the capped log."""
        return replace(self, messages=((message,) + self.messages)[:MESSAGE_LOG_SIZE])

    @property
    def outcome(self) -> Optional[str]:
        """Result from the user's point of view once the match has ended."""
        if self.phase != Phase.ENDED:
            return None
        if self.user.score > self.enemy.score:
            return "VICTORY"
        if self.user.score < self.enemy.score:
            return "DEFEAT"
        return "DRAW"


@dataclass(frozen=True)
class Move:
    target: Position


@dataclass(frozen=True)
class Shoot:
    pass


@dataclass(frozen=True)
class Reload:
    pass


@dataclass(frozen=True)
class Idle:
    """Reserved; the current policy never idles."""


Action = Union[Move, Shoot, Reload, Idle]


@dataclass(frozen=True)
class Intent:
    kind: Literal["move", "shoot", "reload"]
    dx: int = 0
    dy: int = 0


@dataclass
class Event:
    kind: str
    ts_ms: int
    data: Dict = field(default_factory=dict)
