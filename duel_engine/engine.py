from dataclasses import replace
from typing import List, Tuple

from .geometry import in_bounds, is_in_range, offset
from .model import (GOALS, MAX_AMMO, RELOADERS, STARTS, Event, Intent, MatchConfig, MatchState,
                    Move, Phase, Position, Reload, RobotId, RobotState, Shoot)
from .pathfinding import next_step
from .policy import Policy, decide

Transition = Tuple[MatchState, List[Event]]

_NAMES = {"user": "User", "enemy": "Enemy"}


def _fresh_robots() -> Tuple[RobotState, RobotState]:
    return (RobotState(id="user", pos=STARTS["user"]),
            RobotState(id="enemy", pos=STARTS["enemy"]))


def new_match(config: MatchConfig) -> MatchState:
    """Create the idle pre-match state."""
    user, enemy = _fresh_robots()
    return MatchState(phase=Phase.WAITING, time_remaining=config.total_time_s,
                      user=user, enemy=enemy)


def start_match(state: MatchState, config: MatchConfig) -> Transition:
    """Reset everything and enter AUTO. Ignored while a match is running."""
    if state.running:
        return state, []
    user, enemy = _fresh_robots()
    started = MatchState(
        phase=Phase.AUTO,
        time_remaining=config.total_time_s,
        user=user,
        enemy=enemy,
        messages=("Game Started!", f"AUTO MODE: {config.auto_time_s} Seconds"),
    )
    return started, [Event("MatchStarted", 0, {"total_time_s": config.total_time_s,
                                              "auto_time_s": config.auto_time_s})]


def move_robot(state: MatchState, robot_id: RobotId, target: Position) -> Transition:
    """Place a robot on target; bumping into the other robot costs a point."""
    if not in_bounds(target):
        return state, []

    mover = state.robot(robot_id)
    if target == state.other(robot_id).pos:
        state = state.with_robot(replace(mover, score=mover.score - 1))
        state = state.log(f"{_NAMES[robot_id]} Collision! -1 Pt")
        return state, [Event("Collision", state.ts_ms, {"robot": robot_id, "at": list(target)})]

    state = state.with_robot(replace(mover, pos=target))
    return state, [Event("RobotMoved", state.ts_ms,
                         {"robot": robot_id, "from": list(mover.pos), "to": list(target)})]


def shoot(state: MatchState, robot_id: RobotId) -> Transition:
    """Spend one round and score whichever goal the shooter is in range of."""
    shooter = state.robot(robot_id)
    if shooter.ammo <= 0:
        return state, []

    other_id: RobotId = "enemy" if robot_id == "user" else "user"
    shooter = replace(shooter, ammo=shooter.ammo - 1, last_shot_ms=state.ts_ms)
    state = state.with_robot(shooter)
    evts = [Event("ShotFired", state.ts_ms,
                  {"robot": robot_id, "from": list(shooter.pos), "ammo": shooter.ammo})]

    name, other_name = _NAMES[robot_id], _NAMES[other_id]
    if is_in_range(shooter.pos, GOALS[robot_id]):
        state = state.with_robot(replace(shooter, score=shooter.score + 1))
        state = state.log(f"{name} Scored! +1")
        evts.append(Event("Scored", state.ts_ms, {"robot": robot_id, "points": 1}))
    elif is_in_range(shooter.pos, GOALS[other_id]):
        opponent = state.robot(other_id)
        state = state.with_robot(replace(opponent, score=opponent.score + 1))
        state = state.log(f"{name} Shot Wrong Tower! {other_name} +1")
        evts.append(Event("WrongGoal", state.ts_ms, {"robot": robot_id, "awarded_to": other_id}))
    return state, evts


def reload(state: MatchState, robot_id: RobotId) -> Transition:
    """Refill to MAX_AMMO, only while standing on the robot's own reloader."""
    robot = state.robot(robot_id)
    if robot.pos != RELOADERS[robot_id]:
        return state, []
    state = state.with_robot(replace(robot, ammo=MAX_AMMO))
    if robot_id == "user":
        state = state.log("User Reloaded!")
    return state, [Event("Reloaded", state.ts_ms, {"robot": robot_id, "ammo": MAX_AMMO})]


def advance_clock(state: MatchState, config: MatchConfig) -> Transition:
    """One second of match time: count down, switch to TELEOP, or end."""
    if not state.running:
        return state, []

    if state.time_remaining <= 1:
        state = replace(state, time_remaining=0, phase=Phase.ENDED)
        return state, [Event("MatchEnded", state.ts_ms, {
            "user_score": state.user.score,
            "enemy_score": state.enemy.score,
            "outcome": state.outcome,
        })]

    state = replace(state, time_remaining=state.time_remaining - 1)
    elapsed = config.total_time_s - state.time_remaining
    if elapsed == config.auto_time_s and state.phase == Phase.AUTO:
        state = replace(state, phase=Phase.TELEOP).log("TELEOP ENABLED! Take Control!")
        return state, [Event("PhaseChanged", state.ts_ms, {"phase": Phase.TELEOP.value})]
    return state, []


def _act(state: MatchState, robot_id: RobotId, policy: Policy) -> Transition:
    robot = state.robot(robot_id)
    obstacle = state.other(robot_id).pos
    action = policy(robot, obstacle, GOALS[robot_id], RELOADERS[robot_id])

    if isinstance(action, Move):
        return move_robot(state, robot_id, next_step(robot.pos, action.target, obstacle))
    if isinstance(action, Shoot):
        return shoot(state, robot_id)
    if isinstance(action, Reload):
        return reload(state, robot_id)
    return state, []


def advance_ai(state: MatchState, policy: Policy = decide) -> Transition:
    """One AI tick. The enemy always acts first; the user only during AUTO."""
    if not state.running:
        return state, []
    state, evts = _act(state, "enemy", policy)
    if state.phase == Phase.AUTO:
        state, user_evts = _act(state, "user", policy)
        evts += user_evts
    return state, evts


def is_step(intent: Intent) -> bool:
    """True for a single orthogonal step."""
    return abs(intent.dx) + abs(intent.dy) == 1


def apply_intent(state: MatchState, intent: Intent) -> Transition:
    """Apply a human intent to the user robot. Only honoured during TELEOP."""
    if state.phase != Phase.TELEOP:
        return state, []
    if intent.kind == "move":
        if not is_step(intent):
            return state, []
        return move_robot(state, "user", offset(state.user.pos, intent.dx, intent.dy))
    if intent.kind == "shoot":
        return shoot(state, "user")
    if intent.kind == "reload":
        return reload(state, "user")
    return state, []


class Engine:
    """Pure, deterministic match engine and sole owner of the match state."""

    def __init__(self, config: MatchConfig = MatchConfig(), policy: Policy = decide):
        self.config = config
        self.policy = policy
        self.state = new_match(config)
        self._next_clock_ms = config.clock_ms
        self._next_tick_ms = config.tick_rate_ms

    @property
    def running(self) -> bool:
        return self.state.running

    def _commit(self, transition: Transition) -> List[Event]:
        self.state, evts = transition
        return evts

    def start(self) -> List[Event]:
        """Start (or restart) a match and re-arm both timers."""
        evts = self._commit(start_match(self.state, self.config))
        if evts:
            self._next_clock_ms = self.config.clock_ms
            self._next_tick_ms = self.config.tick_rate_ms
        return evts

    def clock_tick(self) -> List[Event]:
        return self._commit(advance_clock(self.state, self.config))

    def sim_tick(self) -> List[Event]:
        return self._commit(advance_ai(self.state, self.policy))

    def submit(self, intent: Intent) -> List[Event]:
        return self._commit(apply_intent(self.state, intent))

    def step(self, dt_ms: int) -> List[Event]:
        """Advance match time by dt_ms, firing every due clock and AI tick in order."""
        evts: List[Event] = []
        end_ms = self.state.ts_ms + dt_ms
        while self.running:
            due = min(self._next_clock_ms, self._next_tick_ms)
            if due > end_ms:
                break
            self.state = replace(self.state, ts_ms=due)
            # Clock first when both are due at the same instant
            if self._next_clock_ms <= self._next_tick_ms:
                self._next_clock_ms += self.config.clock_ms
                evts += self.clock_tick()
            else:
                self._next_tick_ms += self.config.tick_rate_ms
                evts += self.sim_tick()
        if self.running:
            self.state = replace(self.state, ts_ms=end_ms)
        return evts

    def snapshot(self) -> MatchState:
        """Return current state."""
        return self.state
