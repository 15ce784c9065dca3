"""Input adapters: translate raw keys and board taps into engine intents.

The engine re-validates every intent, so these checks only decide whether a
control is offered at all.
"""
from typing import Dict, Optional

from duel_engine.model import MAX_AMMO, RELOADERS, Intent, MatchState, Phase, Position

UP = Intent("move", 0, -1)
DOWN = Intent("move", 0, 1)
LEFT = Intent("move", -1, 0)
RIGHT = Intent("move", 1, 0)
SHOOT = Intent("shoot")
RELOAD = Intent("reload")

KEY_BINDINGS: Dict[str, Intent] = {
    # Arrow keys
    "ArrowUp": UP,
    "ArrowDown": DOWN,
    "ArrowLeft": LEFT,
    "ArrowRight": RIGHT,
    # Operator console keypad
    "6": UP,
    "7": DOWN,
    "9": LEFT,
    "8": RIGHT,
    "5": SHOOT,
    "r": RELOAD,
    "R": RELOAD,
}


def on_reloader(state: MatchState) -> bool:
    return state.user.pos == RELOADERS["user"]


def intent_for_key(key: str, state: MatchState) -> Optional[Intent]:
    """Map a key press to an intent, or None if the key does nothing right now."""
    if state.phase != Phase.TELEOP:
        return None
    intent = KEY_BINDINGS.get(key)
    if intent == RELOAD and not on_reloader(state):
        return None
    return intent


def intent_for_tap(cell: Position, state: MatchState) -> Optional[Intent]:
    """Tapping the user's own robot while it sits on its reloader reloads it."""
    if state.phase != Phase.TELEOP:
        return None
    if tuple(cell) == state.user.pos and on_reloader(state):
        return RELOAD
    return None


def control_availability(state: MatchState) -> Dict[str, bool]:
    """Which operator console buttons should be enabled."""
    return {
        "enabled": state.phase == Phase.TELEOP,
        "can_shoot": state.user.ammo > 0,
        "can_reload": on_reloader(state) and state.user.ammo < MAX_AMMO,
    }
