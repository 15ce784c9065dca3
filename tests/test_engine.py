"""Test match rules: moves, shots, reloads, the clock and AI ticks."""
from dataclasses import replace

import pytest

from duel_engine.engine import (advance_ai, advance_clock, apply_intent, move_robot, new_match, reload,
                                shoot, start_match)
from duel_engine.model import MAX_AMMO, RELOADER_LEFT, RELOADER_RIGHT, Intent, MatchConfig, MatchState, Phase

CONFIG = MatchConfig()


def started() -> MatchState:
    """A freshly started match in AUTO."""
    state, _ = start_match(new_match(CONFIG), CONFIG)
    return state


def placed(state: MatchState, robot_id: str, **changes) -> MatchState:
    return state.with_robot(replace(state.robot(robot_id), **changes))


def teleop() -> MatchState:
    return replace(started(), phase=Phase.TELEOP)


def test_start_resets_everything():
    state = started()
    assert state.phase == Phase.AUTO
    assert state.time_remaining == 150
    assert state.user.pos == (2, 5) and state.enemy.pos == (4, 5)
    assert state.user.ammo == state.enemy.ammo == MAX_AMMO
    assert state.messages == ("Game Started!", "AUTO MODE: 30 Seconds")


def test_start_ignored_while_running():
    state = placed(started(), "user", score=4)
    again, evts = start_match(state, CONFIG)
    assert again == state
    assert evts == []


def test_start_allowed_after_end():
    ended = replace(placed(started(), "user", score=4), phase=Phase.ENDED, time_remaining=0)
    state, evts = start_match(ended, CONFIG)
    assert state.phase == Phase.AUTO
    assert state.user.score == 0
    assert evts[0].kind == "MatchStarted"


def test_out_of_bounds_move_is_silent():
    state = started()
    for target in [(-1, 5), (7, 5), (2, 7), (2, -1)]:
        after, evts = move_robot(state, "user", target)
        assert after == state
        assert evts == []


def test_move_updates_position():
    state, evts = move_robot(started(), "user", (2, 4))
    assert state.user.pos == (2, 4)
    assert evts[0].kind == "RobotMoved"


def test_collision_penalty_repeats_without_moving():
    state = started()
    for i in range(1, 4):
        state, evts = move_robot(state, "user", state.enemy.pos)
        assert state.user.pos == (2, 5)
        assert state.user.score == -i
        assert evts[0].kind == "Collision"
    assert state.messages[0] == "User Collision! -1 Pt"
    assert state.enemy.score == 0


def test_enemy_collision_message():
    state, _ = move_robot(started(), "enemy", (2, 5))
    assert state.enemy.score == -1
    assert state.messages[0] == "Enemy Collision! -1 Pt"


def test_shoot_without_ammo_is_noop():
    state = placed(started(), "user", pos=(3, 2), ammo=0)
    after, evts = shoot(state, "user")
    assert after == state
    assert evts == []


def test_shoot_own_goal_scores():
    state = replace(placed(started(), "user", pos=(3, 2), ammo=1), ts_ms=4200)
    state, evts = shoot(state, "user")
    assert state.user.ammo == 0
    assert state.user.score == 1
    assert state.user.last_shot_ms == 4200
    assert state.messages[0] == "User Scored! +1"
    assert [e.kind for e in evts] == ["ShotFired", "Scored"]


def test_shoot_wrong_goal_rewards_opponent():
    state = placed(started(), "user", pos=(0, 2), ammo=1)
    state, evts = shoot(state, "user")
    assert state.user.ammo == 0
    assert state.user.score == 0
    assert state.enemy.score == 1
    assert state.messages[0] == "User Shot Wrong Tower! Enemy +1"
    assert [e.kind for e in evts] == ["ShotFired", "WrongGoal"]


def test_enemy_wrong_goal_rewards_user():
    state = placed(started(), "enemy", pos=(6, 3), ammo=2)
    state, _ = shoot(state, "enemy")
    assert state.enemy.ammo == 1
    assert state.user.score == 1
    assert state.messages[0] == "Enemy Shot Wrong Tower! User +1"


def test_shot_out_of_range_still_spends_ammo():
    state = placed(started(), "user", pos=(3, 6), ammo=2)
    state, evts = shoot(state, "user")
    assert state.user.ammo == 1
    assert state.user.score == state.enemy.score == 0
    assert [e.kind for e in evts] == ["ShotFired"]


def test_reload_sets_ammo_to_max():
    state = placed(started(), "user", pos=RELOADER_LEFT, ammo=1)
    state, evts = reload(state, "user")
    assert state.user.ammo == MAX_AMMO
    assert state.messages[0] == "User Reloaded!"
    assert evts[0].kind == "Reloaded"


def test_reload_off_station_is_noop():
    state = placed(started(), "user", pos=(1, 6), ammo=1)
    after, evts = reload(state, "user")
    assert after == state
    assert evts == []


def test_robots_only_reload_at_their_own_station():
    state = placed(started(), "enemy", pos=RELOADER_LEFT, ammo=0)
    after, _ = reload(state, "enemy")
    assert after.enemy.ammo == 0
    state = placed(started(), "enemy", pos=RELOADER_RIGHT, ammo=0)
    after, _ = reload(state, "enemy")
    assert after.enemy.ammo == MAX_AMMO
    # Enemy reloads stay out of the message log
    assert after.messages == state.messages


def test_ammo_stays_in_bounds():
    state = placed(started(), "user", pos=RELOADER_LEFT)
    for op in [shoot, shoot, shoot, shoot, shoot, reload, reload, shoot, reload]:
        state, _ = op(state, "user")
        assert 0 <= state.user.ammo <= MAX_AMMO


def test_message_log_is_capped():
    state = started()
    for _ in range(10):
        state, _ = move_robot(state, "user", state.enemy.pos)
    assert len(state.messages) == 5


def test_teleop_after_auto_seconds():
    state = started()
    for _ in range(29):
        state, _ = advance_clock(state, CONFIG)
    assert state.phase == Phase.AUTO
    state, evts = advance_clock(state, CONFIG)
    assert state.phase == Phase.TELEOP
    assert state.time_remaining == 120
    assert state.messages[0] == "TELEOP ENABLED! Take Control!"
    assert evts[0].kind == "PhaseChanged"


def test_match_ends_at_zero():
    state = started()
    for _ in range(149):
        state, _ = advance_clock(state, CONFIG)
    assert state.time_remaining == 1
    assert state.phase == Phase.TELEOP
    state, evts = advance_clock(state, CONFIG)
    assert state.time_remaining == 0
    assert state.phase == Phase.ENDED
    assert evts[0].kind == "MatchEnded"
    assert evts[0].data["outcome"] == "DRAW"


def test_nothing_changes_after_end():
    ended = replace(started(), phase=Phase.ENDED, time_remaining=0)
    ended = placed(ended, "user", pos=RELOADER_LEFT, ammo=1)
    for state, evts in [
        advance_clock(ended, CONFIG),
        advance_ai(ended),
        apply_intent(ended, Intent("move", 0, -1)),
        apply_intent(ended, Intent("shoot")),
        apply_intent(ended, Intent("reload")),
    ]:
        assert state == ended
        assert evts == []


def test_waiting_match_does_not_tick():
    waiting = new_match(CONFIG)
    assert advance_clock(waiting, CONFIG)[0] == waiting
    assert advance_ai(waiting)[0] == waiting


@pytest.mark.parametrize("user_score, enemy_score, outcome", [
    (3, 1, "VICTORY"),
    (0, 2, "DEFEAT"),
    (-1, -1, "DRAW"),
])
def test_outcome(user_score, enemy_score, outcome):
    state = replace(started(), phase=Phase.ENDED)
    state = placed(placed(state, "user", score=user_score), "enemy", score=enemy_score)
    assert state.outcome == outcome
    assert started().outcome is None


def test_auto_tick_moves_enemy_then_user():
    state, evts = advance_ai(started())
    assert [e.data["robot"] for e in evts] == ["enemy", "user"]
    assert state.enemy.pos == (4, 4)
    # User plans around the enemy's new position
    assert state.user.pos == (2, 4)


def test_teleop_tick_only_drives_enemy():
    state, evts = advance_ai(teleop())
    assert [e.data["robot"] for e in evts] == ["enemy"]
    assert state.user.pos == (2, 5)


def test_ai_shoots_and_reloads():
    state = placed(teleop(), "enemy", pos=(3, 3), ammo=1)
    state, _ = advance_ai(state)
    assert state.enemy.ammo == 0
    assert state.enemy.score == 1
    state = placed(state, "enemy", pos=RELOADER_RIGHT)
    state, _ = advance_ai(state)
    assert state.enemy.ammo == MAX_AMMO


def test_intents_ignored_during_auto():
    state = placed(started(), "user", pos=RELOADER_LEFT, ammo=0)
    assert apply_intent(state, Intent("move", 1, 0)) == (state, [])
    assert apply_intent(state, Intent("shoot")) == (state, [])
    assert apply_intent(state, Intent("reload")) == (state, [])


def test_reload_intent_on_station_during_teleop():
    state = placed(teleop(), "user", pos=RELOADER_LEFT, ammo=0)
    after, _ = apply_intent(state, Intent("reload"))
    assert after.user.ammo == MAX_AMMO


@pytest.mark.parametrize("dx, dy", [(0, 0), (1, -1), (-1, 1), (3, -4), (0, 2)])
def test_move_intent_must_be_one_orthogonal_step(dx, dy):
    state = teleop()
    assert apply_intent(state, Intent("move", dx, dy)) == (state, [])


def test_teleop_intents_drive_user():
    state, _ = apply_intent(teleop(), Intent("move", 0, -1))
    assert state.user.pos == (2, 4)
    state, _ = apply_intent(state, Intent("shoot"))
    assert state.user.ammo == MAX_AMMO - 1
    state, _ = apply_intent(state, Intent("reload"))
    assert state.user.ammo == MAX_AMMO - 1


def test_intent_off_the_board_is_ignored():
    state = placed(teleop(), "user", pos=(0, 6))
    assert apply_intent(state, Intent("move", -1, 0))[0] == state
    assert apply_intent(state, Intent("move", 0, 1))[0] == state


def test_no_overlap_during_auto():
    state = started()
    for _ in range(200):
        state, _ = advance_ai(state)
        assert state.user.pos != state.enemy.pos
