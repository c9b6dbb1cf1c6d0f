import logging
import random

import pytest

from oanquan import (
    Direction,
    GameState,
    InvalidDirectionError,
    Phase,
    Settings,
    UnknownPitError,
    choose_direction,
    is_game_over,
    new_game,
    select_pit,
    selectable_pits,
)


def _sow(state: GameState, pit_id: str, direction: str):
    state = select_pit(state, pit_id)
    assert state.phase == Phase.AWAITING_DIRECTION
    return choose_direction(state, direction)


def test_new_game() -> None:
    result = new_game(Settings(), starting_player=1)
    state = result.state
    assert state.phase == Phase.AWAITING_SELECTION
    assert not state.locked
    assert state.current_player == 1
    assert state.board_stones() == 70  # 2 x 10 quan + 10 x 5 dân
    assert [p.name for p in state.players] == ["Player 1", "Player 2"]
    assert result.events == []


def test_random_starting_player_uses_rng() -> None:
    starts = {new_game(Settings(player_count=4), rng=random.Random(s)).state.current_player
              for s in range(40)}
    assert starts <= {0, 1, 2, 3}
    assert len(starts) > 1


def test_selectable_pits() -> None:
    state = new_game(Settings(), starting_player=0).state
    assert selectable_pits(state) == {"p0_d0", "p0_d1", "p0_d2", "p0_d3", "p0_d4"}

    state = GameState.from_counts(Settings(), {"p0_d1": 0, "p0_d3": 0})
    assert selectable_pits(state) == {"p0_d0", "p0_d2", "p0_d4"}


def test_select_and_deselect() -> None:
    state = new_game(Settings(), starting_player=0).state

    selected = select_pit(state, "p0_d2")
    assert selected.phase == Phase.AWAITING_DIRECTION
    assert selected.selected_pit == "p0_d2"
    # the input state is left alone
    assert state.phase == Phase.AWAITING_SELECTION
    assert state.selected_pit is None

    deselected = select_pit(selected, "p0_d2")
    assert deselected.phase == Phase.AWAITING_SELECTION
    assert deselected.selected_pit is None
    assert selectable_pits(deselected) == selectable_pits(state)


def test_switch_selection() -> None:
    state = select_pit(new_game(Settings(), starting_player=0).state, "p0_d1")
    state = select_pit(state, "p0_d3")
    assert state.phase == Phase.AWAITING_DIRECTION
    assert state.selected_pit == "p0_d3"
    assert state.direction is None


def test_ineligible_selection_is_noop() -> None:
    state = new_game(Settings(), starting_player=0).state

    # quan pit, opponent pit
    for pit_id in ("q0", "p1_d0"):
        after = select_pit(state, pit_id)
        assert after.phase == Phase.AWAITING_SELECTION
        assert after.selected_pit is None

    state = select_pit(state, "p0_d0")
    after = select_pit(state, "p1_d1")
    assert after.selected_pit == "p0_d0"
    assert after.phase == Phase.AWAITING_DIRECTION

    empty = GameState.from_counts(Settings(), {"p0_d0": 0})
    assert select_pit(empty, "p0_d0").selected_pit is None


def test_unknown_pit_raises() -> None:
    state = new_game(Settings(), starting_player=0).state
    with pytest.raises(UnknownPitError):
        select_pit(state, "p7_d0")


def test_locked_input_ignored() -> None:
    state = new_game(Settings(), starting_player=0).state
    state.locked = True
    assert select_pit(state, "p0_d0") is state

    state = select_pit(new_game(Settings(), starting_player=0).state, "p0_d0")
    state.locked = True
    result = choose_direction(state, "right")
    assert result.state is state
    assert result.events == []


def test_direction_needs_selection() -> None:
    state = new_game(Settings(), starting_player=0).state
    result = choose_direction(state, Direction.FORWARD)
    assert result.state is state
    assert result.events == []


def test_invalid_direction_raises() -> None:
    state = select_pit(new_game(Settings(), starting_player=0).state, "p0_d0")
    with pytest.raises(InvalidDirectionError):
        choose_direction(state, "sideways")


def test_opening_move_continues_and_captures() -> None:
    # p0_d0 (5) forward: p0_d1..d4 and q1 +1, then p1_d0 (5) is picked up and
    # sown to p1_d1..d4 and q0; p0_d0 is now empty so p0_d1 (6) is captured
    state = new_game(Settings(), starting_player=0).state
    result = _sow(state, "p0_d0", "right")
    after = result.state

    drops = [e.pit_id for e in result.events if e.action == "drop"]
    assert drops[:5] == ["p0_d1", "p0_d2", "p0_d3", "p0_d4", "q1"]
    assert drops[5:] == ["p1_d1", "p1_d2", "p1_d3", "p1_d4", "q0"]
    assert [e.pit_id for e in result.events if e.action == "relay"] == ["p1_d0"]

    assert after.counts() == {
        "q0": 11, "p0_d0": 0, "p0_d1": 0, "p0_d2": 6, "p0_d3": 6, "p0_d4": 6,
        "q1": 11, "p1_d0": 0, "p1_d1": 6, "p1_d2": 6, "p1_d3": 6, "p1_d4": 6,
    }
    assert result.captured == 1
    assert after.players[0].dan == 6
    assert after.players[0].quan == 0
    assert after.current_player == 1
    assert after.phase == Phase.AWAITING_SELECTION
    assert not after.locked
    assert after.selected_pit is None
    assert after.direction is None
    assert after.last_landing is None


def test_first_sow_targets() -> None:
    # only the first sowing: drops go to the five pits after the start
    state = GameState.from_counts(Settings(), {"p1_d0": 0, "p1_d1": 0}, default=None)
    result = _sow(state, "p0_d0", "right")
    first = [e for e in result.events if e.action in ("pickup", "drop")][:6]
    assert first[0].action == "pickup"
    assert first[0].count == 5
    assert [e.pit_id for e in first[1:]] == ["p0_d1", "p0_d2", "p0_d3", "p0_d4", "q1"]
    assert [e.source_id for e in first[1:]] == ["p0_d0", "p0_d1", "p0_d2", "p0_d3", "p0_d4"]


def test_backward_sow_wraps() -> None:
    # p0_d0 (2) backward: q0 then p1_d4; p1_d3 and p1_d2 empty -> no capture
    counts = {"q0": 10, "q1": 10, "p0_d0": 2, "p0_d2": 1, "p1_d0": 1}
    state = GameState.from_counts(Settings(), counts, default=0)
    after = _sow(state, "p0_d0", "left").state
    assert after.counts()["q0"] == 11
    assert after.counts()["p1_d4"] == 1
    assert after.counts()["p0_d0"] == 0
    assert after.players[0].dan == 0
    assert after.message == "Player 2's turn. Select a Dân pit."


def test_no_capture_when_two_empty() -> None:
    counts = {"q0": 10, "q1": 10, "p0_d0": 1, "p1_d0": 3}
    state = GameState.from_counts(Settings(), counts, default=0)
    result = _sow(state, "p0_d0", "right")
    assert result.captured == 0
    assert result.state.counts()["p0_d1"] == 1
    assert result.state.current_player == 1


def test_empty_side_rule_from_score() -> None:
    # player 2's side is empty when their turn starts
    counts = {"q0": 10, "q1": 10, "p0_d0": 1}
    state = GameState.from_counts(Settings(), counts, default=0)
    state.players[1].dan = 7

    result = _sow(state, "p0_d0", "right")
    after = result.state
    assert after.current_player == 1
    assert [after.counts()[f"p1_d{i}"] for i in range(5)] == [1, 1, 1, 1, 1]
    assert after.players[1].dan == 2
    assert after.debts == []
    assert after.phase == Phase.AWAITING_SELECTION
    assert not after.locked
    assert len([e for e in result.events if e.action == "reseed"]) == 5


def test_empty_side_rule_borrows() -> None:
    counts = {"q0": 10, "q1": 10, "p0_d0": 1}
    state = GameState.from_counts(Settings(), counts, default=0)
    state.players[1].dan = 3

    result = _sow(state, "p0_d0", "right")
    after = result.state
    assert [after.counts()[f"p1_d{i}"] for i in range(5)] == [1, 1, 1, 1, 1]
    assert after.players[1].dan == 0
    assert len(after.debts) == 1
    debt = after.debts[0]
    assert (debt.borrower_id, debt.lender_id, debt.amount) == (1, 0, 2)
    assert [e.count for e in result.events if e.action == "borrow"] == [2]
    assert after.message == "Player 2's turn. Select a Dân pit."


def test_empty_side_lender_is_next_player() -> None:
    # player 3 of 3 borrows from player 1
    settings = Settings(player_count=3)
    counts = {"q0": 10, "q1": 10, "q2": 10, "p1_d0": 1}
    state = GameState.from_counts(settings, counts, default=0, current_player=1)

    after = _sow(state, "p1_d0", "right").state
    assert after.current_player == 2
    debt = after.debts[0]
    assert (debt.borrower_id, debt.lender_id, debt.amount) == (2, 0, 5)


def test_game_over_collects_remaining() -> None:
    # capturing the last quan ends the game; leftovers go to their owners
    counts = {"q0": 0, "q1": 3, "p0_d2": 1, "p1_d1": 2, "p1_d4": 4}
    state = GameState.from_counts(Settings(), counts, default=0)

    result = _sow(state, "p0_d2", "right")
    after = result.state
    assert is_game_over(after)
    assert after.phase == Phase.GAME_OVER
    assert not after.locked
    assert after.board_stones() == 0
    assert after.players[0].dan == 6  # 3 from q1, 2 from p1_d1, 1 left in p0_d3
    assert after.players[0].quan == 1
    assert after.players[1].dan == 4
    assert after.current_player == 0
    collected = {e.pit_id: e.count for e in result.events if e.action == "collect"}
    assert collected == {"p0_d3": 1, "p1_d4": 4}
    assert after.message == "Game Over! Player 1 wins!"


def test_actions_ignored_after_game_over() -> None:
    counts = {"q0": 0, "q1": 3, "p0_d2": 1, "p1_d1": 2, "p1_d4": 4}
    after = _sow(GameState.from_counts(Settings(), counts, default=0), "p0_d2", "right").state
    assert select_pit(after, "p0_d0") is after
    assert selectable_pits(after) == set()


def test_game_not_over_while_a_quan_has_stones() -> None:
    counts = {"q0": 1, "q1": 0, "p0_d0": 1, "p1_d2": 2}
    after = _sow(GameState.from_counts(Settings(), counts, default=0), "p0_d0", "right").state
    assert not is_game_over(after)


def test_sow_chain_guard(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    monkeypatch.setattr("oanquan.engine.MAX_SOW_CHAIN", 1)
    state = new_game(Settings(), starting_player=0).state
    with caplog.at_level(logging.WARNING, logger="oanquan.engine"):
        after = _sow(state, "p0_d0", "right").state
    # only the first sowing happened
    assert after.counts()["q1"] == 11
    assert after.counts()["p1_d0"] == 5
    assert after.current_player == 1
    assert not after.locked
    assert any("consecutive sowings" in r.getMessage() for r in caplog.records)


def test_resolver_failure_aborts_turn(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr("oanquan.engine.sowing_path", lambda *args: None)
    state = new_game(Settings(), starting_player=0).state
    before = state.counts()
    with caplog.at_level(logging.ERROR, logger="oanquan.engine"):
        after = _sow(state, "p0_d0", "right").state
    assert after.counts() == before
    assert after.current_player == 1
    assert after.phase == Phase.AWAITING_SELECTION
    assert not after.locked
    assert any("aborting turn" in r.getMessage() for r in caplog.records)


def test_conservation_in_random_play() -> None:
    rng = random.Random(7)
    for players in (2, 3, 4):
        state = new_game(Settings(player_count=players), rng=rng).state
        initial = state.initial_stones
        for _ in range(300):
            if is_game_over(state):
                break
            pit_id = rng.choice(sorted(selectable_pits(state)))
            state = _sow(state, pit_id, rng.choice(["left", "right"])).state
            total = state.board_stones() + state.stored_stones()
            assert total == initial + state.borrowed_stones()
            assert all(p.stones >= 0 for p in state.pits)


def test_long_sow_refills_start_pit() -> None:
    # 13 stones on a 12-pit board: one lap, then one more stone past the start
    state = GameState.from_counts(Settings(), {"p0_d0": 13})
    result = _sow(state, "p0_d0", "right")

    drops = [e.pit_id for e in result.events if e.action == "drop"][:13]
    assert drops[9:] == ["p1_d4", "q0", "p0_d0", "p0_d1"]
    assert len([e for e in result.events if e.action == "relay"]) == 5
    # the last relay lands in q0 with p0_d0 emptied behind it, so p0_d1 falls
    assert [e.pit_id for e in result.events if e.action == "capture"] == ["p0_d1"]
    assert result.captured == 1
    assert result.state.players[0].dan == 9
    assert result.state.counts() == {
        "q0": 14, "p0_d0": 0, "p0_d1": 0, "p0_d2": 2, "p0_d3": 0, "p0_d4": 1,
        "q1": 14, "p1_d0": 9, "p1_d1": 9, "p1_d2": 9, "p1_d3": 2, "p1_d4": 9,
    }
    assert result.state.board_stones() + result.state.stored_stones() == 78


def test_new_game_reseeds_empty_opening_side(monkeypatch: pytest.MonkeyPatch) -> None:
    empty_side = {f"p0_d{i}": 0 for i in range(5)}
    position = GameState.from_counts(Settings(), empty_side)
    position.players[0].dan = 2
    monkeypatch.setattr("oanquan.engine.setup_state", lambda *args: position)

    result = new_game(Settings(), starting_player=0)
    state = result.state
    assert [e.action for e in result.events] == ["borrow"] + ["reseed"] * 5
    assert [p.stones for p in state.dan_pits(0)] == [1, 1, 1, 1, 1]
    assert state.players[0].dan == 0
    assert state.debts[0].amount == 3
    assert state.phase == Phase.AWAITING_SELECTION
    assert not state.locked
