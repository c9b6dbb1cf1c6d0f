"""Turn state machine.

A turn runs as a generator of `StepEvent`s. Every yield is a suspension point
where a presentation layer may animate the step that was just applied; the
state is only mutated between yields. `choose_direction` and `new_game` drain
the generators and hand back the resulting state, while `oanquan.game.Game`
can also pull them one step at a time.
"""

import logging
import random
from collections.abc import Generator
from typing import TypeVar

from oanquan.board import Direction, PitKind, generate_pits, next_pit_id, sowing_path
from oanquan.capture import capture_blocked, capture_target, run_cascade
from oanquan.errors import BoardIntegrityError, UnknownPitError
from oanquan.events import StepEvent
from oanquan.rules import MAX_SOW_CHAIN, RESEED_STONES, Settings
from oanquan.scoring import (
    FinalScore,
    Player,
    collect_remaining,
    make_players,
    pick_winner,
    score_players,
    settle_reseed,
)
from oanquan.state import GameState, Phase, TurnResult

logger = logging.getLogger(__name__)

R = TypeVar("R")


def drain(steps: Generator[StepEvent, None, R]) -> tuple[list[StepEvent], R]:
    """Run a step generator to the end, returning its events and return value."""
    events: list[StepEvent] = []
    while True:
        try:
            events.append(next(steps))
        except StopIteration as stop:
            return events, stop.value


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


def setup_state(
    settings: Settings | None = None,
    starting_player: int | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Board, players and starting player, before the first empty-side check."""
    settings = settings or Settings()
    pits = generate_pits(settings.player_count, settings.quan_value, layout=settings.layout)
    if starting_player is None:
        starting_player = (rng or random).randrange(settings.player_count)
    elif not 0 <= starting_player < settings.player_count:
        raise ValueError(f"starting_player must be in [0, {settings.player_count})")

    state = GameState(
        settings=settings,
        pits=pits,
        players=make_players(settings.player_count),
        current_player=starting_player,
        locked=True,
    )
    state.initial_stones = state.board_stones()
    logger.info(
        "new %d-player game on %s board, %s starts",
        settings.player_count,
        settings.board_layout.value,
        state.active.name,
    )
    return state


def start_game(state: GameState) -> Generator[StepEvent, None, None]:
    """Open the first turn (runs the empty-side check for the starting player)."""
    yield from _start_turn(state)


def new_game(
    settings: Settings | None = None,
    starting_player: int | None = None,
    rng: random.Random | None = None,
) -> TurnResult:
    """Set up a game and open the first turn, re-seeding the starter's side if it is empty."""
    state = setup_state(settings, starting_player, rng)
    events, _ = drain(start_game(state))
    return TurnResult(state, events)


# ---------------------------------------------------------------------
# Player actions
# ---------------------------------------------------------------------


def _selectable(state: GameState, pit_id: str) -> bool:
    pit = state.pit(pit_id)
    return (
        pit is not None
        and pit.kind is PitKind.DAN
        and pit.owner == state.current_player
        and pit.stones > 0
    )


def _turn_prompt(state: GameState) -> str:
    return f"{state.active.name}'s turn. Select a Dân pit."


def select_pit(state: GameState, pit_id: str) -> GameState:
    """Select, switch or deselect the pit to sow from. Returns the new state."""
    if state.pit(pit_id) is None:
        raise UnknownPitError(pit_id)
    if state.locked:
        return state

    new = state.clone()
    eligible = _selectable(new, pit_id)

    if new.phase is Phase.AWAITING_SELECTION:
        if eligible:
            new.selected_pit = pit_id
            new.phase = Phase.AWAITING_DIRECTION
            new.message = f'Choose a direction for pit "{pit_id}".'
        else:
            new.message = f"{new.active.name}: Select one of your non-empty Dân pits."
    elif new.phase is Phase.AWAITING_DIRECTION:
        if new.selected_pit == pit_id:
            new.reset_turn()
            new.phase = Phase.AWAITING_SELECTION
            new.message = _turn_prompt(new)
        elif eligible:
            new.selected_pit = pit_id
            new.direction = None
            new.message = f'Choose a direction for pit "{pit_id}".'
        else:
            new.message = 'Click "Left" or "Right", or select a different valid pit.'
    else:
        return state
    return new


def can_choose_direction(state: GameState) -> bool:
    return (
        state.phase is Phase.AWAITING_DIRECTION
        and state.selected_pit is not None
        and not state.locked
    )


def begin_turn(state: GameState, direction: Direction | str) -> GameState:
    """Lock input and enter sowing with the chosen direction.

    Returns the state unchanged when a direction cannot be chosen now.
    """
    direction = Direction.parse(direction)
    if not can_choose_direction(state):
        logger.debug("direction %s ignored in phase %s", direction.value, state.phase.value)
        return state
    new = state.clone()
    new.direction = direction
    new.locked = True
    new.phase = Phase.ANIMATING_SOW
    new.message = "Sowing stones..."
    return new


def choose_direction(state: GameState, direction: Direction | str) -> TurnResult:
    """Sow the selected pit in `direction` and play the turn out."""
    new = begin_turn(state, direction)
    if new is state:
        return TurnResult(state)
    events, captured = drain(play_turn(new))
    return TurnResult(new, events, captured)


# ---------------------------------------------------------------------
# Turn internals
# ---------------------------------------------------------------------


def _sow(
    state: GameState, start_id: str, direction: Direction
) -> Generator[StepEvent, None, str | None]:
    """Pick up `start_id` and drop its stones one per pit. Returns the landing pit id."""
    pit = state.pit(start_id)
    if pit is None or pit.stones == 0:
        logger.error("cannot sow from %r: pit missing or empty", start_id)
        return None

    stones = pit.stones
    # resolve the whole path before touching the board
    path = sowing_path(start_id, stones, direction, state.pits)
    if path is None:
        raise BoardIntegrityError(
            "Neighbour resolution failed while sowing",
            context={"start": start_id, "direction": direction.value},
        )

    player = state.current_player
    pit.set_stones(0)
    yield StepEvent("pickup", start_id, count=stones, player=player)

    source = start_id
    for target_id in path:
        target = state.require_pit(target_id)
        target.set_stones(target.stones + 1)
        yield StepEvent("drop", target_id, source_id=source, count=1, player=player)
        source = target_id

    logger.debug("sowed %d from %s %s: %s", stones, start_id, direction.value, path)
    return path[-1]


def play_turn(state: GameState) -> Generator[StepEvent, None, int]:
    """Sow from the selected pit, evaluate the landing, capture and end the turn.

    Mutates `state` in place. Returns the number of pits captured.
    """
    direction = state.direction
    start_id = state.selected_pit
    player = state.current_player
    captured = 0

    try:
        if direction is None or start_id is None:
            raise BoardIntegrityError("Turn started without a pit and direction")

        for _ in range(MAX_SOW_CHAIN):
            state.phase = Phase.ANIMATING_SOW
            landing_id = yield from _sow(state, start_id, direction)
            if landing_id is None:
                break

            state.last_landing = landing_id
            state.phase = Phase.EVALUATING_LANDING
            state.message = "Evaluating board..."

            following = state.pit(next_pit_id(landing_id, direction, state.pits))
            if following is None:
                break
            if following.stones > 0:
                state.message = "Continuing sow..."
                yield StepEvent("relay", following.id, count=following.stones, player=player)
                start_id = following.id
                continue

            target = capture_target(state, landing_id, direction)
            if target is None:
                state.message = "No capture possible. Turn ends."
            elif capture_blocked(target, state.settings):
                state.message = "Quan Non rule prevents capture. Turn ends."
                yield StepEvent("quan_non", target.id, count=target.stones, player=player)
            else:
                state.phase = Phase.PROCESSING_CAPTURE
                state.message = "Capture triggered!"
                captured = yield from run_cascade(state, target.id, direction)
            break
        else:
            logger.warning("turn exceeded %d consecutive sowings; ending it", MAX_SOW_CHAIN)
    except BoardIntegrityError as exc:
        logger.error("aborting turn: %s", exc)
        state.message = "Error in game logic. Ending turn."

    yield from _end_turn(state)
    return captured


def _end_turn(state: GameState) -> Generator[StepEvent, None, None]:
    state.phase = Phase.TURN_END
    state.reset_turn()

    if all(p.stones == 0 for p in state.quan_pits()):
        state.phase = Phase.GAME_OVER
        state.message = "Game Over! Collecting remaining stones..."
        yield from collect_remaining(state.pits, state.players)
        state.locked = False
        best = winner(state)
        state.message = f"Game Over! {best.name if best else 'No one'} wins!"
        logger.info("game over: %s", state.message)
        return

    state.current_player = (state.current_player + 1) % state.settings.player_count
    yield from _start_turn(state)


def _start_turn(state: GameState) -> Generator[StepEvent, None, None]:
    state.reset_turn()
    yield from _apply_empty_side_rule(state)
    state.phase = Phase.AWAITING_SELECTION
    state.locked = False
    state.message = _turn_prompt(state)


def _apply_empty_side_rule(state: GameState) -> Generator[StepEvent, None, bool]:
    """Re-seed the current player's side when all their Dân pits are empty.

    Returns True when the rule fired.
    """
    pits = state.dan_pits(state.current_player)
    if any(p.stones > 0 for p in pits):
        return False

    player: Player = state.active
    state.phase = Phase.APPLYING_EMPTY_SIDE_RULE
    state.locked = True
    state.message = f"{player.name}'s pits are empty. Re-seeding..."

    debt = settle_reseed(player, state.settings.player_count, RESEED_STONES)
    if debt is not None:
        state.debts.append(debt)
        logger.info(
            "%s borrowed %d from player %d to re-seed", player.name, debt.amount, debt.lender_id
        )
        yield StepEvent("borrow", count=debt.amount, player=player.id)

    for pit in pits:
        pit.set_stones(pit.stones + 1)
        yield StepEvent("reseed", pit.id, count=1, player=player.id)

    if debt is None:
        state.message = f"{player.name} re-seeded pits."
    else:
        state.message = f"{player.name} re-seeded pits and borrowed {debt.amount} dân."
    return True


# ---------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------


def selectable_pits(state: GameState) -> set[str]:
    """Pits the active player may pick right now."""
    if state.phase is not Phase.AWAITING_SELECTION or state.locked:
        return set()
    return {p.id for p in state.pits if _selectable(state, p.id)}


def active_player(state: GameState) -> Player | None:
    if 0 <= state.current_player < len(state.players):
        return state.players[state.current_player]
    return None


def is_game_over(state: GameState) -> bool:
    return state.phase is Phase.GAME_OVER


def final_scores(state: GameState) -> list[FinalScore]:
    """Scores after debt settlement; empty until the game is over."""
    if not is_game_over(state):
        return []
    return score_players(state.players, state.debts, state.settings.quan_value)


def winner(state: GameState) -> FinalScore | None:
    return pick_winner(final_scores(state))
