import logging
from collections.abc import Generator

from oanquan.board import Direction, Pit, next_pit_id
from oanquan.events import StepEvent
from oanquan.rules import Settings
from oanquan.state import GameState

logger = logging.getLogger(__name__)


def capture_blocked(pit: Pit, settings: Settings) -> bool:
    """Quan Non: a Quan pit below the threshold cannot be captured."""
    return (
        settings.quan_non_enabled
        and pit.is_quan
        and pit.stones < settings.quan_non_threshold
    )


def capture_target(state: GameState, pit_id: str, direction: Direction) -> Pit | None:
    """The pit captured after `pit_id`: the next pit must be empty and the one after it not.

    Returns None when there is nothing to capture.
    """
    gap_id = next_pit_id(pit_id, direction, state.pits)
    gap = state.pit(gap_id)
    if gap is None or gap.stones != 0:
        return None
    target = state.pit(next_pit_id(gap_id, direction, state.pits))
    if target is None or target.stones == 0:
        return None
    return target


def run_cascade(
    state: GameState, start_pit_id: str, direction: Direction
) -> Generator[StepEvent, None, int]:
    """Capture `start_pit_id` and keep capturing while the empty-then-full pattern repeats.

    Captured stones go to the current player. Returns the number of pits captured.
    """
    player = state.active
    captured = 0
    pit = state.pit(start_pit_id)

    # each pass consumes two pits, so this ends within one lap of the board
    while pit is not None and pit.stones > 0:
        if capture_blocked(pit, state.settings):
            state.message = f'Capture sequence stopped due to Quan Non at "{pit.id}".'
            logger.info("cascade stopped by quan non at %s (%d stones)", pit.id, pit.stones)
            yield StepEvent("quan_non", pit.id, count=pit.stones, player=player.id)
            break

        count = pit.stones
        player.dan += count
        if pit.is_quan:
            player.quan += 1
            state.message = f'Captured Quan from "{pit.id}"!'
        else:
            state.message = f'Captured {count} stones from "{pit.id}"!'
        pit.set_stones(0)
        captured += 1
        logger.info("%s captured %d stones from %s", player.name, count, pit.id)
        yield StepEvent("capture", pit.id, count=count, player=player.id)

        pit = capture_target(state, pit.id, direction)

    if captured:
        plural = "s" if captured > 1 else ""
        state.message = f"{player.name} captured {captured} pit{plural}! Turn ends."
    else:
        state.message = "No captures this turn. Turn ends."
        logger.warning("capture cascade from %s ended with no captures", start_pit_id)
    return captured
