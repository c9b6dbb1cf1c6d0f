from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

StepAction = Literal[
    "pickup",  # stones lifted from pit_id to start a sowing
    "drop",  # one stone moved from source_id into pit_id
    "relay",  # sowing continues from pit_id in the same turn
    "capture",  # pit_id captured into player's score area
    "quan_non",  # capture of pit_id suppressed by the Quan Non rule
    "reseed",  # one stone placed in pit_id by the empty-side rule
    "borrow",  # player borrowed count stones from the next player
    "collect",  # end-game collection of pit_id into its owner's score area
]


@dataclass(frozen=True, slots=True)
class StepEvent:
    """A single observable step of a turn, for the presentation layer."""

    action: StepAction
    pit_id: str | None = None
    source_id: str | None = None
    count: int = 0
    player: int | None = None


StepListener = Callable[[StepEvent], None]
