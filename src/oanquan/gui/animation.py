from dataclasses import dataclass

from oanquan.events import StepEvent
from oanquan.game import Game

# steps worth lingering on
SLOW_ACTIONS = ("relay", "capture", "quan_non", "borrow")

MAX_DELAY = 1000
DELAY_STEP = 50


@dataclass
class MovingStone:
    """A stone (or a handful) travelling between two points on screen."""

    source: str | None  # pit id, or None for a score area
    target: str | None
    owner: int | None  # score area at the unknown end
    progress: float = 0.0


class StepPacer:
    """Plays a paced game's suspended turn one step at a time.

    The engine has already applied a step when it is handed out here; the
    pacer only decides how long the screen shows it before pulling the next.
    """

    def __init__(self, game: Game, delay_ms: int = 120):
        self.game = game
        self.delay_ms = delay_ms
        self.paused = False
        self.current: StepEvent | None = None
        self.moving: MovingStone | None = None
        self._wait = 0
        self._hold = 0

    def faster(self) -> None:
        self.delay_ms = max(0, self.delay_ms - DELAY_STEP)

    def slower(self) -> None:
        self.delay_ms = min(MAX_DELAY, self.delay_ms + DELAY_STEP)

    def delay_for(self, event: StepEvent) -> int:
        if event.action in SLOW_ACTIONS:
            return self.delay_ms * 3
        return self.delay_ms

    def update(self, dt: int) -> StepEvent | None:
        """Advance the clock by `dt` ms. Returns the step pulled this frame, if any."""
        if not self.game.is_animating:
            self.current = None
            self.moving = None
            return None
        if self.delay_ms == 0:
            self.skip()
            return None
        if self.paused:
            return None

        self._wait -= dt
        if self._wait > 0:
            if self.moving is not None and self._hold > 0:
                self.moving.progress = 1.0 - self._wait / self._hold
            return None

        event = self.game.advance()
        self.current = event
        self.moving = _stone_for(event)
        if event is None:
            self._wait = self._hold = 0
        else:
            self._wait = self._hold = self.delay_for(event)
        return event

    def skip(self) -> None:
        """Finish the suspended turn without waiting."""
        self.game.finish()
        self.current = None
        self.moving = None
        self._wait = 0


def _stone_for(event: StepEvent | None) -> MovingStone | None:
    if event is None:
        return None
    match event.action:
        case "drop":
            return MovingStone(event.source_id, event.pit_id, None)
        case "capture":
            return MovingStone(event.pit_id, None, event.player)
        case "collect":
            return MovingStone(event.pit_id, None, event.player)
        case "reseed":
            return MovingStone(None, event.pit_id, event.player)
        case _:
            return None
