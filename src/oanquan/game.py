import logging
import random
from collections.abc import Callable, Generator

from oanquan import engine
from oanquan.board import Direction
from oanquan.events import StepEvent, StepListener
from oanquan.rules import Settings
from oanquan.scoring import FinalScore, Player
from oanquan.state import GameState

logger = logging.getLogger(__name__)


class Game:
    """A single game session, the entry point for front ends.

    With `paced=False` every action runs to completion before returning. With
    `paced=True` a turn is left suspended after the player action and the
    caller pulls it forward with `advance()`, one step per call, so it can
    animate each step on its own clock. Input stays locked until the turn
    reaches its end either way.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        starting_player: int | None = None,
        seed: int | None = None,
        paced: bool = False,
    ):
        self.settings = settings or Settings()
        self.paced = paced
        self.last_captured = 0
        self._listeners: list[StepListener] = []
        self._steps: Generator[StepEvent, None, int | None] | None = None
        self._state = engine.setup_state(self.settings, starting_player, random.Random(seed))
        # the opening empty-side check always runs straight through
        self._steps = engine.start_game(self._state)
        self.finish()

    @property
    def state(self) -> GameState:
        """Current state. Treat as read-only; mutate only through the actions."""
        return self._state

    @property
    def is_animating(self) -> bool:
        """True while a suspended turn still has steps to play."""
        return self._steps is not None

    @property
    def message(self) -> str:
        return self._state.message

    def subscribe(self, listener: StepListener) -> Callable[[], None]:
        """Register a step listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # actions

    def select_pit(self, pit_id: str) -> None:
        self._state = engine.select_pit(self._state, pit_id)

    def choose_direction(self, direction: Direction | str) -> None:
        new = engine.begin_turn(self._state, direction)
        if new is self._state:
            # locked or finished games ignore input without a trace
            if not self._state.locked and not engine.is_game_over(self._state):
                self._state.message = "Cannot choose direction now."
            return
        self._state = new
        self._run(engine.play_turn(new))

    def advance(self) -> StepEvent | None:
        """Play the next step of a suspended turn. Returns None once the turn is over."""
        if self._steps is None:
            return None
        try:
            event = next(self._steps)
        except StopIteration as stop:
            self._steps = None
            self.last_captured = stop.value or 0
            return None
        self._notify(event)
        return event

    def finish(self) -> list[StepEvent]:
        """Play every remaining step of a suspended turn."""
        events = []
        while (event := self.advance()) is not None:
            events.append(event)
        return events

    def _run(self, steps: Generator[StepEvent, None, int | None]) -> None:
        self._steps = steps
        if not self.paced:
            self.finish()

    def _notify(self, event: StepEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # presentation failures never reach the engine
                logger.exception("step listener %r failed on %s", listener, event.action)

    # queries

    def selectable_pits(self) -> set[str]:
        return engine.selectable_pits(self._state)

    def active_player(self) -> Player | None:
        return engine.active_player(self._state)

    def is_game_over(self) -> bool:
        return engine.is_game_over(self._state)

    def final_scores(self) -> list[FinalScore]:
        return engine.final_scores(self._state)

    def winner(self) -> FinalScore | None:
        return engine.winner(self._state)
