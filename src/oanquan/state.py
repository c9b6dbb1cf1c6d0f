import copy
from dataclasses import dataclass, field
from enum import Enum

from oanquan.board import Direction, Pit, PitKind, find_pit, generate_pits
from oanquan.errors import BoardIntegrityError, UnknownPitError
from oanquan.events import StepEvent
from oanquan.rules import Settings
from oanquan.scoring import DebtRecord, Player, make_players


class Phase(Enum):
    SETUP = "setup"
    AWAITING_SELECTION = "awaiting_selection"
    AWAITING_DIRECTION = "awaiting_direction"
    ANIMATING_SOW = "animating_sow"
    EVALUATING_LANDING = "evaluating_landing"
    PROCESSING_CAPTURE = "processing_capture"
    TURN_END = "turn_end"
    APPLYING_EMPTY_SIDE_RULE = "applying_empty_side_rule"
    GAME_OVER = "game_over"


@dataclass
class GameState:
    """Everything the rules engine knows about a game in progress."""

    settings: Settings
    pits: list[Pit]
    players: list[Player]
    debts: list[DebtRecord] = field(default_factory=list)
    current_player: int = 0
    selected_pit: str | None = None
    direction: Direction | None = None
    last_landing: str | None = None
    locked: bool = False  # input lock; player actions are ignored while held
    phase: Phase = Phase.SETUP
    message: str = "Welcome to Ô Ăn Quan!"
    initial_stones: int = 0

    @classmethod
    def from_counts(
        cls,
        settings: Settings,
        counts: dict[str, int] | None = None,
        current_player: int = 0,
        default: int | None = None,
    ) -> "GameState":
        """Build a ready-to-play position with explicit stone counts.

        Pits not named in `counts` keep their opening count, or `default`
        when given.
        """
        pits = generate_pits(settings.player_count, settings.quan_value, layout=settings.layout)
        counts = counts or {}
        unknown = set(counts) - {p.id for p in pits}
        if unknown:
            raise UnknownPitError(sorted(unknown)[0])
        for pit in pits:
            if pit.id in counts:
                pit.set_stones(counts[pit.id])
            elif default is not None:
                pit.set_stones(default)
        state = cls(
            settings=settings,
            pits=pits,
            players=make_players(settings.player_count),
            current_player=current_player,
            phase=Phase.AWAITING_SELECTION,
        )
        state.initial_stones = state.board_stones()
        return state

    def clone(self) -> "GameState":
        return copy.deepcopy(self)

    @property
    def active(self) -> Player:
        return self.players[self.current_player]

    def pit(self, pit_id: str | None) -> Pit | None:
        return find_pit(self.pits, pit_id)

    def require_pit(self, pit_id: str | None) -> Pit:
        pit = find_pit(self.pits, pit_id)
        if pit is None:
            raise BoardIntegrityError(f"Pit {pit_id!r} vanished", context={"pit_id": pit_id})
        return pit

    def dan_pits(self, player: int) -> list[Pit]:
        return [p for p in self.pits if p.kind is PitKind.DAN and p.owner == player]

    def quan_pits(self) -> list[Pit]:
        return [p for p in self.pits if p.kind is PitKind.QUAN]

    def board_stones(self) -> int:
        return sum(p.stones for p in self.pits)

    def stored_stones(self) -> int:
        return sum(p.dan for p in self.players)

    def borrowed_stones(self) -> int:
        return sum(d.amount for d in self.debts)

    def counts(self) -> dict[str, int]:
        return {p.id: p.stones for p in self.pits}

    def reset_turn(self) -> None:
        self.selected_pit = None
        self.direction = None
        self.last_landing = None


@dataclass
class TurnResult:
    """Outcome of a player action: the new state and the steps taken to reach it."""

    state: GameState
    events: list[StepEvent] = field(default_factory=list)
    captured: int = 0
