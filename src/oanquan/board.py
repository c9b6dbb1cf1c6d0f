import logging
from dataclasses import dataclass
from enum import Enum

from oanquan.errors import InvalidDirectionError, InvalidSettingsError, UnsupportedLayoutError

logger = logging.getLogger(__name__)

DAN_PITS_PER_PLAYER = 5
DAN_INITIAL_STONES = 5


class PitKind(Enum):
    QUAN = "quan"
    DAN = "dan"


class Layout(Enum):
    RECTANGLE = "rectangle"
    TRIANGLE = "triangle"
    SQUARE = "square"

    @classmethod
    def for_players(cls, player_count: int) -> "Layout":
        """Default layout for a player count."""
        match player_count:
            case 2:
                return cls.RECTANGLE
            case 3:
                return cls.TRIANGLE
            case 4:
                return cls.SQUARE
            case _:
                raise UnsupportedLayoutError(
                    f"No layout for {player_count} players", context={"players": player_count}
                )


# the only supported (layout, player count) pairs
LAYOUT_PLAYERS = {
    Layout.RECTANGLE: 2,
    Layout.TRIANGLE: 3,
    Layout.SQUARE: 4,
}


class Direction(Enum):
    """Travel direction along the pit sequence.

    FORWARD follows the generated order (counter-clockwise on screen),
    BACKWARD goes against it.
    """

    FORWARD = "forward"
    BACKWARD = "backward"

    @property
    def step(self) -> int:
        return 1 if self is Direction.FORWARD else -1

    @classmethod
    def parse(cls, token: "str | Direction") -> "Direction":
        """Accept a Direction, 'forward'/'backward' or the UI tokens 'right'/'left'."""
        if isinstance(token, Direction):
            return token
        if isinstance(token, str):
            match token.strip().lower():
                case "forward" | "right" | "r" | "f":
                    return cls.FORWARD
                case "backward" | "left" | "l" | "b":
                    return cls.BACKWARD
        raise InvalidDirectionError(token)


@dataclass(slots=True)
class Pit:
    id: str
    kind: PitKind
    owner: int | None
    stones: int

    @property
    def is_quan(self) -> bool:
        return self.kind is PitKind.QUAN

    def set_stones(self, count: int) -> None:
        """Single mutation point for stone counts; clamps to zero."""
        self.stones = max(0, int(count))


def quan_pit_id(player: int) -> str:
    return f"q{player}"


def dan_pit_id(player: int, index: int) -> str:
    return f"p{player}_d{index}"


def expected_pit_count(layout: Layout, dan_pits_per_player: int = DAN_PITS_PER_PLAYER) -> int:
    return LAYOUT_PLAYERS[layout] * (1 + dan_pits_per_player)


def generate_pits(
    player_count: int,
    quan_value: int,
    dan_pits_per_player: int = DAN_PITS_PER_PLAYER,
    layout: Layout | None = None,
) -> list[Pit]:
    """Build the circular pit sequence for a board.

    Each player contributes a Quan pit followed by their Dân pits; the
    concatenation in player order is the forward direction for the whole game.
    """
    if layout is None:
        layout = Layout.for_players(player_count)
    if LAYOUT_PLAYERS.get(layout) != player_count:
        raise UnsupportedLayoutError(
            f"Layout {layout.value} does not support {player_count} players",
            context={"layout": layout.value, "players": player_count},
        )
    if dan_pits_per_player != DAN_PITS_PER_PLAYER:
        raise UnsupportedLayoutError(
            f"Boards need exactly {DAN_PITS_PER_PLAYER} Dân pits per player",
            context={"dan_pits_per_player": dan_pits_per_player},
        )
    if quan_value < 0:
        raise InvalidSettingsError("Quan value must be non-negative", context={"quan": quan_value})

    pits: list[Pit] = []
    for p in range(player_count):
        pits.append(Pit(quan_pit_id(p), PitKind.QUAN, None, quan_value))
        for i in range(dan_pits_per_player):
            pits.append(Pit(dan_pit_id(p, i), PitKind.DAN, p, DAN_INITIAL_STONES))

    logger.debug("generated %s board: %s", layout.value, ", ".join(p.id for p in pits))
    return pits


def find_pit(pits: list[Pit], pit_id: str | None) -> Pit | None:
    if pit_id is None:
        return None
    for pit in pits:
        if pit.id == pit_id:
            return pit
    return None


def next_pit_id(pit_id: str | None, direction: Direction, pits: list[Pit]) -> str | None:
    """Id of the neighbour of `pit_id` in `direction`, or None if it is not on the board.

    All wraparound logic lives here.
    """
    if not pits:
        return None
    for i, pit in enumerate(pits):
        if pit.id == pit_id:
            return pits[(i + direction.step) % len(pits)].id
    logger.error("pit %r not found while resolving neighbour", pit_id)
    return None


def sowing_path(
    start_id: str, stones: int, direction: Direction, pits: list[Pit]
) -> list[str] | None:
    """Target pit ids for `stones` stones sown from `start_id`, None if resolution fails."""
    path: list[str] = []
    current: str | None = start_id
    for _ in range(stones):
        current = next_pit_id(current, direction, pits)
        if current is None:
            return None
        path.append(current)
    return path
