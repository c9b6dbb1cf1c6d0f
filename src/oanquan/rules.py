from dataclasses import dataclass

from oanquan.board import DAN_PITS_PER_PLAYER, LAYOUT_PLAYERS, Layout
from oanquan.errors import InvalidSettingsError

DEFAULT_QUAN_VALUE = 10
DEFAULT_QUAN_NON_THRESHOLD = 5

# stones needed to re-seed an empty side: one per Dân pit
RESEED_STONES = DAN_PITS_PER_PLAYER

# consecutive sowings allowed in one turn before it is force-ended
MAX_SOW_CHAIN = 1000


@dataclass(frozen=True)
class Settings:
    """Game settings, fixed for the whole game."""

    player_count: int = 2
    quan_value: int = DEFAULT_QUAN_VALUE
    quan_non_enabled: bool = False
    quan_non_threshold: int = DEFAULT_QUAN_NON_THRESHOLD
    layout: Layout | None = None

    def __post_init__(self) -> None:
        if self.player_count not in (2, 3, 4):
            raise InvalidSettingsError(
                f"Player count must be 2, 3 or 4, got {self.player_count}",
                context={"players": self.player_count},
            )
        if self.quan_value < 0:
            raise InvalidSettingsError(
                "Quan value must be non-negative", context={"quan_value": self.quan_value}
            )
        if self.quan_non_threshold < 0:
            raise InvalidSettingsError(
                "Quan Non threshold must be non-negative",
                context={"threshold": self.quan_non_threshold},
            )
        if self.layout is not None and LAYOUT_PLAYERS[self.layout] != self.player_count:
            raise InvalidSettingsError(
                f"Layout {self.layout.value} does not support {self.player_count} players",
                context={"layout": self.layout.value, "players": self.player_count},
            )

    @property
    def board_layout(self) -> Layout:
        return self.layout or Layout.for_players(self.player_count)
