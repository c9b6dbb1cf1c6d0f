from oanquan.board import Direction, Layout, Pit, PitKind, generate_pits, next_pit_id
from oanquan.engine import (
    active_player,
    choose_direction,
    final_scores,
    is_game_over,
    new_game,
    select_pit,
    selectable_pits,
    winner,
)
from oanquan.errors import (
    BoardIntegrityError,
    InvalidDirectionError,
    InvalidInputError,
    InvalidSettingsError,
    OAnQuanError,
    UnknownPitError,
    UnsupportedLayoutError,
)
from oanquan.events import StepEvent
from oanquan.game import Game
from oanquan.rules import Settings
from oanquan.scoring import DebtRecord, FinalScore, Player
from oanquan.state import GameState, Phase, TurnResult

__all__ = [
    "Direction",
    "Layout",
    "Pit",
    "PitKind",
    "Settings",
    "GameState",
    "Phase",
    "TurnResult",
    "Player",
    "DebtRecord",
    "FinalScore",
    "StepEvent",
    "Game",
    "generate_pits",
    "next_pit_id",
    "new_game",
    "select_pit",
    "choose_direction",
    "selectable_pits",
    "active_player",
    "is_game_over",
    "final_scores",
    "winner",
    "OAnQuanError",
    "InvalidInputError",
    "UnknownPitError",
    "InvalidDirectionError",
    "UnsupportedLayoutError",
    "InvalidSettingsError",
    "BoardIntegrityError",
]
