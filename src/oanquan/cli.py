import logging
from dataclasses import dataclass
from typing import Literal

import tyro

from oanquan.board import Direction, Layout, dan_pit_id, quan_pit_id
from oanquan.errors import InvalidInputError
from oanquan.events import StepEvent
from oanquan.game import Game
from oanquan.rules import DEFAULT_QUAN_NON_THRESHOLD, DEFAULT_QUAN_VALUE, Settings
from oanquan.scoring import net_debt
from oanquan.state import GameState


@dataclass
class Config:
    """Ô Ăn Quan game configuration."""

    # game rules
    players: Literal[2, 3, 4] = 2
    """Number of players: 2 (rectangle), 3 (triangle) or 4 (square board)."""

    quan_value: int = DEFAULT_QUAN_VALUE
    """Stones in each Quan pit at the start, also the end-game value of a captured Quan."""

    quan_non: bool = False
    """Quan Non rule: a Quan pit below the threshold cannot be captured."""

    quan_non_threshold: int = DEFAULT_QUAN_NON_THRESHOLD
    """Minimum stones a Quan pit needs before it can be captured when Quan Non is on."""

    # setup
    starting_player: int | None = None
    """Which player starts (0-based). Random when omitted."""

    seed: int | None = None
    """Random seed for picking the starting player."""

    # display
    gui: bool = True
    """Use pygame GUI instead of terminal."""

    animation_delay: int = 120
    """Delay in milliseconds between animated steps in the GUI (0 = instant)."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    """Logging verbosity."""


def _cell(n: int) -> str:
    return f"{n:3}"


def render_board(state: GameState) -> str:
    """Text picture of the board with both score columns."""
    counts = state.counts()
    layout = state.settings.board_layout
    lines = [""]

    if layout is Layout.RECTANGLE:
        # forward runs along the bottom row left to right, then back along the top
        top = " ".join(_cell(counts[dan_pit_id(1, i)]) for i in reversed(range(5)))
        bottom = " ".join(_cell(counts[dan_pit_id(0, i)]) for i in range(5))
        lines.append(f"       P2: {top}")
        lines.append(f"  [{counts[quan_pit_id(0)]:3}]" + " " * 21 + f"[{counts[quan_pit_id(1)]:3}]")
        lines.append(f"       P1: {bottom}")
        lines.append("           " + " ".join(f" d{i}" for i in range(5)))
    else:
        for p in range(state.settings.player_count):
            side = " ".join(_cell(counts[dan_pit_id(p, i)]) for i in range(5))
            lines.append(f"  [{counts[quan_pit_id(p)]:3}] q{p}")
            lines.append(f"       P{p + 1}: {side}")
        lines.append("           " + " ".join(f" d{i}" for i in range(5)))

    lines.append("")
    for player in state.players:
        marker = ">" if player.id == state.current_player else " "
        debt = net_debt(state.debts, player.id)
        debt_text = f", debt {debt:+d}" if debt else ""
        lines.append(f" {marker} {player.name}: dân {player.dan}, quan {player.quan}{debt_text}")
    lines.append("")
    return "\n".join(lines)


def print_board(state: GameState) -> None:
    print(render_board(state))


def describe_event(event: StepEvent) -> str | None:
    """One-line commentary for the noteworthy steps; None for plain drops."""
    who = f"Player {event.player + 1}" if event.player is not None else "Someone"
    match event.action:
        case "relay":
            return f"  ...continues sowing from {event.pit_id} ({event.count} stones)"
        case "capture":
            return f"  {who} captures {event.count} from {event.pit_id}!"
        case "quan_non":
            return f"  Quan Non: {event.pit_id} has only {event.count}, no capture"
        case "borrow":
            return f"  {who} borrows {event.count} dân to re-seed"
        case "collect":
            return f"  {who} collects {event.count} from {event.pit_id}"
        case _:
            return None


def parse_pit_choice(game: Game, choice: str) -> str | None:
    """Turn '1'-'5' (own pits, 1-indexed) or a pit id into a pit id."""
    choice = choice.strip()
    if choice.isdigit():
        index = int(choice) - 1
        if 0 <= index < 5:
            return dan_pit_id(game.state.current_player, index)
        return None
    return choice or None


def get_human_pit(game: Game) -> str:
    """Ask the active player for a pit until a selectable one is given."""
    player = game.state.active
    options = sorted(game.selectable_pits())
    while True:
        try:
            choice = input(f"{player.name}, choose pit 1-5 or id {options}: ")
        except EOFError:
            raise SystemExit from None
        pit_id = parse_pit_choice(game, choice)
        if pit_id in options:
            return pit_id
        print(f"Invalid choice. Pick from {options}")


def get_human_direction() -> Direction | None:
    """Ask for a direction. Returns None to pick another pit."""
    while True:
        try:
            choice = input("Direction [l]eft / [r]ight (blank to reselect): ")
        except EOFError:
            raise SystemExit from None
        if not choice.strip():
            return None
        try:
            return Direction.parse(choice)
        except InvalidInputError:
            print("Enter l or r.")


def run_terminal_game(config: Config, settings: Settings) -> None:
    """Run the game in terminal mode."""
    game = Game(settings, starting_player=config.starting_player, seed=config.seed)

    def narrate(event: StepEvent) -> None:
        line = describe_event(event)
        if line:
            print(line)

    game.subscribe(narrate)

    print("Ô Ăn Quan - Terminal Mode")
    print("=" * 40)
    quan_non = f"on (<{settings.quan_non_threshold})" if settings.quan_non_enabled else "off"
    print(f"Players: {settings.player_count}, quan value: {settings.quan_value}")
    print(f"Quan Non: {quan_non}")

    while not game.is_game_over():
        print_board(game.state)
        print(game.message)

        pit_id = get_human_pit(game)
        game.select_pit(pit_id)
        direction = get_human_direction()
        if direction is None:
            game.select_pit(pit_id)  # deselect
            continue
        game.choose_direction(direction)
        print(game.message)

    # game over
    print_board(game.state)
    print("=" * 40)
    print("GAME OVER")
    for score in game.final_scores():
        print(
            f"{score.name}: {score.dan} dân + {score.quan} quan x {settings.quan_value}"
            f" {score.net_debt:+d} debt = {score.total}"
        )
    best = game.winner()
    print(f"{best.name} wins!" if best else "No winner.")


def main(config: Config | None = None) -> None:
    """Main entry point."""
    if config is None:
        config = tyro.cli(Config)

    logging.basicConfig(
        level=config.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    settings = Settings(
        player_count=config.players,
        quan_value=config.quan_value,
        quan_non_enabled=config.quan_non,
        quan_non_threshold=config.quan_non_threshold,
    )

    if config.gui:
        from oanquan.gui.app import run_gui

        run_gui(
            settings,
            starting_player=config.starting_player,
            seed=config.seed,
            animation_delay=config.animation_delay,
        )
    else:
        run_terminal_game(config, settings)


if __name__ == "__main__":
    main()
