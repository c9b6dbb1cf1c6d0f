import pygame

from oanquan.board import Direction
from oanquan.game import Game
from oanquan.gui.animation import StepPacer
from oanquan.gui.geometry import (
    Point,
    hit_test,
    pit_positions,
    pit_radii,
    score_area_positions,
)
from oanquan.rules import Settings
from oanquan.state import Phase

# colors
BG_COLOR = (245, 222, 179)  # wheat
BOARD_COLOR = (139, 90, 43)  # saddle brown
PIT_COLOR = (101, 67, 33)  # dark brown
QUAN_COLOR = (85, 55, 27)  # darker brown
LEGAL_COLOR = (140, 100, 60)
HIGHLIGHT_COLOR = (255, 215, 0)  # gold
ACTIVE_COLOR = (50, 205, 50)  # lime green - where the last step happened
STONE_COLOR = (102, 102, 102)
TEXT_COLOR = (255, 255, 255)
DARK_TEXT = (60, 40, 20)
BUTTON_COLOR = (70, 130, 180)  # steel blue
PLAYER_COLORS = [
    (70, 130, 180),  # steel blue
    (178, 34, 34),  # firebrick
    (46, 139, 87),  # sea green
    (148, 0, 211),  # dark violet
]

# layout constants
WINDOW_WIDTH = 1000
WINDOW_HEIGHT = 760
BOARD_TOP = 60
BOARD_HEIGHT = 600
PIT_RADIUS = 32
QUAN_RADIUS = 44
STONE_RADIUS = 9
BUTTON_WIDTH = 140
BUTTON_HEIGHT = 44


def _board_point(point: Point) -> tuple[int, int]:
    return int(point[0]), int(point[1] + BOARD_TOP)


def direction_buttons() -> dict[Direction, pygame.Rect]:
    y = WINDOW_HEIGHT - BUTTON_HEIGHT - 20
    gap = 30
    left = pygame.Rect(
        WINDOW_WIDTH // 2 - BUTTON_WIDTH - gap // 2, y, BUTTON_WIDTH, BUTTON_HEIGHT
    )
    right = pygame.Rect(WINDOW_WIDTH // 2 + gap // 2, y, BUTTON_WIDTH, BUTTON_HEIGHT)
    return {Direction.BACKWARD: left, Direction.FORWARD: right}


def draw_board(
    screen: pygame.Surface,
    font: pygame.font.Font,
    game: Game,
    pacer: StepPacer,
    positions: dict[str, Point],
    score_areas: dict[int, Point],
    radii: dict[str, float],
) -> None:
    """Draw pits, score areas, the moving stone and the status line."""
    state = game.state
    screen.fill(BG_COLOR)

    board_rect = pygame.Rect(20, BOARD_TOP, WINDOW_WIDTH - 40, BOARD_HEIGHT)
    pygame.draw.rect(screen, BOARD_COLOR, board_rect, border_radius=20)

    legal = game.selectable_pits()
    active_pit = pacer.current.pit_id if pacer.current is not None else None

    for pit in state.pits:
        center = _board_point(positions[pit.id])
        radius = int(radii[pit.id])
        if pit.id == active_pit:
            color = ACTIVE_COLOR
        elif pit.id == state.selected_pit:
            color = HIGHLIGHT_COLOR
        elif pit.id in legal:
            color = LEGAL_COLOR
        else:
            color = QUAN_COLOR if pit.is_quan else PIT_COLOR
        pygame.draw.circle(screen, color, center, radius)
        if pit.owner is not None:
            pygame.draw.circle(screen, PLAYER_COLORS[pit.owner], center, radius, width=3)

        text = font.render(str(pit.stones), True, TEXT_COLOR)
        screen.blit(text, (center[0] - text.get_width() // 2, center[1] - text.get_height() // 2))

    for player in state.players:
        x, y = _board_point(score_areas[player.id])
        label = f"{player.name}: {player.dan} dân, {player.quan} quan"
        color = PLAYER_COLORS[player.id]
        if player.id == state.current_player and not game.is_game_over():
            color = HIGHLIGHT_COLOR
        text = font.render(label, True, color)
        screen.blit(text, (x - text.get_width() // 2, y - text.get_height() // 2))

    moving = pacer.moving
    if moving is not None:
        start = _stone_end(moving.source, moving.owner, positions, score_areas)
        end = _stone_end(moving.target, moving.owner, positions, score_areas)
        if start is not None and end is not None:
            t = moving.progress
            point = (start[0] + (end[0] - start[0]) * t, start[1] + (end[1] - start[1]) * t)
            pygame.draw.circle(screen, STONE_COLOR, _board_point(point), STONE_RADIUS)

    message = font.render(state.message, True, DARK_TEXT)
    screen.blit(message, (WINDOW_WIDTH // 2 - message.get_width() // 2, 15))

    if state.phase is Phase.AWAITING_DIRECTION and not state.locked:
        labels = {Direction.BACKWARD: "< Left", Direction.FORWARD: "Right >"}
        for direction, rect in direction_buttons().items():
            pygame.draw.rect(screen, BUTTON_COLOR, rect, border_radius=10)
            text = font.render(labels[direction], True, TEXT_COLOR)
            screen.blit(
                text,
                (rect.centerx - text.get_width() // 2, rect.centery - text.get_height() // 2),
            )


def _stone_end(
    pit_id: str | None,
    owner: int | None,
    positions: dict[str, Point],
    score_areas: dict[int, Point],
) -> Point | None:
    if pit_id is not None:
        return positions.get(pit_id)
    if owner is not None:
        return score_areas.get(owner)
    return None


def draw_speed_indicator(screen: pygame.Surface, font: pygame.font.Font, pacer: StepPacer) -> None:
    """Draw animation speed indicator."""
    delay = pacer.delay_ms
    speed_text = "Speed: instant" if delay == 0 else f"Speed: {delay}ms  [+/-]"
    if pacer.paused:
        speed_text += "  PAUSED [Space]"
    text = font.render(speed_text, True, (100, 100, 100))
    screen.blit(text, (10, WINDOW_HEIGHT - 30))


def draw_game_over(screen: pygame.Surface, font: pygame.font.Font, game: Game) -> None:
    """Draw game over overlay with the settled scores."""
    overlay = pygame.Surface((WINDOW_WIDTH, WINDOW_HEIGHT), pygame.SRCALPHA)
    overlay.fill((0, 0, 0, 180))
    screen.blit(overlay, (0, 0))

    best = game.winner()
    result_text = f"{best.name} Wins!" if best else "No winner"
    color = PLAYER_COLORS[best.player_id] if best else TEXT_COLOR

    big_font = pygame.font.Font(None, 72)
    text = big_font.render(result_text, True, color)
    y = WINDOW_HEIGHT // 2 - 120
    screen.blit(text, (WINDOW_WIDTH // 2 - text.get_width() // 2, y))

    y += 80
    quan_value = game.settings.quan_value
    for score in game.final_scores():
        line = (
            f"{score.name}: {score.dan} + {score.quan}x{quan_value} "
            f"{score.net_debt:+d} debt = {score.total}"
        )
        text = font.render(line, True, TEXT_COLOR)
        screen.blit(text, (WINDOW_WIDTH // 2 - text.get_width() // 2, y))
        y += 36

    restart_text = font.render("Press R to restart or Q to quit", True, TEXT_COLOR)
    screen.blit(restart_text, (WINDOW_WIDTH // 2 - restart_text.get_width() // 2, y + 20))


def handle_click(
    game: Game, pos: tuple[int, int], positions: dict[str, Point], radii: dict[str, float]
) -> None:
    """Route a mouse click to pit selection or a direction button."""
    if game.state.phase is Phase.AWAITING_DIRECTION:
        for direction, rect in direction_buttons().items():
            if rect.collidepoint(pos):
                game.choose_direction(direction)
                return
    pit_id = hit_test(positions, (pos[0], pos[1] - BOARD_TOP), radii)
    if pit_id is not None:
        game.select_pit(pit_id)


def run_gui(
    settings: Settings | None = None,
    starting_player: int | None = None,
    seed: int | None = None,
    animation_delay: int = 120,
) -> None:
    """Run the pygame GUI."""
    settings = settings or Settings()

    pygame.init()
    screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
    pygame.display.set_caption("Ô Ăn Quan")
    font = pygame.font.Font(None, 30)
    clock = pygame.time.Clock()

    layout = settings.board_layout
    positions = pit_positions(layout, settings.player_count, WINDOW_WIDTH, BOARD_HEIGHT)
    score_areas = score_area_positions(layout, settings.player_count, WINDOW_WIDTH, BOARD_HEIGHT)
    radii = pit_radii(
        layout, settings.player_count, WINDOW_WIDTH, BOARD_HEIGHT, PIT_RADIUS, QUAN_RADIUS
    )

    def new_session() -> tuple[Game, StepPacer]:
        game = Game(settings, starting_player=starting_player, seed=seed, paced=True)
        return game, StepPacer(game, animation_delay)

    game, pacer = new_session()

    running = True
    while running:
        dt = clock.tick(60)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_q:
                    running = False
                elif event.key == pygame.K_r:
                    delay = pacer.delay_ms
                    game, pacer = new_session()
                    pacer.delay_ms = delay
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_UP):
                    pacer.faster()
                elif event.key in (pygame.K_MINUS, pygame.K_DOWN):
                    pacer.slower()
                elif event.key == pygame.K_SPACE:
                    pacer.paused = not pacer.paused
                elif event.key == pygame.K_RETURN and game.is_animating:
                    pacer.skip()
                elif event.key == pygame.K_LEFT:
                    game.choose_direction(Direction.BACKWARD)
                elif event.key == pygame.K_RIGHT:
                    game.choose_direction(Direction.FORWARD)

            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                handle_click(game, event.pos, positions, radii)

        pacer.update(dt)

        draw_board(screen, font, game, pacer, positions, score_areas, radii)
        draw_speed_indicator(screen, font, pacer)
        if game.is_game_over() and not game.is_animating:
            draw_game_over(screen, font, game)

        pygame.display.flip()

    pygame.quit()
