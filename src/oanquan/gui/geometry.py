import math

from oanquan.board import DAN_PITS_PER_PLAYER, Layout, dan_pit_id, quan_pit_id

Point = tuple[float, float]

# where the first corner (q0) sits for each polygon board, in degrees
_START_ANGLE = {
    Layout.TRIANGLE: 210.0,
    Layout.SQUARE: 225.0,
}


def _lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def corner_points(layout: Layout, player_count: int, width: int, height: int) -> list[Point]:
    """Screen positions of the Quan corners, in forward (counter-clockwise) order."""
    cx, cy = width / 2, height / 2
    if layout is Layout.RECTANGLE:
        margin = width * 0.12
        return [(margin, cy), (width - margin, cy)]

    radius = min(width, height) * 0.42
    start = math.radians(_START_ANGLE[layout])
    step = 2 * math.pi / player_count
    # screen y grows downwards, so subtracting sin makes increasing angle run counter-clockwise
    return [
        (cx + radius * math.cos(start + k * step), cy - radius * math.sin(start + k * step))
        for k in range(player_count)
    ]


def pit_positions(layout: Layout, player_count: int, width: int, height: int) -> dict[str, Point]:
    """Centre of every pit, keyed by pit id."""
    corners = corner_points(layout, player_count, width, height)
    positions: dict[str, Point] = {}

    if layout is Layout.RECTANGLE:
        left, right = corners
        row_gap = height * 0.16
        for p, y in ((0, left[1] + row_gap), (1, left[1] - row_gap)):
            positions[quan_pit_id(p)] = corners[p]
            for i in range(DAN_PITS_PER_PLAYER):
                t = (i + 1) / (DAN_PITS_PER_PLAYER + 1)
                # player 0 runs left to right along the bottom, player 1 back along the top
                x = left[0] + (right[0] - left[0]) * (t if p == 0 else 1 - t)
                positions[dan_pit_id(p, i)] = (x, y)
        return positions

    for p in range(player_count):
        start, end = corners[p], corners[(p + 1) % player_count]
        positions[quan_pit_id(p)] = start
        for i in range(DAN_PITS_PER_PLAYER):
            positions[dan_pit_id(p, i)] = _lerp(start, end, (i + 1) / (DAN_PITS_PER_PLAYER + 1))
    return positions


def score_area_positions(
    layout: Layout, player_count: int, width: int, height: int
) -> dict[int, Point]:
    """Where each player's captured stones are shown: just outside the middle of their side."""
    cx, cy = width / 2, height / 2
    pits = pit_positions(layout, player_count, width, height)
    areas: dict[int, Point] = {}
    for p in range(player_count):
        mid = pits[dan_pit_id(p, DAN_PITS_PER_PLAYER // 2)]
        dx, dy = mid[0] - cx, mid[1] - cy
        norm = math.hypot(dx, dy) or 1.0
        push = min(width, height) * 0.12
        areas[p] = (mid[0] + dx / norm * push, mid[1] + dy / norm * push)
    return areas


def pit_radii(
    layout: Layout,
    player_count: int,
    width: int,
    height: int,
    pit_radius: float,
    quan_radius: float,
) -> dict[str, float]:
    """Drawn radius of every pit, shrunk so neighbouring circles never overlap."""
    pits = pit_positions(layout, player_count, width, height)
    a, b = pits[quan_pit_id(0)], pits[dan_pit_id(0, 0)]
    spacing = math.hypot(b[0] - a[0], b[1] - a[1])
    # a Quan pit and a Dân pit are the widest neighbours; keep a small gap between them
    scale = min(1.0, spacing / (pit_radius + quan_radius + 4))
    quan_ids = {quan_pit_id(p) for p in range(player_count)}
    return {
        pit_id: (quan_radius if pit_id in quan_ids else pit_radius) * scale
        for pit_id in pits
    }


def hit_test(
    positions: dict[str, Point], point: Point, radius: float | dict[str, float]
) -> str | None:
    """Pit id whose circle contains `point`, if any.

    `radius` is one radius for every pit or a radius per pit id. When circles
    overlap, the pit whose edge is furthest from the point wins.
    """
    best: str | None = None
    best_depth = 0.0
    for pit_id, (x, y) in positions.items():
        r = radius[pit_id] if isinstance(radius, dict) else radius
        depth = r - math.hypot(point[0] - x, point[1] - y)
        if depth >= 0 and (best is None or depth > best_depth):
            best, best_depth = pit_id, depth
    return best
