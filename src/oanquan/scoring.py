import logging
from collections.abc import Generator, Iterable
from dataclasses import dataclass

from oanquan.board import Pit
from oanquan.events import StepEvent

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Player:
    id: int
    name: str
    dan: int = 0  # stones collected
    quan: int = 0  # Quan pits captured


@dataclass(frozen=True, slots=True)
class DebtRecord:
    borrower_id: int
    lender_id: int
    amount: int


@dataclass(frozen=True, slots=True)
class FinalScore:
    player_id: int
    name: str
    dan: int
    quan: int
    net_debt: int
    total: int


def make_players(player_count: int) -> list[Player]:
    return [Player(i, f"Player {i + 1}") for i in range(player_count)]


def net_debt(debts: Iterable[DebtRecord], player_id: int) -> int:
    """Amount lent minus amount borrowed by a player."""
    total = 0
    for debt in debts:
        if debt.lender_id == player_id:
            total += debt.amount
        if debt.borrower_id == player_id:
            total -= debt.amount
    return total


def settle_reseed(
    player: Player, player_count: int, needed: int
) -> DebtRecord | None:
    """Pay for re-seeding an empty side out of the player's stored stones.

    Whatever the player cannot cover is borrowed from the next player in turn
    order and returned as a debt record.
    """
    if player.dan >= needed:
        player.dan -= needed
        return None

    amount = needed - player.dan
    player.dan = 0
    lender = (player.id + 1) % player_count
    return DebtRecord(borrower_id=player.id, lender_id=lender, amount=amount)


def collect_remaining(
    pits: list[Pit], players: list[Player]
) -> Generator[StepEvent, None, int]:
    """Move every stone left in Dân pits into its owner's score.

    Returns the number of stones collected.
    """
    collected = 0
    for pit in pits:
        if pit.is_quan or pit.owner is None or pit.stones == 0:
            continue
        count = pit.stones
        pit.set_stones(0)
        players[pit.owner].dan += count
        collected += count
        yield StepEvent("collect", pit.id, count=count, player=pit.owner)
    logger.info("collected %d remaining stones", collected)
    return collected


def score_players(
    players: list[Player], debts: list[DebtRecord], quan_value: int
) -> list[FinalScore]:
    scores = []
    for player in players:
        debt = net_debt(debts, player.id)
        total = player.dan + player.quan * quan_value + debt
        scores.append(FinalScore(player.id, player.name, player.dan, player.quan, debt, total))
    return scores


def pick_winner(scores: list[FinalScore]) -> FinalScore | None:
    """Highest total; ties go to the earliest player in the standings."""
    best: FinalScore | None = None
    for score in scores:
        if best is None or score.total > best.total:
            best = score
    return best
