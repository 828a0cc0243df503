from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .models import (
    ORDINARY_ROLES,
    ORDINARY_WINNER_BY_MODE,
    SPECIAL_ROLES,
    SPECIAL_WINNER_BY_MODE,
    GameMode,
    Player,
    Winner,
)


@dataclass(frozen=True)
class Outcome:
    eliminated_id: str | None
    winner: Winner | None


def top_candidates(players: Sequence[Player]) -> list[Player]:
    alive = [p for p in players if p.is_alive]
    if not alive:
        return []
    max_votes = max(p.votes for p in alive)
    return [p for p in alive if p.votes == max_votes]


def decide_winner(survivors: Sequence[Player], mode: GameMode) -> Winner | None:
    special = sum(1 for p in survivors if p.role in SPECIAL_ROLES)
    ordinary = sum(1 for p in survivors if p.role in ORDINARY_ROLES)

    if special == 0:
        return ORDINARY_WINNER_BY_MODE[mode]
    if special >= ordinary:
        return SPECIAL_WINNER_BY_MODE[mode]
    return None


def evaluate(players: Sequence[Player], mode: GameMode) -> Outcome:
    """Work out who a finished vote eliminates and whether that ends the game.

    Only alive players are considered. A unique top vote-getter is eliminated;
    a tie eliminates nobody. Nothing is mutated.
    """
    candidates = top_candidates(players)
    eliminated_id = candidates[0].guest_id if len(candidates) == 1 else None

    survivors = [p for p in players if p.is_alive and p.guest_id != eliminated_id]
    return Outcome(eliminated_id=eliminated_id, winner=decide_winner(survivors, mode))
