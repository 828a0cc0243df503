from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


Phase = Literal["LOBBY", "ROLE_REVEAL", "SPEAKING", "VOTING", "RESULT", "GAME_OVER"]
GameMode = Literal["INFILTRATOR", "SPY"]
Role = Literal["CITIZEN", "INFILTRATOR", "AGENT", "SPY", "PENDING"]
Winner = Literal["CITIZENS", "INFILTRATOR", "AGENTS", "SPY"]

GAME_MODES: tuple[GameMode, ...] = ("INFILTRATOR", "SPY")

SPECIAL_ROLES: frozenset[str] = frozenset({"INFILTRATOR", "SPY"})
ORDINARY_ROLES: frozenset[str] = frozenset({"CITIZEN", "AGENT"})

SPECIAL_ROLE_BY_MODE: dict[str, Role] = {"INFILTRATOR": "INFILTRATOR", "SPY": "SPY"}
ORDINARY_ROLE_BY_MODE: dict[str, Role] = {"INFILTRATOR": "CITIZEN", "SPY": "AGENT"}

SPECIAL_WINNER_BY_MODE: dict[str, Winner] = {"INFILTRATOR": "INFILTRATOR", "SPY": "SPY"}
ORDINARY_WINNER_BY_MODE: dict[str, Winner] = {"INFILTRATOR": "CITIZENS", "SPY": "AGENTS"}


@dataclass
class Player:
    guest_id: str
    sid: str
    name: str
    is_host: bool = False
    role: Role = "PENDING"
    word: str = ""
    is_alive: bool = True
    votes: int = 0
    has_voted: bool = False


@dataclass
class Clue:
    id: str
    sender: str
    text: str
    # None for injected hints.
    author_id: str | None = None


@dataclass
class Room:
    code: str
    mode: GameMode
    phase: Phase = "LOBBY"
    # Bumped every time a speaking round begins; delayed work compares against it.
    round: int = 0
    players: list[Player] = field(default_factory=list)
    secret_word: str = ""
    decoy_word: str | None = None
    current_speaker_index: int = 0
    winner: Winner | None = None
    last_eliminated_id: str | None = None
    clues: list[Clue] = field(default_factory=list)
