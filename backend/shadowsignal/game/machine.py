"""Phase transitions for a single room.

Every function here operates on a ``Room`` in place and does no I/O. Functions
that guard a transition return ``False`` (or ``None``) when the room is not in
a state that allows it, leaving the room untouched.
"""
from __future__ import annotations

import random
import uuid
from typing import Sequence

from ..config import Config
from .evaluator import Outcome, evaluate
from .models import (
    ORDINARY_ROLE_BY_MODE,
    SPECIAL_ROLE_BY_MODE,
    Clue,
    GameMode,
    Player,
    Room,
)


def new_room(code: str, mode: GameMode, host_name: str, guest_id: str, sid: str) -> Room:
    host = Player(guest_id=guest_id, sid=sid, name=host_name, is_host=True)
    return Room(code=code, mode=mode, players=[host])


def find_by_sid(room: Room, sid: str) -> Player | None:
    return next((p for p in room.players if p.sid == sid), None)


def find_by_guest(room: Room, guest_id: str) -> Player | None:
    return next((p for p in room.players if p.guest_id == guest_id), None)


def alive_players(room: Room) -> list[Player]:
    return [p for p in room.players if p.is_alive]


def resolve_speaker(alive: Sequence[Player], index: int) -> Player | None:
    if not alive:
        return None
    return alive[index % len(alive)]


def current_speaker(room: Room) -> Player | None:
    # Recomputed on every call so removals and eliminations reshuffle turns.
    return resolve_speaker(alive_players(room), room.current_speaker_index)


def add_player(room: Room, guest_id: str, name: str, sid: str) -> Player:
    """Seat a participant, or rebind the connection of one already seated."""
    existing = find_by_guest(room, guest_id)
    if existing is not None:
        existing.sid = sid
        return existing

    player = Player(guest_id=guest_id, sid=sid, name=name)
    room.players.append(player)
    return player


def remove_player(room: Room, sid: str) -> Player | None:
    player = find_by_sid(room, sid)
    if player is None:
        return None

    room.players = [p for p in room.players if p.sid != sid]

    if room.players and not any(p.is_host for p in room.players):
        room.players[0].is_host = True

    return player


def start_game(
    room: Room,
    secret_word: str,
    decoy_word: str | None,
    rng: random.Random | None = None,
) -> bool:
    if room.phase != "LOBBY" or len(room.players) < Config.MIN_PLAYERS:
        return False

    rng = rng or random
    special_index = rng.randrange(len(room.players))

    room.secret_word = secret_word
    room.decoy_word = decoy_word if room.mode == "SPY" else None

    for index, player in enumerate(room.players):
        if index == special_index:
            player.role = SPECIAL_ROLE_BY_MODE[room.mode]
            # Infiltrators play blind; spies get a related decoy.
            player.word = (decoy_word or "") if room.mode == "SPY" else ""
        else:
            player.role = ORDINARY_ROLE_BY_MODE[room.mode]
            player.word = secret_word

    room.phase = "ROLE_REVEAL"
    return True


def _reset_round_state(room: Room) -> None:
    room.round += 1
    room.current_speaker_index = 0
    room.clues = []
    for player in room.players:
        player.votes = 0
        player.has_voted = False


def enter_speaking(room: Room) -> bool:
    if room.phase != "ROLE_REVEAL":
        return False
    _reset_round_state(room)
    room.phase = "SPEAKING"
    return True


def restart_speaking_round(room: Room) -> bool:
    if room.phase != "RESULT" or room.winner is not None:
        return False
    _reset_round_state(room)
    room.phase = "SPEAKING"
    return True


def end_game(room: Room) -> bool:
    if room.phase != "RESULT" or room.winner is None:
        return False
    room.phase = "GAME_OVER"
    return True


def add_clue(room: Room, sender: str, text: str, author_id: str | None = None) -> Clue:
    clue = Clue(id=uuid.uuid4().hex[:8], sender=sender, text=text, author_id=author_id)
    room.clues.append(clue)
    return clue


def human_clue_count(room: Room) -> int:
    return sum(1 for c in room.clues if c.sender != Config.HINT_SENDER)


def advance_speaker(room: Room) -> None:
    room.current_speaker_index += 1


def speaking_complete(room: Room) -> bool:
    return room.phase == "SPEAKING" and human_clue_count(room) >= len(alive_players(room))


def clues_cover_alive(room: Room) -> bool:
    """True when every alive player has given a clue this round."""
    spoken = {c.author_id for c in room.clues if c.author_id is not None}
    alive = alive_players(room)
    return room.phase == "SPEAKING" and bool(alive) and all(p.guest_id in spoken for p in alive)


def enter_voting(room: Room) -> bool:
    if room.phase != "SPEAKING":
        return False
    room.phase = "VOTING"
    return True


def cast_vote(room: Room, voter: Player, target: Player) -> bool:
    if room.phase != "VOTING" or not voter.is_alive or voter.has_voted:
        return False
    voter.has_voted = True
    target.votes += 1
    return True


def voting_complete(room: Room) -> bool:
    alive = alive_players(room)
    return room.phase == "VOTING" and bool(alive) and all(p.has_voted for p in alive)


def resolve_votes(room: Room) -> Outcome | None:
    if room.phase != "VOTING":
        return None

    outcome = evaluate(room.players, room.mode)

    if outcome.eliminated_id is not None:
        victim = find_by_guest(room, outcome.eliminated_id)
        if victim is not None:
            victim.is_alive = False

    room.last_eliminated_id = outcome.eliminated_id
    room.winner = outcome.winner
    room.phase = "RESULT"
    return outcome
