from __future__ import annotations

import logging
import random

from ..config import Config
from ..game import machine
from ..game.errors import GameError
from ..game.models import GAME_MODES, Player, Room
from ..game.store import RoomStore, normalize_code
from ..game.words import pick_game_words
from .sessions import DisconnectCoordinator
from .timer import TurnTimers

logger = logging.getLogger(__name__)


def _validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > Config.NAME_MAX_LENGTH:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    # Reserved for injected hint clues.
    if n == Config.HINT_SENDER:
        return False
    return True


class RoomController:
    """Sequences player actions and delayed transitions against the room store.

    Action methods validate against the room as it is right now, raise
    ``GameError`` without touching anything when the action is not allowed,
    and broadcast after every observable change. Delayed steps run on the
    scheduler and re-read the room after every suspension.
    """

    def __init__(
        self,
        store: RoomStore,
        broadcaster,
        scheduler,
        hints,
        rng: random.Random | None = None,
        timers: TurnTimers | None = None,
        reveal_delay_sec: float | None = None,
        result_delay_sec: float | None = None,
    ) -> None:
        self.store = store
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.hints = hints
        self.rng = rng or random.Random()
        self.timers = timers or TurnTimers(store, scheduler, broadcaster)
        self.reveal_delay_sec = Config.ROLE_REVEAL_DELAY_SEC if reveal_delay_sec is None else reveal_delay_sec
        self.result_delay_sec = Config.RESULT_DELAY_SEC if result_delay_sec is None else result_delay_sec
        self.sessions = DisconnectCoordinator(self)

    # -- lookups ---------------------------------------------------------

    def _require_room(self, room_code: str) -> Room:
        room = self.store.get(room_code)
        if room is None:
            raise GameError("room_not_found", "Room not found")
        return room

    def _require_player(self, room: Room, sid: str) -> Player:
        player = machine.find_by_sid(room, sid)
        if player is None:
            raise GameError("not_in_room", "You are not in this room.")
        return player

    def _require_phase(self, room: Room, phase: str) -> None:
        if room.phase != phase:
            raise GameError("wrong_phase", f"Action not allowed during {room.phase}.")

    # -- player actions --------------------------------------------------

    def create_room(self, sid: str, host_name: str, guest_id: str, mode: str = "INFILTRATOR") -> Room:
        mode = (mode or "INFILTRATOR").strip().upper()
        if mode not in GAME_MODES:
            raise GameError("invalid_payload", f"Unknown game mode {mode!r}.")
        if not _validate_name(host_name):
            raise GameError("invalid_payload", "Invalid name.")

        with self.store.lock:
            code = self.store.generate_code(self.rng)
            room = machine.new_room(code, mode, host_name.strip(), guest_id or sid, sid)
            self.store.upsert(code, room)

            self.broadcaster.attach(sid, code)
            self.broadcaster.broadcast(code)
        logger.info("Room %s (%s) created by %s", code, mode, sid)
        return room

    def join_room(self, sid: str, room_code: str, name: str, guest_id: str) -> Room:
        if not _validate_name(name):
            raise GameError("invalid_payload", "Invalid name.")

        with self.store.lock:
            room = self._require_room(room_code)
            guest_id = guest_id or sid
            rejoining = machine.find_by_guest(room, guest_id) is not None
            if not rejoining and room.phase != "LOBBY":
                raise GameError("game_in_progress", "Game already in progress.")

            self.broadcaster.attach(sid, room.code)
            player = machine.add_player(room, guest_id, name.strip(), sid)

            self.broadcaster.broadcast(room.code)
            if not rejoining:
                self.broadcaster.notify(room.code, "PLAYER_JOINED", player.name)
        logger.info("%s %s room %s", player.name, "rejoined" if rejoining else "joined", room.code)
        return room

    def start_game(self, sid: str, room_code: str) -> Room:
        code = normalize_code(room_code)
        with self.store.lock:
            mode = self._check_can_start(sid, code).mode

        try:
            # May block on the hint service, so runs unlocked.
            secret_word, decoy_word = pick_game_words(mode, self.hints.get_spy_word, self.rng)
        except LookupError as exc:
            logger.error("Word selection failed for %s: %s", code, exc)
            raise GameError("words_unavailable", "Failed to initialize game words.") from exc

        with self.store.lock:
            room = self._check_can_start(sid, code)
            machine.start_game(room, secret_word, decoy_word, self.rng)
            self.broadcaster.broadcast(code)
        logger.info("Room %s started with %d players", code, len(room.players))

        self.scheduler.spawn(self._reveal_then_speak, code)
        return room

    def _check_can_start(self, sid: str, code: str) -> Room:
        room = self._require_room(code)
        player = self._require_player(room, sid)
        if not player.is_host:
            raise GameError("only_host", "Only the host can start the game.")
        self._require_phase(room, "LOBBY")
        if len(room.players) < Config.MIN_PLAYERS:
            raise GameError("not_enough_players", f"Minimum {Config.MIN_PLAYERS} players required.")
        return room

    def send_clue(self, sid: str, room_code: str, text: str) -> Room:
        with self.store.lock:
            room = self._require_room(room_code)
            player = self._require_player(room, sid)
            self._require_phase(room, "SPEAKING")
            if not player.is_alive:
                raise GameError("player_eliminated", "Eliminated players cannot speak.")

            speaker = machine.current_speaker(room)
            if speaker is None or speaker.guest_id != player.guest_id:
                raise GameError("not_your_turn", "It is not your turn to speak.")

            clue_text = (text or "").strip()[: Config.CLUE_MAX_LENGTH]
            if not clue_text:
                raise GameError("invalid_payload", "Clue cannot be empty.")

            self.timers.stop(room.code)
            machine.add_clue(room, player.name, clue_text, author_id=player.guest_id)

            if machine.speaking_complete(room):
                machine.enter_voting(room)
                logger.info("Room %s entered VOTING", room.code)
            else:
                machine.advance_speaker(room)
                self.timers.start(room.code)

            self.broadcaster.broadcast(room.code)
            return room

    def submit_vote(self, sid: str, room_code: str, target_id: str) -> Room:
        with self.store.lock:
            room = self._require_room(room_code)
            voter = self._require_player(room, sid)
            self._require_phase(room, "VOTING")
            if not voter.is_alive:
                raise GameError("player_eliminated", "Eliminated players cannot vote.")
            if voter.has_voted:
                raise GameError("already_voted", "You have already voted.")

            target = machine.find_by_guest(room, target_id)
            if target is None:
                raise GameError("invalid_target", "No such player.")

            machine.cast_vote(room, voter, target)

            if machine.voting_complete(room):
                self.resolve_votes(room)
            else:
                self.broadcaster.broadcast(room.code)
            return room

    def disconnect(self, sid: str) -> list[str]:
        return self.sessions.disconnect(sid)

    # -- transitions shared with the disconnect path ---------------------

    def resolve_votes(self, room: Room) -> None:
        """Close the vote. Callers hold ``store.lock``."""
        self.timers.stop(room.code)
        outcome = machine.resolve_votes(room)
        if outcome is None:
            return

        if outcome.eliminated_id is None:
            logger.info("Room %s vote tied, nobody eliminated", room.code)
        else:
            logger.info("Room %s eliminated %s", room.code, outcome.eliminated_id)
        if outcome.winner is not None:
            logger.info("Room %s won by %s", room.code, outcome.winner)

        self.broadcaster.broadcast(room.code)
        self.scheduler.spawn(self._after_result, room.code, room.round)

    # -- delayed steps ---------------------------------------------------

    def _reveal_then_speak(self, code: str) -> None:
        self.scheduler.sleep(self.reveal_delay_sec)

        with self.store.lock:
            room = self.store.get(code)
            if room is None or not machine.enter_speaking(room):
                logger.debug("Dropping stale role reveal for %s", code)
                return

            logger.info("Room %s entered SPEAKING (round %d)", code, room.round)
            self.broadcaster.broadcast(code)
            round_no = room.round

        self._open_round(code, round_no)

    def _after_result(self, code: str, round_no: int) -> None:
        self.scheduler.sleep(self.result_delay_sec)

        with self.store.lock:
            room = self.store.get(code)
            if room is None or room.phase != "RESULT" or room.round != round_no:
                logger.debug("Dropping stale result continuation for %s", code)
                return

            if room.winner is not None:
                machine.end_game(room)
                logger.info("Room %s game over, winner %s", code, room.winner)
                self.broadcaster.broadcast(code)
                return

            machine.restart_speaking_round(room)
            logger.info("Room %s restarted SPEAKING (round %d)", code, room.round)
            self.broadcaster.broadcast(code)
            round_no = room.round

        self._open_round(code, round_no)

    def _open_round(self, code: str, round_no: int) -> None:
        """Inject the round's hint clue, then start the first turn's timer."""
        with self.store.lock:
            room = self.store.get(code)
            if room is None:
                return
            secret_word = room.secret_word
            speaker_index = room.current_speaker_index

        hint = self.hints.get_hint(secret_word)

        with self.store.lock:
            room = self.store.get(code)
            if room is None or room.phase != "SPEAKING" or room.round != round_no:
                return

            if hint:
                machine.add_clue(room, Config.HINT_SENDER, f"{Config.HINT_PREFIX}{hint}")
                self.broadcaster.broadcast(code)

            # A clue or disconnect during the hint call already set the timer.
            if room.current_speaker_index == speaker_index:
                self.timers.start(code)
