import random

from shadowsignal.config import Config
from shadowsignal.game import machine
from shadowsignal.game.models import Player


def lobby(n=3, mode="INFILTRATOR"):
    room = machine.new_room("ABCD", mode, "p0", "g0", "s0")
    for i in range(1, n):
        machine.add_player(room, f"g{i}", f"p{i}", f"s{i}")
    return room


def test_new_room_has_single_host():
    room = lobby(1)

    assert room.phase == "LOBBY"
    assert [p.is_host for p in room.players] == [True]


def test_add_player_rebinds_existing_guest():
    room = lobby(2)

    player = machine.add_player(room, "g1", "ignored", "s1-new")

    assert len(room.players) == 2
    assert player.sid == "s1-new"
    assert player.name == "p1"


def test_remove_host_promotes_first_remaining():
    room = lobby(3)

    machine.remove_player(room, "s0")

    assert [p.guest_id for p in room.players] == ["g1", "g2"]
    assert [p.is_host for p in room.players] == [True, False]


def test_remove_unknown_sid_is_noop():
    room = lobby(2)

    assert machine.remove_player(room, "nope") is None
    assert len(room.players) == 2


def test_start_game_requires_minimum_players():
    room = lobby(Config.MIN_PLAYERS - 1)

    assert not machine.start_game(room, "Pizza", None, random.Random(0))
    assert room.phase == "LOBBY"
    assert all(p.role == "PENDING" for p in room.players)


def test_infiltrator_mode_deal():
    room = lobby(5)

    assert machine.start_game(room, "Pizza", "Burger", random.Random(42))

    specials = [p for p in room.players if p.role == "INFILTRATOR"]
    citizens = [p for p in room.players if p.role == "CITIZEN"]
    assert room.phase == "ROLE_REVEAL"
    assert len(specials) == 1 and specials[0].word == ""
    assert len(citizens) == 4 and all(p.word == "Pizza" for p in citizens)
    assert room.decoy_word is None


def test_spy_mode_deal():
    room = lobby(4, mode="SPY")

    machine.start_game(room, "Tiger", "Lion", random.Random(7))

    spies = [p for p in room.players if p.role == "SPY"]
    agents = [p for p in room.players if p.role == "AGENT"]
    assert len(spies) == 1 and spies[0].word == "Lion"
    assert len(agents) == 3 and all(p.word == "Tiger" for p in agents)


def test_start_game_only_from_lobby():
    room = lobby(3)
    machine.start_game(room, "Pizza", None, random.Random(1))
    roles = [p.role for p in room.players]

    assert not machine.start_game(room, "Sushi", None, random.Random(2))
    assert [p.role for p in room.players] == roles
    assert room.secret_word == "Pizza"


def test_resolve_speaker_wraps_over_alive_players():
    alive = [Player(guest_id=str(i), sid=str(i), name=str(i)) for i in range(3)]

    assert machine.resolve_speaker(alive, 4).guest_id == "1"
    assert machine.resolve_speaker([], 4) is None


def test_current_speaker_skips_eliminated_players():
    room = lobby(4)
    room.players[1].is_alive = False
    room.current_speaker_index = 1

    assert machine.current_speaker(room).guest_id == "g2"


def test_speaking_complete_ignores_hint_clues():
    room = lobby(3)
    machine.start_game(room, "Pizza", None, random.Random(1))
    machine.enter_speaking(room)
    machine.add_clue(room, Config.HINT_SENDER, "SYSTEM ANALYSIS: round")
    machine.add_clue(room, "p0", "cheese")
    machine.add_clue(room, "p1", "oven")

    assert machine.human_clue_count(room) == 2
    assert not machine.speaking_complete(room)

    machine.add_clue(room, "p2", "slice")
    assert machine.speaking_complete(room)


def test_restart_resets_round_state():
    room = lobby(4)
    machine.start_game(room, "Pizza", None, random.Random(1))
    machine.enter_speaking(room)
    first_round = room.round
    machine.add_clue(room, "p0", "cheese")
    room.current_speaker_index = 3
    machine.enter_voting(room)
    voter, target = room.players[0], room.players[1]
    machine.cast_vote(room, voter, target)
    room.phase = "RESULT"

    assert machine.restart_speaking_round(room)

    assert room.phase == "SPEAKING"
    assert room.round == first_round + 1
    assert room.current_speaker_index == 0
    assert room.clues == []
    assert all(p.votes == 0 and not p.has_voted for p in room.players)


def test_end_game_requires_winner():
    room = lobby(3)
    room.phase = "RESULT"

    assert not machine.end_game(room)
    room.winner = "CITIZENS"
    assert machine.end_game(room)
    assert room.phase == "GAME_OVER"


def test_cast_vote_rejects_double_vote():
    room = lobby(3)
    room.phase = "VOTING"
    voter, target = room.players[0], room.players[1]

    assert machine.cast_vote(room, voter, target)
    assert not machine.cast_vote(room, voter, target)
    assert target.votes == 1


def test_clues_cover_alive_tracks_authors_not_counts():
    room = lobby(3)
    machine.start_game(room, "Pizza", None, random.Random(1))
    machine.enter_speaking(room)
    machine.add_clue(room, Config.HINT_SENDER, "SYSTEM ANALYSIS: round")
    machine.add_clue(room, "p0", "cheese", author_id="g0")
    machine.add_clue(room, "p0", "again", author_id="g0")
    machine.add_clue(room, "p1", "oven", author_id="g1")

    assert not machine.clues_cover_alive(room)

    room.players[2].is_alive = False
    assert machine.clues_cover_alive(room)
