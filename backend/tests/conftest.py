from __future__ import annotations

import random

import pytest

from shadowsignal.game.store import RoomStore
from shadowsignal.realtime.controller import RoomController


class ManualScheduler:
    """Collects spawned tasks; tests decide when they run. Sleeping is instant."""

    def __init__(self) -> None:
        self.tasks: list[tuple] = []
        self.slept: list[float] = []

    def spawn(self, fn, *args):
        self.tasks.append((fn, args))

    def sleep(self, seconds: float) -> None:
        self.slept.append(seconds)

    def pending(self, name: str | None = None) -> list[tuple]:
        return [t for t in self.tasks if name is None or t[0].__name__ == name]

    def run(self, name: str | None = None) -> int:
        batch = self.pending(name)
        self.tasks = [t for t in self.tasks if t not in batch]
        for fn, args in batch:
            fn(*args)
        return len(batch)


class FakeBroadcaster:
    def __init__(self) -> None:
        self.broadcasts: list[str] = []
        self.attached: list[tuple[str, str]] = []
        self.notices: list[tuple[str, str, object]] = []

    def attach(self, sid: str, room_code: str) -> None:
        self.attached.append((sid, room_code))

    def broadcast(self, room_code: str) -> None:
        self.broadcasts.append(room_code)

    def notify(self, to: str, event: str, payload) -> None:
        self.notices.append((to, event, payload))


class FakeHints:
    def __init__(self, spy_word: str | None = "Decoy", hint: str | None = "Shiny") -> None:
        self.spy_word = spy_word
        self.hint = hint
        self.hint_calls: list[str] = []
        self.spy_calls: list[str] = []

    def get_spy_word(self, secret_word: str) -> str | None:
        self.spy_calls.append(secret_word)
        return self.spy_word

    def get_hint(self, secret_word: str) -> str | None:
        self.hint_calls.append(secret_word)
        return self.hint


@pytest.fixture
def store() -> RoomStore:
    return RoomStore()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def broadcaster() -> FakeBroadcaster:
    return FakeBroadcaster()


@pytest.fixture
def hints() -> FakeHints:
    return FakeHints()


@pytest.fixture
def controller(store, broadcaster, scheduler, hints) -> RoomController:
    return RoomController(store, broadcaster, scheduler, hints, rng=random.Random(1234))


def sid_of(name: str) -> str:
    return f"sid-{name.lower()}"


def guest_of(name: str) -> str:
    return f"g-{name.lower()}"


def seat(controller: RoomController, names: list[str], mode: str = "INFILTRATOR") -> str:
    """Create a room hosted by names[0] and join the rest. Returns the room code."""
    host, *others = names
    room = controller.create_room(sid_of(host), host, guest_of(host), mode)
    for name in others:
        controller.join_room(sid_of(name), room.code, name, guest_of(name))
    return room.code


def start_speaking(controller: RoomController, scheduler: ManualScheduler, code: str) -> None:
    room = controller.store.get(code)
    host = next(p for p in room.players if p.is_host)
    controller.start_game(host.sid, code)
    scheduler.run("_reveal_then_speak")


def special_player(controller: RoomController, code: str):
    room = controller.store.get(code)
    return next(p for p in room.players if p.role in ("SPY", "INFILTRATOR"))
