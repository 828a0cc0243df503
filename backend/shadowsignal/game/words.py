from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable

from .models import GameMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WordEntry:
    word: str
    similar: tuple[str, ...]


FALLBACK_DECOY = "Secret"


def _entries(*rows: tuple[str, tuple[str, ...]]) -> tuple[WordEntry, ...]:
    return tuple(WordEntry(word=w, similar=s) for w, s in rows)


WORD_DOMAINS: dict[str, tuple[WordEntry, ...]] = {
    "food": _entries(
        ("Pizza", ("Burger", "Pasta", "Calzone")),
        ("Sushi", ("Sashimi", "Ramen", "Tempura")),
        ("Coffee", ("Tea", "Espresso", "Cocoa")),
        ("Pancake", ("Waffle", "Crepe", "Toast")),
    ),
    "places": _entries(
        ("Airport", ("Station", "Harbor", "Terminal")),
        ("Library", ("Bookstore", "Archive", "Museum")),
        ("Beach", ("Lake", "Island", "Desert")),
        ("Hospital", ("Clinic", "Pharmacy", "School")),
    ),
    "animals": _entries(
        ("Tiger", ("Lion", "Leopard", "Panther")),
        ("Dolphin", ("Whale", "Shark", "Seal")),
        ("Eagle", ("Hawk", "Falcon", "Owl")),
        ("Rabbit", ("Hamster", "Squirrel", "Mouse")),
    ),
    "objects": _entries(
        ("Guitar", ("Violin", "Piano", "Drum")),
        ("Umbrella", ("Raincoat", "Parasol", "Hat")),
        ("Telescope", ("Microscope", "Binoculars", "Camera")),
        ("Candle", ("Lantern", "Torch", "Lamp")),
    ),
    "sports": _entries(
        ("Football", ("Rugby", "Basketball", "Hockey")),
        ("Tennis", ("Badminton", "Squash", "Pingpong")),
        ("Skiing", ("Snowboarding", "Skating", "Surfing")),
    ),
}


def pick_entry(rng: random.Random | None = None, domains: dict[str, tuple[WordEntry, ...]] | None = None) -> WordEntry:
    rng = rng or random
    domains = WORD_DOMAINS if domains is None else domains

    names = [name for name, entries in domains.items() if entries]
    if not names:
        raise LookupError("no word domains available")

    domain = rng.choice(names)
    return rng.choice(domains[domain])


def pick_game_words(
    mode: GameMode,
    spy_word: Callable[[str], str | None],
    rng: random.Random | None = None,
    domains: dict[str, tuple[WordEntry, ...]] | None = None,
) -> tuple[str, str | None]:
    """Return ``(secret_word, decoy_word)``. Only SPY mode gets a decoy.

    ``spy_word`` may block on an external service and may return ``None``;
    the entry's similar words are used instead.
    """
    rng = rng or random
    entry = pick_entry(rng, domains)

    if mode != "SPY":
        return entry.word, None

    decoy = spy_word(entry.word)
    if decoy and decoy.lower() != entry.word.lower():
        return entry.word, decoy

    if decoy:
        logger.info("Discarding generated decoy identical to secret word")
    if entry.similar:
        return entry.word, rng.choice(entry.similar)
    return entry.word, FALLBACK_DECOY
