from __future__ import annotations

import logging
import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Game timing
    ROLE_REVEAL_DELAY_SEC = int(os.environ.get("ROLE_REVEAL_DELAY_SEC", "5"))
    RESULT_DELAY_SEC = int(os.environ.get("RESULT_DELAY_SEC", "5"))
    TURN_DURATION_SEC = int(os.environ.get("TURN_DURATION_SEC", "30"))

    # Game rules
    MIN_PLAYERS = 3
    # A disconnecting speaker only restarts the turn timer above this many alive players.
    TIMED_ROUND_MIN_ALIVE = 3
    CLUE_MAX_LENGTH = 100
    NAME_MAX_LENGTH = 16
    ROOM_CODE_LENGTH = 4
    HINT_SENDER = "SHADOW_SIGNAL_AI"
    HINT_PREFIX = "SYSTEM ANALYSIS: "

    # Hint generation (Gemini). Empty key disables it.
    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_API_URL = os.environ.get(
        "GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta/models"
    )
    GEMINI_TIMEOUT_SEC = float(os.environ.get("GEMINI_TIMEOUT_SEC", "10"))


def configure_logging(level: str | None = None) -> None:
    level_name = str(level or Config.LOG_LEVEL).upper()
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(getattr(logging, level_name, logging.INFO))
