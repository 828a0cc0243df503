from __future__ import annotations

import json
import logging
import re
from typing import Any
from urllib import error, parse, request

from ..config import Config

logger = logging.getLogger(__name__)


class HintGenerationError(RuntimeError):
    pass


def _spy_word_prompt(secret_word: str) -> str:
    return (
        "CONTEXT: Social deduction game 'Shadow Signal'.\n"
        f'SECRET WORD: "{secret_word}"\n'
        "TASK: Generate ONE single word for the 'Spy' player.\n"
        "RULES:\n"
        f'1. The word must be in the same category as "{secret_word}".\n'
        f'2. The word must be different from "{secret_word}".\n'
        "3. Respond with ONLY the word.\n"
        "4. No punctuation, no quotes, no explanations."
    )


def _hint_prompt(secret_word: str) -> str:
    return (
        "ROLE: You are the 'Shadow Guide' in the game Shadow Signal.\n"
        f'SECRET WORD: "{secret_word}"\n'
        "TASK: Provide a new, subtle one-word hint.\n"
        "RULES:\n"
        "1. Help the Citizens identify the secret word.\n"
        "2. Stay vague enough to keep the Spy confused.\n"
        "3. Respond with ONLY the one-word hint."
    )


def _extract_text(payload: dict[str, Any]) -> str:
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise HintGenerationError("Model response does not contain candidates")
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise HintGenerationError("Model response does not contain parts")
    text = "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))
    if not text.strip():
        raise HintGenerationError("Model response is empty")
    return text


def first_word(text: str) -> str | None:
    for token in text.split():
        word = re.sub(r"^[\W_]+|[\W_]+$", "", token)
        if word:
            return word
    return None


class HintService:
    """Best-effort one-word generation backed by the Gemini REST API.

    Public methods never raise: any failure is logged and reported as ``None``
    so callers can fall back to static words or skip the hint.
    """

    def __init__(
        self,
        api_key: str,
        model: str = Config.GEMINI_MODEL,
        api_url: str = Config.GEMINI_API_URL,
        timeout_sec: float = Config.GEMINI_TIMEOUT_SEC,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.api_url = api_url.rstrip("/")
        self.timeout_sec = timeout_sec

    @classmethod
    def from_config(cls, config: type[Config] = Config) -> "HintService":
        return cls(
            api_key=config.GEMINI_API_KEY,
            model=config.GEMINI_MODEL,
            api_url=config.GEMINI_API_URL,
            timeout_sec=config.GEMINI_TIMEOUT_SEC,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def get_spy_word(self, secret_word: str) -> str | None:
        return self._one_word(_spy_word_prompt(secret_word), purpose="spy word")

    def get_hint(self, secret_word: str) -> str | None:
        return self._one_word(_hint_prompt(secret_word), purpose="hint")

    def _one_word(self, prompt: str, purpose: str) -> str | None:
        if not self.enabled:
            return None
        try:
            return first_word(self._generate(prompt))
        except HintGenerationError as exc:
            logger.warning("Hint service failed to produce %s: %s", purpose, exc)
            return None

    def _generate(self, prompt: str) -> str:
        url = f"{self.api_url}/{parse.quote(self.model)}:generateContent"
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        raw_request = request.Request(
            url,
            data=json.dumps(body).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "x-goog-api-key": self.api_key,
            },
            method="POST",
        )
        try:
            with request.urlopen(raw_request, timeout=self.timeout_sec) as response:
                payload = json.loads(response.read().decode("utf-8"))
        except error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise HintGenerationError(f"HTTP {exc.code}: {detail[:300]}") from exc
        except Exception as exc:
            raise HintGenerationError(str(exc)) from exc

        if not isinstance(payload, dict):
            raise HintGenerationError("Model response root is not an object")
        if "error" in payload:
            raise HintGenerationError(f"Provider returned error: {str(payload['error'])[:300]}")

        return _extract_text(payload)
