"""
Gemini Service: tutor replies and text-to-speech over the Gemini REST API.

Mock mode: completions come from MOCK_REPLIES, synthesis returns None
           (nothing to play).
Real mode: one generateContent call per operation. No retries, no rate
           limiting; failures are raised as GeminiServiceError and the
           caller decides whether to swallow them.
"""

import asyncio
import logging
import os

import aiohttp

from benoit.config import (
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    GEMINI_TTS_MODEL,
    GEMINI_VOICE,
    MOCK_MODE,
)
from benoit.content import SPEECH_DIRECTIVE
from benoit.mock_data import mock_reply

logger = logging.getLogger(__name__)

COMPLETION_TEMPERATURE = 0.7

# Chat roles on our side → Gemini content roles
_ROLE_MAP: dict[str, str] = {
    "assistant": "model",
    "user": "user",
}

# Keep one persistent aiohttp session for connection reuse
_aiohttp_session: "aiohttp.ClientSession | None" = None


async def _get_session() -> aiohttp.ClientSession:
    """Return a shared aiohttp session (creates one if needed)."""
    global _aiohttp_session
    if _aiohttp_session is None or _aiohttp_session.closed:
        _aiohttp_session = aiohttp.ClientSession()
    return _aiohttp_session


async def close_session() -> None:
    """Close the shared aiohttp session, if one was opened."""
    global _aiohttp_session
    if _aiohttp_session is not None and not _aiohttp_session.closed:
        await _aiohttp_session.close()
    _aiohttp_session = None


class GeminiServiceError(Exception):
    """A Gemini call failed at the transport level or returned an unusable envelope."""


def to_gemini_contents(history: list[dict]) -> list[dict]:
    """Map [{role, content}] turns to Gemini `contents` entries."""
    return [
        {
            "role": _ROLE_MAP.get(turn["role"], "user"),
            "parts": [{"text": turn["content"]}],
        }
        for turn in history
    ]


def build_completion_payload(history: list[dict], system_instruction: str) -> dict:
    return {
        "contents": to_gemini_contents(history),
        "systemInstruction": {"parts": [{"text": system_instruction}]},
        "generationConfig": {"temperature": COMPLETION_TEMPERATURE},
    }


def build_speech_payload(text: str, voice: str = GEMINI_VOICE) -> dict:
    return {
        "contents": [{"parts": [{"text": f"{SPEECH_DIRECTIVE}{text}"}]}],
        "generationConfig": {
            "responseModalities": ["AUDIO"],
            "speechConfig": {
                "voiceConfig": {
                    "prebuiltVoiceConfig": {"voiceName": voice},
                },
            },
        },
    }


def _top_candidate_parts(data: dict) -> list:
    if not isinstance(data, dict):
        raise GeminiServiceError(f"Unexpected Gemini response: {data!r}")
    candidates = data.get("candidates") or []
    if not candidates:
        return []
    top = candidates[0]
    if not isinstance(top, dict):
        raise GeminiServiceError(f"Unexpected Gemini candidate: {top!r}")
    content = top.get("content") or {}
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise GeminiServiceError(f"Unexpected Gemini parts: {parts!r}")
    return parts


def extract_text(data: dict) -> str:
    """Concatenated text parts of the top candidate ("" when there is none)."""
    parts = _top_candidate_parts(data)
    return "".join(
        part["text"] for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )


def extract_audio(data: dict) -> str | None:
    """First inline base64 audio blob of the top candidate, or None."""
    for part in _top_candidate_parts(data):
        if not isinstance(part, dict):
            continue
        inline = part.get("inlineData") or {}
        if inline.get("data"):
            return inline["data"]
    return None


class GeminiService:
    """Text completion + speech synthesis against Google Gemini."""

    def __init__(self, mock_mode: bool | None = None, api_key: str | None = None):
        self.mock_mode = MOCK_MODE if mock_mode is None else mock_mode
        if not self.mock_mode:
            self._init_real_client(api_key)

    def _init_real_client(self, api_key: str | None):
        self._api_key = api_key or os.getenv("GEMINI_API_KEY", "") or os.getenv("API_KEY", "")
        if not self._api_key:
            logger.warning("No GEMINI_API_KEY, Gemini calls will be rejected")
        self._base_url = GEMINI_BASE_URL.rstrip("/")
        self._model = GEMINI_MODEL
        self._tts_model = GEMINI_TTS_MODEL
        self._voice = GEMINI_VOICE

    async def complete_conversation(self, history: list[dict], system_instruction: str) -> str:
        """Return the tutor's reply to `history` (may be empty)."""
        if self.mock_mode:
            user_turns = sum(1 for turn in history if turn["role"] == "user")
            return mock_reply(user_turns)
        payload = build_completion_payload(history, system_instruction)
        data = await self._generate_content(self._model, payload)
        return extract_text(data)

    async def synthesize_speech(self, text: str) -> str | None:
        """Return base64 16-bit PCM (24 kHz mono) for `text`, or None."""
        if self.mock_mode:
            return None
        payload = build_speech_payload(text, self._voice)
        data = await self._generate_content(self._tts_model, payload)
        audio = extract_audio(data)
        if audio is None:
            logger.warning("Gemini TTS returned no audio for %d chars", len(text))
        return audio

    async def _generate_content(self, model: str, payload: dict) -> dict:
        url = f"{self._base_url}/models/{model}:generateContent"
        headers = {"x-goog-api-key": self._api_key}
        try:
            session = await _get_session()
            async with session.post(url, json=payload, headers=headers) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise GeminiServiceError(f"Gemini HTTP {resp.status} ({model}): {body[:200]}")
                return await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GeminiServiceError(f"Gemini request failed ({model}): {exc}") from exc
        except ValueError as exc:
            raise GeminiServiceError(f"Gemini returned invalid JSON ({model}): {exc}") from exc
