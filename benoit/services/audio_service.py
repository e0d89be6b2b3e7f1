"""
Audio Service: decode Gemini TTS payloads and play them.

Gemini returns raw little-endian 16-bit PCM (24 kHz, mono) as base64.
Pipeline: text → Gemini TTS → base64 → PCM int16 → float32 [-1, 1]
→ shared AudioContext (sounddevice OutputStream) → speakers.

Playback is always best-effort: AudioPlayer.play_audio logs failures
and never raises.
"""

import base64
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

logger = logging.getLogger(__name__)

SAMPLE_RATE = 24000
CHANNELS = 1

_MARKDOWN_CHARS = re.compile(r"[*#_\[\]()]")


def strip_markdown(text: str) -> str:
    """Drop markdown punctuation so the voice does not read it out."""
    return _MARKDOWN_CHARS.sub("", text)


@dataclass(frozen=True)
class AudioBuffer:
    """Decoded PCM: float32 samples shaped (frames, channels)."""

    samples: np.ndarray
    sample_rate: int

    @property
    def channels(self) -> int:
        return self.samples.shape[1]

    @property
    def frames(self) -> int:
        return self.samples.shape[0]

    @property
    def duration(self) -> float:
        return self.frames / self.sample_rate


def decode_base64(data: str) -> bytes:
    """Strict base64 decode (raises binascii.Error on bad input)."""
    return base64.b64decode(data, validate=True)


def decode_audio_data(data: bytes, sample_rate: int, num_channels: int) -> AudioBuffer:
    """Interleaved int16 PCM bytes → normalized float32 AudioBuffer."""
    if len(data) % 2:
        raise ValueError(f"PCM payload has odd length {len(data)}")
    pcm = np.frombuffer(data, dtype="<i2")
    if len(pcm) % num_channels:
        raise ValueError(f"{len(pcm)} samples do not split into {num_channels} channels")
    samples = (pcm.astype(np.float32) / 32768.0).reshape(-1, num_channels)
    return AudioBuffer(samples=samples, sample_rate=sample_rate)


@dataclass
class _Source:
    buffer: AudioBuffer
    on_ended: Optional[Callable[[], None]] = None
    position: int = field(default=0)


def _open_output_stream(sample_rate: int, channels: int, callback):
    import sounddevice as sd
    return sd.OutputStream(
        samplerate=sample_rate,
        channels=channels,
        dtype="float32",
        callback=callback,
    )


class AudioContext:
    """One always-open output stream that mixes every scheduled source.

    Sources are summed in the stream callback, so overlapping playbacks
    mix instead of cutting each other off. The callback runs on the
    PortAudio thread; `on_ended` callbacks are invoked from there too.
    """

    def __init__(self, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS,
                 stream_factory=_open_output_stream):
        self.sample_rate = sample_rate
        self.channels = channels
        self._sources: list[_Source] = []
        self._lock = threading.Lock()
        self._stream = stream_factory(sample_rate, channels, self._callback)
        self._stream.start()
        logger.info("Audio output opened: %d Hz, %d channel(s)", sample_rate, channels)

    @property
    def active_sources(self) -> int:
        with self._lock:
            return len(self._sources)

    def play(self, buffer: AudioBuffer, on_ended: Optional[Callable[[], None]] = None) -> None:
        """Start playing `buffer` immediately."""
        if buffer.sample_rate != self.sample_rate or buffer.channels != self.channels:
            raise ValueError(
                f"Buffer is {buffer.sample_rate} Hz/{buffer.channels}ch, "
                f"context is {self.sample_rate} Hz/{self.channels}ch"
            )
        with self._lock:
            self._sources.append(_Source(buffer=buffer, on_ended=on_ended))

    def _callback(self, outdata, frames, time_info, status):
        if status:
            logger.debug("Audio stream status: %s", status)
        outdata.fill(0)
        finished: list[_Source] = []
        with self._lock:
            for source in self._sources:
                chunk = source.buffer.samples[source.position:source.position + frames]
                outdata[:len(chunk)] += chunk
                source.position += len(chunk)
                if source.position >= source.buffer.frames:
                    finished.append(source)
            for source in finished:
                self._sources.remove(source)
        np.clip(outdata, -1.0, 1.0, out=outdata)
        for source in finished:
            if source.on_ended is not None:
                try:
                    source.on_ended()
                except Exception as exc:
                    logger.warning("on_ended callback failed: %s", exc)


# Process-wide output, opened on first playback and kept for the process lifetime
_audio_context: AudioContext | None = None
_audio_context_lock = threading.Lock()


def get_audio_context() -> AudioContext:
    """Return the shared AudioContext (creates one if needed)."""
    global _audio_context
    with _audio_context_lock:
        if _audio_context is None:
            _audio_context = AudioContext(SAMPLE_RATE, CHANNELS)
        return _audio_context


class AudioPlayer:
    """Speak tutor text: synthesize, decode, play. Never raises."""

    def __init__(self, gemini_service, context_provider: Callable[[], AudioContext] = get_audio_context):
        self._gemini = gemini_service
        self._context_provider = context_provider

    async def play_audio(self, text: str) -> bool:
        """Return True when playback was scheduled."""
        try:
            context = self._context_provider()
            base64_audio = await self._gemini.synthesize_speech(strip_markdown(text))
            if not base64_audio:
                return False
            buffer = decode_audio_data(decode_base64(base64_audio), SAMPLE_RATE, CHANNELS)
            context.play(buffer)
            logger.info("Playing %.2fs of tutor audio", buffer.duration)
            return True
        except Exception as exc:
            logger.error("TTS error: %s", exc)
            return False
