"""
Tests for benoit.services.audio_service module.

Verifies:
- Base64 + 16-bit PCM decoding and normalization
- Quantization bound on an encode/decode trip
- Malformed payloads are rejected by the decoder
- AudioContext mixes overlapping sources and reports when they end
- The shared output context is opened once and reused
- AudioPlayer.play_audio never raises and only plays real audio
"""

import binascii

import numpy as np
import pytest

from benoit.services import audio_service
from benoit.services.audio_service import (
    CHANNELS,
    SAMPLE_RATE,
    AudioBuffer,
    AudioContext,
    AudioPlayer,
    decode_audio_data,
    decode_base64,
    get_audio_context,
    strip_markdown,
)
from benoit.tests.fakes import FakeGeminiService, FakeStream, pcm16_base64


class TestStripMarkdown:
    """Tests for markdown punctuation removal before synthesis."""

    def test_removes_markdown_chars(self):
        text = "Salut ! **Saudações** [lien](url) #titre _x_"
        assert strip_markdown(text) == "Salut ! Saudações lienurl titre x"

    def test_plain_text_unchanged(self):
        assert strip_markdown("Bonjour, ça va ?") == "Bonjour, ça va ?"


class TestDecoding:
    """Tests for base64 and PCM decoding."""

    def test_known_samples(self):
        raw = np.array([0, 16384, -32768, 32767], dtype="<i2").tobytes()
        buffer = decode_audio_data(raw, SAMPLE_RATE, CHANNELS)
        assert buffer.samples.dtype == np.float32
        assert buffer.samples[:, 0].tolist() == [0.0, 0.5, -1.0, 32767 / 32768.0]
        assert buffer.sample_rate == SAMPLE_RATE
        assert buffer.channels == 1

    def test_round_trip_is_quantization_bounded(self):
        """Decoded samples stay within 1/32768 of the originals."""
        original = np.linspace(-1.0, 0.999, 1000)
        buffer = decode_audio_data(decode_base64(pcm16_base64(original)), SAMPLE_RATE, CHANNELS)
        assert np.max(np.abs(buffer.samples[:, 0] - original)) <= 1 / 32768.0

    def test_interleaved_stereo(self):
        raw = np.array([100, -100, 200, -200], dtype="<i2").tobytes()
        buffer = decode_audio_data(raw, 48000, 2)
        assert buffer.samples.shape == (2, 2)
        assert buffer.frames == 2
        assert buffer.samples[1, 1] == pytest.approx(-200 / 32768.0)

    def test_duration(self):
        buffer = decode_audio_data(b"\x00\x00" * SAMPLE_RATE, SAMPLE_RATE, CHANNELS)
        assert buffer.duration == pytest.approx(1.0)

    def test_odd_length_rejected(self):
        with pytest.raises(ValueError):
            decode_audio_data(b"\x00\x00\x00", SAMPLE_RATE, CHANNELS)

    def test_channel_mismatch_rejected(self):
        with pytest.raises(ValueError):
            decode_audio_data(b"\x00\x00" * 3, SAMPLE_RATE, 2)

    def test_invalid_base64_rejected(self):
        with pytest.raises(binascii.Error):
            decode_base64("not base64 !!")


class TestAudioContext:
    """Tests for the mixing output context."""

    @pytest.fixture
    def context(self):
        return AudioContext(SAMPLE_RATE, CHANNELS, stream_factory=FakeStream)

    def _buffer(self, values):
        return AudioBuffer(samples=np.array(values, dtype=np.float32).reshape(-1, 1), sample_rate=SAMPLE_RATE)

    def test_stream_started_on_creation(self, context):
        assert context._stream.started is True

    def test_silence_without_sources(self, context):
        out = np.ones((4, 1), dtype=np.float32)
        context._callback(out, 4, None, None)
        assert out.tolist() == [[0.0]] * 4

    def test_overlapping_sources_mix(self, context):
        context.play(self._buffer([0.25, 0.25]))
        context.play(self._buffer([0.5, 0.5, 0.5]))
        out = np.zeros((4, 1), dtype=np.float32)
        context._callback(out, 4, None, None)
        assert out[:, 0].tolist() == [0.75, 0.75, 0.5, 0.0]
        assert context.active_sources == 0

    def test_mix_is_clipped(self, context):
        context.play(self._buffer([0.9]))
        context.play(self._buffer([0.9]))
        out = np.zeros((1, 1), dtype=np.float32)
        context._callback(out, 1, None, None)
        assert out[0, 0] == 1.0

    def test_source_spans_callbacks_and_fires_on_ended(self, context):
        ended = []
        context.play(self._buffer([0.1, 0.2, 0.3]), on_ended=lambda: ended.append(True))
        out = np.zeros((2, 1), dtype=np.float32)
        context._callback(out, 2, None, None)
        assert ended == []
        assert context.active_sources == 1
        context._callback(out, 2, None, None)
        assert out[0, 0] == pytest.approx(0.3)
        assert ended == [True]

    def test_rejects_mismatched_buffer(self, context):
        wrong = AudioBuffer(samples=np.zeros((2, 1), dtype=np.float32), sample_rate=44100)
        with pytest.raises(ValueError):
            context.play(wrong)

    def test_shared_context_is_created_once(self, monkeypatch):
        """get_audio_context opens one 24 kHz mono output and reuses it."""
        created = []

        class RecordingContext(AudioContext):
            def __init__(self, sample_rate, channels):
                super().__init__(sample_rate, channels, stream_factory=FakeStream)
                created.append(self)

        monkeypatch.setattr(audio_service, "AudioContext", RecordingContext)
        monkeypatch.setattr(audio_service, "_audio_context", None)

        first = get_audio_context()
        second = get_audio_context()

        assert first is second
        assert len(created) == 1
        assert first.sample_rate == 24000
        assert first.channels == 1


class TestAudioPlayer:
    """Tests for the best-effort playback pipeline."""

    @pytest.mark.asyncio
    async def test_absent_audio_is_noop(self, fake_audio_context):
        """No payload → completes without scheduling playback."""
        gemini = FakeGeminiService(audio=None)
        player = AudioPlayer(gemini, context_provider=lambda: fake_audio_context)
        assert await player.play_audio("Bonjour") is False
        assert fake_audio_context.played == []

    @pytest.mark.asyncio
    async def test_plays_decoded_audio(self, fake_audio_context):
        gemini = FakeGeminiService(audio=pcm16_base64([0.0, 0.5, -0.5]))
        player = AudioPlayer(gemini, context_provider=lambda: fake_audio_context)
        assert await player.play_audio("Bonjour") is True
        (buffer,) = fake_audio_context.played
        assert buffer.samples[:, 0].tolist() == [0.0, 0.5, -0.5]

    @pytest.mark.asyncio
    async def test_strips_markdown_before_synthesis(self, fake_audio_context):
        gemini = FakeGeminiService(audio=None)
        player = AudioPlayer(gemini, context_provider=lambda: fake_audio_context)
        await player.play_audio("lição: **No Restaurante**")
        assert gemini.speech_calls == ["lição: No Restaurante"]

    @pytest.mark.asyncio
    async def test_backend_error_is_swallowed(self, fake_audio_context):
        gemini = FakeGeminiService(audio=ConnectionError("offline"))
        player = AudioPlayer(gemini, context_provider=lambda: fake_audio_context)
        assert await player.play_audio("Bonjour") is False
        assert fake_audio_context.played == []

    @pytest.mark.asyncio
    async def test_malformed_payload_is_swallowed(self, fake_audio_context):
        gemini = FakeGeminiService(audio="%%% not audio %%%")
        player = AudioPlayer(gemini, context_provider=lambda: fake_audio_context)
        assert await player.play_audio("Bonjour") is False

    @pytest.mark.asyncio
    async def test_odd_pcm_length_is_swallowed(self, fake_audio_context):
        gemini = FakeGeminiService(audio="AAAA")  # 3 bytes
        player = AudioPlayer(gemini, context_provider=lambda: fake_audio_context)
        assert await player.play_audio("Bonjour") is False

    @pytest.mark.asyncio
    async def test_unavailable_output_is_swallowed(self):
        def no_device():
            raise OSError("PortAudio library not found")

        player = AudioPlayer(FakeGeminiService(audio=pcm16_base64([0.1])), context_provider=no_device)
        assert await player.play_audio("Bonjour") is False
