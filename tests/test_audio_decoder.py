"""Unit tests for the PCM16 decoder and the WAV re-encoding."""

from __future__ import annotations

import io
import wave

import numpy as np
import pytest

from ecos.services.audio_decoder import DEFAULT_SAMPLE_RATE, DecodedAudio, decode_pcm16


def test_decode_scales_signed_samples():
    audio = decode_pcm16(bytes([0x00, 0x00, 0xFF, 0x7F, 0x00, 0x80]))

    assert audio.channels == 1
    assert audio.frame_count == 3
    assert audio.sample_rate == DEFAULT_SAMPLE_RATE
    np.testing.assert_allclose(audio.channel(0), [0.0, 32767 / 32768.0, -1.0], atol=1e-6)


def test_odd_length_buffer_drops_trailing_byte():
    even = bytes([0x00, 0x40, 0x00, 0xC0])
    odd = even + b"\x7f"

    np.testing.assert_array_equal(decode_pcm16(odd).samples, decode_pcm16(even).samples)


def test_stereo_frames_are_deinterleaved():
    raw = np.array([100, -100, 200, -200, 300, -300], dtype="<i2").tobytes()

    audio = decode_pcm16(raw, sample_rate_hz=48000, channels=2)

    assert audio.samples.shape == (2, 3)
    np.testing.assert_allclose(audio.channel(0), np.array([100, 200, 300]) / 32768.0)
    np.testing.assert_allclose(audio.channel(1), np.array([-100, -200, -300]) / 32768.0)
    assert audio.duration_seconds == pytest.approx(3 / 48000)


def test_partial_stereo_frame_is_dropped():
    raw = np.array([1, 2, 3], dtype="<i2").tobytes()

    audio = decode_pcm16(raw, channels=2)

    assert audio.frame_count == 1


def test_empty_payload_decodes_to_zero_frames():
    audio = decode_pcm16(b"")

    assert audio.frame_count == 0
    assert audio.duration_seconds == 0.0


def test_decoded_buffer_is_read_only():
    audio = decode_pcm16(b"\x00\x10\x00\x20")

    with pytest.raises(ValueError):
        audio.samples[0, 0] = 0.5


@pytest.mark.parametrize("kwargs", [{"channels": 0}, {"sample_rate_hz": 0}])
def test_invalid_layout_is_rejected(kwargs):
    with pytest.raises(ValueError):
        decode_pcm16(b"\x00\x00", **kwargs)


def test_wav_export_preserves_layout():
    raw = np.array([0, 16384, -32768, 32767], dtype="<i2").tobytes()
    audio = decode_pcm16(raw, sample_rate_hz=16000, channels=2)

    with wave.open(io.BytesIO(audio.to_wav_bytes()), "rb") as wav_file:
        assert wav_file.getnchannels() == 2
        assert wav_file.getsampwidth() == 2
        assert wav_file.getframerate() == 16000
        assert wav_file.getnframes() == 2
        frames = np.frombuffer(wav_file.readframes(2), dtype="<i2")

    np.testing.assert_array_equal(frames, [0, 16384, -32768, 32767])


def test_wav_export_reproduces_decoded_pcm_exactly():
    raw = np.array([-32768, -1, 0, 1, 12345, 32767], dtype="<i2").tobytes()

    with wave.open(io.BytesIO(decode_pcm16(raw).to_wav_bytes()), "rb") as wav_file:
        assert wav_file.readframes(6) == raw


def test_wav_export_clips_out_of_range_samples():
    samples = np.array([[1.5, -1.5, 1.0]], dtype=np.float32)
    audio = DecodedAudio(samples=samples, sample_rate=8000)

    with wave.open(io.BytesIO(audio.to_wav_bytes()), "rb") as wav_file:
        frames = np.frombuffer(wav_file.readframes(3), dtype="<i2")

    np.testing.assert_array_equal(frames, [32767, -32768, 32767])
