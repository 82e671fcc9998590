"""Decode raw 16-bit PCM payloads returned by the speech service."""

from __future__ import annotations

import io
import wave
from dataclasses import dataclass

import numpy as np

DEFAULT_SAMPLE_RATE = 24000
_PCM16_SCALE = 32768.0


@dataclass(frozen=True)
class DecodedAudio:
    """Immutable float sample buffer shaped ``(channels, frames)``."""

    samples: np.ndarray
    sample_rate: int

    @property
    def channels(self) -> int:
        return int(self.samples.shape[0])

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / float(self.sample_rate)

    def channel(self, index: int) -> np.ndarray:
        """Return the (read-only) samples of one channel."""

        return self.samples[index]

    def to_wav_bytes(self) -> bytes:
        """Re-encode the buffer as a 16-bit WAV container for playback."""

        # Exact inverse of decode_pcm16 for every decoded sample.
        scaled = np.round(self.samples.astype(np.float64) * _PCM16_SCALE)
        pcm16 = np.clip(scaled, -32768, 32767).astype("<i2")
        # WAV frames are interleaved by channel.
        interleaved = np.ascontiguousarray(pcm16.T)
        with io.BytesIO() as buffer:
            with wave.open(buffer, "wb") as wave_file:
                wave_file.setnchannels(self.channels)
                wave_file.setsampwidth(2)
                wave_file.setframerate(self.sample_rate)
                wave_file.writeframes(interleaved.tobytes())
            return buffer.getvalue()


def decode_pcm16(
    data: bytes,
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE,
    channels: int = 1,
) -> DecodedAudio:
    """Convert signed 16-bit little-endian PCM into samples in [-1.0, 1.0).

    A trailing partial frame is dropped rather than treated as an error.
    """

    if channels < 1:
        raise ValueError(f"channels must be >= 1, got {channels}")
    if sample_rate_hz < 1:
        raise ValueError(f"sample_rate_hz must be >= 1, got {sample_rate_hz}")

    frame_width = 2 * channels
    usable = len(data) - (len(data) % frame_width)
    pcm = np.frombuffer(data[:usable], dtype="<i2")
    audio = pcm.astype(np.float32) / _PCM16_SCALE
    samples = audio.reshape(-1, channels).T.copy()
    samples.setflags(write=False)
    return DecodedAudio(samples=samples, sample_rate=sample_rate_hz)


__all__ = ["DecodedAudio", "DEFAULT_SAMPLE_RATE", "decode_pcm16"]
