"""Geradores de sinal e relogio fake compartilhados pelos testes."""

from __future__ import annotations

import numpy as np

from harmony.audio.buffer import SampleBuffer

SAMPLE_RATE = 16000
FRAME_SIZE = 1024


class SteppingClock:
    """Relogio fake: cada chamada avanca `step` segundos."""

    def __init__(self, step: float = 0.0, start: float = 0.0) -> None:
        self.step = step
        self.now = start
        self.calls = 0

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        self.calls += 1
        return value


def make_sine(
    frequency: float = 440.0,
    amplitude: float = 0.5,
    length: int = FRAME_SIZE,
    sample_rate: int = SAMPLE_RATE,
) -> SampleBuffer:
    """Senoide mono."""
    t = np.arange(length) / sample_rate
    return SampleBuffer(amplitude * np.sin(2 * np.pi * frequency * t), sample_rate)


def make_noise(
    amplitude: float = 0.1,
    length: int = FRAME_SIZE,
    sample_rate: int = SAMPLE_RATE,
    channels: int = 1,
    seed: int = 1234,
) -> SampleBuffer:
    """Ruido branco deterministico (seed fixa)."""
    rng = np.random.default_rng(seed)
    return SampleBuffer(amplitude * rng.standard_normal(length), sample_rate, channels)
