"""Fixtures compartilhadas para todos os testes."""

from __future__ import annotations

import pytest
from helpers import SteppingClock, make_noise, make_sine

from harmony._types import ReverbPreset
from harmony.audio.buffer import SampleBuffer
from harmony.formats.registry import PresetTable


@pytest.fixture
def reverb_presets() -> PresetTable[ReverbPreset]:
    """Tabela de presets de reverb com os valores default da configuracao."""
    return PresetTable(
        "reverb_presets",
        {
            "room": ReverbPreset(room_size=0.5, damping=0.5, wet_level=0.33, dry_level=0.67),
            "hall": ReverbPreset(room_size=0.8, damping=0.3, wet_level=0.4, dry_level=0.6),
        },
    )


@pytest.fixture
def sine_buffer() -> SampleBuffer:
    """Senoide 440Hz mono, amplitude 0.5, FRAME_SIZE amostras."""
    return make_sine()


@pytest.fixture
def noise_buffer() -> SampleBuffer:
    """Ruido branco mono, FRAME_SIZE amostras."""
    return make_noise()


@pytest.fixture
def stepping_clock() -> SteppingClock:
    return SteppingClock(step=0.0)
