"""Testes de rms, peak, variance e conversoes dB."""

from __future__ import annotations

import math

import numpy as np
import pytest
from helpers import make_sine

from harmony.analysis.levels import (
    decibel_to_linear,
    linear_to_decibel,
    peak,
    rms,
    variance,
)
from harmony.audio.buffer import SampleBuffer
from harmony.exceptions import EmptyBufferError, InvalidGainError


class TestRms:
    def test_silence_is_exactly_zero(self) -> None:
        assert rms(SampleBuffer(np.zeros(512), 16000)) == 0.0

    def test_constant_signal(self) -> None:
        assert rms([0.5, -0.5, 0.5, -0.5]) == pytest.approx(0.5)

    @pytest.mark.parametrize("amplitude", [0.001, 0.25, 1.0, 3.0])
    def test_alternating_uniform_amplitude(self, amplitude: float) -> None:
        samples = amplitude * np.tile([1.0, -1.0], 50)
        assert rms(samples) == pytest.approx(amplitude)

    def test_zeros_list(self) -> None:
        assert rms([0, 0, 0, 0]) == 0.0

    def test_sine_rms_is_amplitude_over_sqrt2(self) -> None:
        buffer = make_sine(frequency=500.0, amplitude=0.8, length=16000)
        assert rms(buffer) == pytest.approx(0.8 / math.sqrt(2), rel=1e-3)

    def test_empty_raises(self) -> None:
        with pytest.raises(EmptyBufferError):
            rms([])


class TestPeak:
    def test_peak_uses_absolute_value(self) -> None:
        assert peak([0.1, -0.9, 0.5]) == pytest.approx(0.9)

    def test_peak_bounds_rms(self) -> None:
        buffer = make_sine(amplitude=0.3)
        assert 0.0 <= rms(buffer) <= peak(buffer)

    def test_empty_raises(self) -> None:
        with pytest.raises(EmptyBufferError):
            peak(SampleBuffer([], 16000))


class TestVariance:
    def test_population_variance(self) -> None:
        assert variance([1.0, -1.0, 1.0, -1.0]) == pytest.approx(1.0)

    def test_constant_has_zero_variance(self) -> None:
        assert variance([0.25] * 10) == pytest.approx(0.0)

    def test_uses_signed_values(self) -> None:
        # |x| seria constante; com sinal a media e 0 e a variancia 0.25
        assert variance([0.5, -0.5]) == pytest.approx(0.25)


class TestDecibelConversion:
    def test_zero_db_is_unity(self) -> None:
        assert decibel_to_linear(0.0) == 1.0

    def test_twenty_db_is_ten(self) -> None:
        assert decibel_to_linear(20.0) == pytest.approx(10.0)

    def test_minus_six_db(self) -> None:
        assert decibel_to_linear(-6.0) == pytest.approx(0.501187, rel=1e-5)

    @pytest.mark.parametrize("db", [-60.0, -20.0, -3.0, 0.0, 6.0, 20.0])
    def test_roundtrip(self, db: float) -> None:
        assert linear_to_decibel(decibel_to_linear(db)) == pytest.approx(db, abs=1e-9)

    def test_unity_is_zero_db(self) -> None:
        assert linear_to_decibel(1.0) == 0.0

    @pytest.mark.parametrize("value", [0.0, -0.5, float("nan")])
    def test_non_positive_raises(self, value: float) -> None:
        with pytest.raises(InvalidGainError):
            linear_to_decibel(value)
