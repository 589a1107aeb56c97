"""Testes do SampleBuffer e da validacao de forma."""

from __future__ import annotations

import numpy as np
import pytest

from harmony.audio.buffer import SampleBuffer, validate_buffer
from harmony.exceptions import (
    BufferTooLargeError,
    ChannelLayoutError,
    EmptyBufferError,
    NonFiniteSamplesError,
)


class TestSampleBuffer:
    def test_samples_are_float64_copy(self) -> None:
        source = np.array([0.1, 0.2, 0.3], dtype=np.float32)
        buffer = SampleBuffer(source, 16000)
        assert buffer.samples.dtype == np.float64
        source[0] = 0.9
        assert buffer.samples[0] == pytest.approx(0.1)

    def test_samples_are_read_only(self) -> None:
        buffer = SampleBuffer([0.1, 0.2], 16000)
        with pytest.raises(ValueError):
            buffer.samples[0] = 1.0

    def test_length_frames_duration(self) -> None:
        buffer = SampleBuffer(np.zeros(48000), 24000, channels=2)
        assert buffer.length == 48000
        assert len(buffer) == 48000
        assert buffer.frames == 24000
        assert buffer.duration_s == pytest.approx(1.0)

    def test_channel_view_deinterleaves(self) -> None:
        buffer = SampleBuffer([1.0, -1.0, 2.0, -2.0], 8000, channels=2)
        view = buffer.channel_view()
        assert view.shape == (2, 2)
        np.testing.assert_array_equal(view[:, 0], [1.0, 2.0])
        np.testing.assert_array_equal(view[:, 1], [-1.0, -2.0])

    def test_with_samples_keeps_metadata(self) -> None:
        buffer = SampleBuffer([0.1, 0.2], 22050, channels=2)
        other = buffer.with_samples([0.5, 0.6])
        assert other.sample_rate == 22050
        assert other.channels == 2
        np.testing.assert_array_equal(other.samples, [0.5, 0.6])

    def test_copy_is_equal(self) -> None:
        buffer = SampleBuffer([0.1, -0.2, 0.3], 16000)
        assert buffer.copy() == buffer

    def test_equality_checks_metadata(self) -> None:
        assert SampleBuffer([0.1], 16000) != SampleBuffer([0.1], 8000)
        assert SampleBuffer([0.1, 0.1], 16000) != SampleBuffer([0.1, 0.1], 16000, channels=2)

    def test_invalid_sample_rate_raises(self) -> None:
        with pytest.raises(ValueError, match="sample_rate"):
            SampleBuffer([0.1], 0)

    def test_invalid_channels_raises(self) -> None:
        with pytest.raises(ValueError, match="channels"):
            SampleBuffer([0.1], 16000, channels=0)

    def test_from_samples_defaults(self) -> None:
        buffer = SampleBuffer.from_samples([0.0, 0.5])
        assert buffer.sample_rate == 44100
        assert buffer.channels == 1


class TestValidateBuffer:
    def test_valid_buffer_passes(self) -> None:
        validate_buffer(SampleBuffer(np.zeros(4096), 16000), 4096)

    def test_empty_buffer_raises(self) -> None:
        with pytest.raises(EmptyBufferError):
            validate_buffer(SampleBuffer([], 16000), 4096)

    def test_oversized_buffer_raises_never_truncates(self) -> None:
        buffer = SampleBuffer(np.zeros(5000), 16000)
        with pytest.raises(BufferTooLargeError) as exc_info:
            validate_buffer(buffer, 4096)
        assert exc_info.value.length == 5000
        assert buffer.length == 5000

    def test_partial_frame_raises(self) -> None:
        with pytest.raises(ChannelLayoutError):
            validate_buffer(SampleBuffer(np.zeros(5), 16000, channels=2), 4096)

    def test_nan_raises(self) -> None:
        with pytest.raises(NonFiniteSamplesError) as exc_info:
            validate_buffer(SampleBuffer([0.1, float("nan"), float("inf")], 16000), 4096)
        assert exc_info.value.count == 2

    def test_out_of_range_samples_are_accepted(self) -> None:
        """[-1, 1] e convencao, nao invariante: amostras acima de 1 sao validas."""
        validate_buffer(SampleBuffer([1.5, -2.0], 16000), 4096)
