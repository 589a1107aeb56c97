"""Testes de extract_summary, analyze e validacao de metadados."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from helpers import make_noise, make_sine

from harmony.analysis.levels import peak, rms
from harmony.analysis.summary import (
    analyze,
    analyze_preview,
    extract_summary,
    validate_metadata,
)
from harmony.audio.buffer import SampleBuffer
from harmony.exceptions import MetadataValidationError


class TestExtractSummary:
    def test_fields_match_level_functions(self) -> None:
        buffer = make_sine(amplitude=0.5)
        summary = extract_summary(buffer, buffer.sample_rate, buffer.channels)
        assert summary.rms == rms(buffer)
        assert summary.peak == peak(buffer)
        assert summary.length == buffer.length
        assert summary.waveform is None

    def test_duration_counts_frames(self) -> None:
        buffer = SampleBuffer(np.full(88200, 0.1), 44100, channels=2)
        summary = extract_summary(buffer, 44100, 2)
        assert summary.duration_s == pytest.approx(1.0)

    def test_dbfs_fields(self) -> None:
        buffer = SampleBuffer(np.full(100, 0.5), 16000)
        summary = extract_summary(buffer, 16000, 1)
        assert summary.peak_dbfs == pytest.approx(-6.0206, abs=1e-3)
        assert summary.rms_dbfs == pytest.approx(-6.0206, abs=1e-3)

    def test_silence_has_no_dbfs(self) -> None:
        summary = extract_summary(SampleBuffer(np.zeros(100), 16000), 16000, 1)
        assert summary.rms == 0.0
        assert summary.rms_dbfs is None
        assert summary.peak_dbfs is None


class TestAnalyze:
    def test_includes_waveform(self) -> None:
        summary = analyze(make_noise(length=1000), 100)
        assert summary.waveform is not None
        assert len(summary.waveform) == 100

    def test_width_clamped_to_length(self) -> None:
        summary = analyze(SampleBuffer([0.1, -0.2, 0.3], 16000), 1000)
        assert summary.waveform == pytest.approx((0.1, 0.2, 0.3))

    def test_preview_matches_sequential(self) -> None:
        buffer = make_noise(length=2048)
        sequential = analyze(buffer, 64)
        with ThreadPoolExecutor(max_workers=3) as pool:
            parallel = analyze_preview(buffer, 64, pool)
        assert parallel == sequential

    def test_preview_without_executor(self) -> None:
        buffer = make_noise(length=512)
        assert analyze_preview(buffer, 32) == analyze(buffer, 32)


_STREAM_FIELDS = {
    "duration": 180.5,
    "sample_rate": 44100,
    "channels": 2,
    "bitrate": 320000,
    "format": "mp3",
}


class TestValidateMetadata:
    def test_valid_metadata(self) -> None:
        metadata = validate_metadata({"title": "Song", "artist": "Band", "year": 2021, **_STREAM_FIELDS})
        assert metadata.title == "Song"
        assert metadata.year == 2021
        assert metadata.album == ""
        assert metadata.sample_rate == 44100
        assert metadata.format == "mp3"

    def test_unknown_fields_ignored(self) -> None:
        metadata = validate_metadata({"title": "x", "lyrics": "...", **_STREAM_FIELDS})
        assert metadata.title == "x"

    def test_empty_mapping_raises(self) -> None:
        with pytest.raises(MetadataValidationError) as exc_info:
            validate_metadata({})
        fields = {error.split(":")[0] for error in exc_info.value.errors}
        assert fields == {"duration", "sample_rate", "channels", "bitrate", "format"}

    @pytest.mark.parametrize("field", ["duration", "sample_rate", "channels", "bitrate"])
    def test_zero_stream_field_raises(self, field: str) -> None:
        with pytest.raises(MetadataValidationError) as exc_info:
            validate_metadata({**_STREAM_FIELDS, field: 0})
        assert any(error.startswith(field) for error in exc_info.value.errors)

    def test_empty_format_raises(self) -> None:
        with pytest.raises(MetadataValidationError):
            validate_metadata({**_STREAM_FIELDS, "format": ""})

    def test_year_must_be_positive(self) -> None:
        with pytest.raises(MetadataValidationError):
            validate_metadata({**_STREAM_FIELDS, "year": 0})

    def test_negative_duration_raises(self) -> None:
        with pytest.raises(MetadataValidationError) as exc_info:
            validate_metadata({**_STREAM_FIELDS, "duration": -1})
        assert any("duration" in error for error in exc_info.value.errors)

    def test_wrong_type_raises(self) -> None:
        with pytest.raises(MetadataValidationError):
            validate_metadata({**_STREAM_FIELDS, "year": "unknown"})
