"""Testes do AudioEngine (interfaces externas do nucleo)."""

from __future__ import annotations

import numpy as np
import pytest
from helpers import SteppingClock, make_noise, make_sine

from harmony._types import EffectKind
from harmony.audio.buffer import SampleBuffer
from harmony.config import AudioProcessingConfig
from harmony.effects.params import AmplificationParams
from harmony.engine import AudioEngine
from harmony.exceptions import (
    BufferTooLargeError,
    InvalidExtensionError,
    InvalidFileSizeError,
    UnsupportedCodecError,
    UnsupportedFormatError,
)


@pytest.fixture
def engine() -> AudioEngine:
    config = AudioProcessingConfig.from_mapping(
        {
            "algorithms": {
                "noise_cancellation": {"enabled": False},
                "echo_cancellation": {"enabled": False},
                "normalization": {"enabled": False},
                "compression": {"enabled": False},
            },
            "performance": {"buffer_size": 2048},
            "analysis": {"waveform_width": 16},
        }
    )
    return AudioEngine.from_config(config, clock=SteppingClock())


class TestFormats:
    def test_is_format_supported(self, engine: AudioEngine) -> None:
        assert engine.is_format_supported("wav") is True
        assert engine.is_format_supported("xyz") is False
        assert engine.is_format_supported("") is False

    def test_describe_format(self, engine: AudioEngine) -> None:
        assert engine.describe_format("ogg") == ("audio/ogg", "ogg")
        with pytest.raises(UnsupportedFormatError):
            engine.describe_format(".xyz")

    def test_check_upload_extension(self, engine: AudioEngine) -> None:
        assert engine.check_upload_extension(".MP3") == ("audio/mpeg", "mp3")
        with pytest.raises(InvalidExtensionError):
            engine.check_upload_extension("   ")
        with pytest.raises(UnsupportedFormatError):
            engine.check_upload_extension("wma")

    def test_list_formats(self, engine: AudioEngine) -> None:
        assert len(engine.list_formats()) == 5


class TestUploadValidation:
    @pytest.fixture
    def small_engine(self) -> AudioEngine:
        config = AudioProcessingConfig.from_mapping({"max_file_size": 1024, "default_codec": "wav"})
        return AudioEngine.from_config(config)

    def test_file_size_within_limit(self, small_engine: AudioEngine) -> None:
        assert small_engine.check_file_size(1) == 1
        assert small_engine.check_file_size(1024) == 1024

    @pytest.mark.parametrize("size", [0, -1, 1025])
    def test_file_size_out_of_range(self, small_engine: AudioEngine, size: int) -> None:
        with pytest.raises(InvalidFileSizeError) as exc_info:
            small_engine.check_file_size(size)
        assert exc_info.value.size == size
        assert exc_info.value.max_size == 1024

    def test_file_size_default_limit(self, engine: AudioEngine) -> None:
        assert engine.check_file_size(104_857_600) == 104_857_600
        with pytest.raises(InvalidFileSizeError):
            engine.check_file_size(104_857_601)

    def test_allowed_codecs_start_with_default(self, small_engine: AudioEngine) -> None:
        assert small_engine.allowed_codecs() == ["wav", "mp3", "ogg", "aac", "flac"]

    def test_check_codec(self, small_engine: AudioEngine) -> None:
        assert small_engine.check_codec("wav") == "wav"
        assert small_engine.check_codec("FLAC") == "flac"

    @pytest.mark.parametrize("codec", ["opus", "", "pcm_s16le"])
    def test_unsupported_codec(self, small_engine: AudioEngine, codec: str) -> None:
        with pytest.raises(UnsupportedCodecError) as exc_info:
            small_engine.check_codec(codec)
        assert exc_info.value.codec == codec


class TestPresets:
    def test_list_quality_presets(self, engine: AudioEngine) -> None:
        presets = engine.list_quality_presets()
        assert list(presets) == ["low", "medium", "high"]
        assert presets["high"].sample_rate == 96000

    def test_get_quality_preset(self, engine: AudioEngine) -> None:
        preset = engine.get_quality_preset("medium")
        assert preset is not None
        assert preset.bitrate == 192000
        assert engine.get_quality_preset("ultra") is None

    def test_list_reverb_presets(self, engine: AudioEngine) -> None:
        assert set(engine.list_reverb_presets()) == {"room", "hall", "plate"}


class TestProcess:
    def test_default_chain_is_identity(self, engine: AudioEngine) -> None:
        buffer = make_noise(length=2048)
        result = engine.process(buffer)
        assert result.output == buffer
        assert len(result.stage_metrics) == 7

    def test_process_with_overrides(self, engine: AudioEngine) -> None:
        buffer = make_sine(amplitude=0.1, length=1024)
        result = engine.process(buffer, [AmplificationParams(enabled=True, gain_db=6.0)])
        amplification = result.stage_metrics[EffectKind.AMPLIFICATION.position]
        assert amplification.enabled is True
        assert float(np.max(np.abs(result.output.samples))) > 0.1

    def test_oversized_buffer_rejected(self, engine: AudioEngine) -> None:
        with pytest.raises(BufferTooLargeError):
            engine.process(SampleBuffer(np.zeros(4096), 16000))


class TestAnalyze:
    def test_uses_configured_width(self, engine: AudioEngine) -> None:
        summary = engine.analyze(make_noise(length=1024))
        assert summary.waveform is not None
        assert len(summary.waveform) == 16

    def test_explicit_width(self, engine: AudioEngine) -> None:
        summary = engine.analyze(make_noise(length=1024), width=8)
        assert summary.waveform is not None
        assert len(summary.waveform) == 8

    def test_analyze_validates_buffer(self, engine: AudioEngine) -> None:
        with pytest.raises(BufferTooLargeError):
            engine.analyze(SampleBuffer(np.zeros(4096), 16000))


class TestStreamingFactories:
    def test_streaming_controller_frame_size(self, engine: AudioEngine) -> None:
        controller = engine.create_streaming_controller("call-42")
        assert controller.stream_id == "call-42"
        assert controller.frame_size == 2048

    def test_stream_pool(self, engine: AudioEngine) -> None:
        with engine.create_stream_pool() as pool:
            pool.open_stream("s")
            result = pool.submit("s", make_noise(length=2048)).result(timeout=10)
        assert result is not None
        assert result.sequence == 0

    def test_invalid_waveform_width(self, engine: AudioEngine) -> None:
        with pytest.raises(ValueError, match="waveform_width"):
            AudioEngine(
                engine.pipeline_config,
                engine.formats,
                AudioProcessingConfig().quality_preset_table(),
                AudioProcessingConfig().reverb_preset_table(),
                waveform_width=0,
            )
