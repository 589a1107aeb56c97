"""Testes das exceptions tipadas do Harmony."""

import pytest

from harmony.exceptions import (
    BufferSizeMismatchError,
    BufferTooLargeError,
    ChannelLayoutError,
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    EmptyBufferError,
    HarmonyError,
    InvalidExtensionError,
    InvalidFileSizeError,
    InvalidGainError,
    InvalidTransitionError,
    InvalidWidthError,
    MetadataValidationError,
    NonFiniteSamplesError,
    NyquistViolationError,
    ParameterOutOfRangeError,
    ProcessingError,
    ProcessingTimeoutError,
    StageFailedError,
    StreamCancelledError,
    StreamError,
    StreamNotFoundError,
    UnknownPresetError,
    UnsupportedCodecError,
    UnsupportedFormatError,
    ValidationError,
)


class TestHierarchy:
    def test_all_exceptions_inherit_from_harmony_error(self) -> None:
        exceptions = [
            EmptyBufferError(),
            BufferTooLargeError(5000, 4096),
            BufferSizeMismatchError(100, 128),
            ChannelLayoutError(3, 2),
            NonFiniteSamplesError(1),
            InvalidWidthError(0, 10),
            InvalidGainError(0.0),
            InvalidExtensionError(""),
            UnsupportedFormatError("xyz"),
            InvalidFileSizeError(0, 1024),
            UnsupportedCodecError("opus", ["mp3", "wav"]),
            UnknownPresetError("reverb_presets", "cathedral"),
            ParameterOutOfRangeError("compression", "strength", 1.5, "[0, 1]"),
            NyquistViolationError(10000.0, 16000),
            MetadataValidationError(["year: invalid"]),
            ConfigParseError("f", "r"),
            ConfigValidationError("f", ["e"]),
            StageFailedError(2, "amplification", RuntimeError("x"), buffer_length=8, buffer_peak=0.5),
            InvalidTransitionError("idle", "running"),
            ProcessingTimeoutError(60.0, 50.0, completed_stages=3),
            StreamCancelledError("s"),
            StreamNotFoundError("s"),
        ]
        for exc in exceptions:
            assert isinstance(exc, HarmonyError)

    def test_buffer_and_parameter_errors_are_validation_errors(self) -> None:
        assert isinstance(EmptyBufferError(), ValidationError)
        assert isinstance(BufferTooLargeError(2, 1), ValidationError)
        assert isinstance(NyquistViolationError(9000.0, 16000), ValidationError)
        assert isinstance(UnknownPresetError("t", "n"), ValidationError)

    def test_config_errors_are_config_error(self) -> None:
        assert isinstance(ConfigParseError("f", "r"), ConfigError)
        assert isinstance(ConfigValidationError("f", ["e"]), ConfigError)

    def test_stage_failure_is_processing_error(self) -> None:
        exc = StageFailedError(0, "reverb", ValueError("x"), buffer_length=1, buffer_peak=0.0)
        assert isinstance(exc, ProcessingError)

    def test_timeout_is_not_processing_error(self) -> None:
        """Timeout e categoria propria: o chamador decide se reenvia."""
        exc = ProcessingTimeoutError(60.0, 50.0, completed_stages=1)
        assert not isinstance(exc, ProcessingError)

    def test_stream_errors(self) -> None:
        assert isinstance(StreamCancelledError("s"), StreamError)
        assert isinstance(StreamNotFoundError("s"), StreamError)


class TestExceptionMessages:
    def test_buffer_too_large_has_sizes(self) -> None:
        exc = BufferTooLargeError(5000, 4096)
        assert exc.length == 5000
        assert exc.max_size == 4096
        assert "5000" in str(exc)
        assert "4096" in str(exc)

    def test_nyquist_has_nyquist_frequency(self) -> None:
        exc = NyquistViolationError(12000.0, 16000)
        assert exc.nyquist_hz == 8000.0
        assert "12000" in str(exc)

    def test_stage_failed_carries_context(self) -> None:
        cause = RuntimeError("boom")
        exc = StageFailedError(3, "normalization", cause, buffer_length=1024, buffer_peak=0.25)
        assert exc.stage_index == 3
        assert exc.stage_name == "normalization"
        assert exc.cause is cause
        assert exc.buffer_length == 1024
        assert exc.buffer_peak == 0.25
        assert "boom" in str(exc)

    def test_timeout_has_completed_stages(self) -> None:
        exc = ProcessingTimeoutError(60.0, 50.0, completed_stages=3)
        assert exc.completed_stages == 3
        assert "50.0ms" in str(exc)

    def test_config_validation_lists_errors(self) -> None:
        exc = ConfigValidationError("config.yaml", ["a: required", "b: too big"])
        assert exc.errors == ["a: required", "b: too big"]
        assert "a: required" in str(exc)
        assert "b: too big" in str(exc)

    def test_unknown_preset_names_table(self) -> None:
        exc = UnknownPresetError("reverb_presets", "cathedral")
        assert exc.table == "reverb_presets"
        assert "cathedral" in str(exc)

    def test_catch_all_with_base_class(self) -> None:
        with pytest.raises(HarmonyError):
            raise UnsupportedFormatError("xyz")
