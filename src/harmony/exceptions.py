"""Exceptions tipadas do Harmony.

Hierarquia:
    HarmonyError (base)
    +-- ValidationError
    |   +-- EmptyBufferError
    |   +-- BufferTooLargeError
    |   +-- BufferSizeMismatchError
    |   +-- ChannelLayoutError
    |   +-- NonFiniteSamplesError
    |   +-- InvalidWidthError
    |   +-- InvalidGainError
    |   +-- InvalidExtensionError
    |   +-- UnsupportedFormatError
    |   +-- InvalidFileSizeError
    |   +-- UnsupportedCodecError
    |   +-- UnknownPresetError
    |   +-- ParameterOutOfRangeError
    |   +-- NyquistViolationError
    |   +-- MetadataValidationError
    +-- ConfigError
    |   +-- ConfigParseError
    |   +-- ConfigValidationError
    +-- ProcessingError
    |   +-- StageFailedError
    |   +-- InvalidTransitionError
    +-- ProcessingTimeoutError
    +-- StreamError
        +-- StreamCancelledError
        +-- StreamNotFoundError
"""

from __future__ import annotations


class HarmonyError(Exception):
    """Base para todas as exceptions do Harmony."""


# --- Validacao ---


class ValidationError(HarmonyError):
    """Entrada invalida (buffer, parametro, preset ou formato)."""


class EmptyBufferError(ValidationError):
    """Buffer de audio sem amostras."""

    def __init__(self) -> None:
        super().__init__("Buffer de audio vazio (0 amostras)")


class BufferTooLargeError(ValidationError):
    """Buffer excede o tamanho maximo configurado."""

    def __init__(self, length: int, max_size: int) -> None:
        self.length = length
        self.max_size = max_size
        super().__init__(f"Buffer com {length} amostras excede o maximo de {max_size}")


class BufferSizeMismatchError(ValidationError):
    """Frame de streaming com tamanho diferente do tamanho fixo configurado."""

    def __init__(self, length: int, expected: int) -> None:
        self.length = length
        self.expected = expected
        super().__init__(f"Frame com {length} amostras, esperado exatamente {expected}")


class ChannelLayoutError(ValidationError):
    """Numero de amostras nao e multiplo do numero de canais."""

    def __init__(self, length: int, channels: int) -> None:
        self.length = length
        self.channels = channels
        super().__init__(f"{length} amostras nao formam frames completos de {channels} canais")


class NonFiniteSamplesError(ValidationError):
    """Buffer contem NaN ou infinito."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"Buffer contem {count} amostras nao-finitas (NaN/inf)")


class InvalidWidthError(ValidationError):
    """Largura de waveform invalida para o buffer."""

    def __init__(self, width: int, length: int) -> None:
        self.width = width
        self.length = length
        super().__init__(
            f"Largura de waveform {width} invalida para buffer de {length} amostras "
            f"(esperado 1 <= width <= {length})"
        )


class InvalidGainError(ValidationError):
    """Valor de ganho linear fora do dominio da conversao para dB."""

    def __init__(self, value: float) -> None:
        self.value = value
        super().__init__(f"Ganho linear {value} invalido: deve ser estritamente positivo")


class InvalidExtensionError(ValidationError):
    """Extensao de arquivo vazia ou em branco."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(f"Extensao de arquivo invalida: '{extension}'")


class UnsupportedFormatError(ValidationError):
    """Formato de audio nao registrado."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(f"Formato de audio nao suportado: '{extension}'")


class InvalidFileSizeError(ValidationError):
    """Tamanho de arquivo nao positivo ou acima do limite configurado."""

    def __init__(self, size: int, max_size: int) -> None:
        self.size = size
        self.max_size = max_size
        super().__init__(f"Tamanho de arquivo {size} bytes invalido (limite: 1..{max_size})")


class UnsupportedCodecError(ValidationError):
    """Codec fora do codec default e das extensoes suportadas."""

    def __init__(self, codec: str, allowed: list[str]) -> None:
        self.codec = codec
        self.allowed = allowed
        super().__init__(f"Codec nao suportado: '{codec}' (aceitos: {', '.join(allowed)})")


class UnknownPresetError(ValidationError):
    """Preset nao encontrado na tabela configurada."""

    def __init__(self, table: str, name: str) -> None:
        self.table = table
        self.name = name
        super().__init__(f"Preset '{name}' nao encontrado na tabela '{table}'")


class ParameterOutOfRangeError(ValidationError):
    """Parametro de efeito fora do intervalo permitido."""

    def __init__(self, effect: str, parameter: str, value: object, bound: str) -> None:
        self.effect = effect
        self.parameter = parameter
        self.value = value
        self.bound = bound
        super().__init__(f"Parametro '{parameter}' de '{effect}' = {value!r} viola limite {bound}")


class NyquistViolationError(ValidationError):
    """Frequencia de banda do equalizador >= frequencia de Nyquist."""

    def __init__(self, frequency_hz: float, sample_rate: int) -> None:
        self.frequency_hz = frequency_hz
        self.sample_rate = sample_rate
        self.nyquist_hz = sample_rate / 2
        super().__init__(
            f"Banda de {frequency_hz}Hz nao representavel a {sample_rate}Hz "
            f"(Nyquist = {self.nyquist_hz}Hz)"
        )


class MetadataValidationError(ValidationError):
    """Metadados fornecidos pelo extrator com formato invalido."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Metadados invalidos: {'; '.join(errors)}")


# --- Configuracao ---


class ConfigError(HarmonyError):
    """Erro de configuracao, detectado apenas na construcao."""


class ConfigParseError(ConfigError):
    """Falha ao parsear arquivo de configuracao."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Falha ao parsear configuracao '{path}': {reason}")


class ConfigValidationError(ConfigError):
    """Configuracao malformada (campos faltando, tipos ou limites errados)."""

    def __init__(self, source: str, errors: list[str]) -> None:
        self.source = source
        self.errors = errors
        detail = "; ".join(errors)
        super().__init__(f"Configuracao '{source}' invalida: {detail}")


# --- Processamento ---


class ProcessingError(HarmonyError):
    """Falha durante a execucao do pipeline."""


class StageFailedError(ProcessingError):
    """Stage do pipeline falhou; os stages seguintes nao foram executados."""

    def __init__(
        self,
        stage_index: int,
        stage_name: str,
        cause: BaseException,
        *,
        buffer_length: int,
        buffer_peak: float,
    ) -> None:
        self.stage_index = stage_index
        self.stage_name = stage_name
        self.cause = cause
        self.buffer_length = buffer_length
        self.buffer_peak = buffer_peak
        super().__init__(
            f"Stage {stage_index} '{stage_name}' falhou "
            f"(buffer: {buffer_length} amostras, pico {buffer_peak:.4f}): {cause}"
        )


class InvalidTransitionError(ProcessingError):
    """Transicao de estado invalida na execucao do pipeline."""

    def __init__(self, from_state: str, to_state: str) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Transicao invalida: {from_state} -> {to_state}")


class ProcessingTimeoutError(HarmonyError):
    """Deadline rigido de processamento excedido."""

    def __init__(self, elapsed_ms: float, timeout_ms: float, *, completed_stages: int) -> None:
        self.elapsed_ms = elapsed_ms
        self.timeout_ms = timeout_ms
        self.completed_stages = completed_stages
        super().__init__(
            f"Processamento excedeu {timeout_ms}ms ({elapsed_ms:.1f}ms, "
            f"{completed_stages} stages concluidos)"
        )


# --- Streaming ---


class StreamError(HarmonyError):
    """Erro relacionado a streams em tempo real."""


class StreamCancelledError(StreamError):
    """Operacao em stream ja cancelado."""

    def __init__(self, stream_id: str) -> None:
        self.stream_id = stream_id
        super().__init__(f"Stream '{stream_id}' foi cancelado")


class StreamNotFoundError(StreamError):
    """Stream nao registrado no pool."""

    def __init__(self, stream_id: str) -> None:
        self.stream_id = stream_id
        super().__init__(f"Stream '{stream_id}' nao encontrado")
