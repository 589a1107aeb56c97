"""Registry de formatos de audio e tabelas de presets.

Ambos sao carregados uma vez a partir da configuracao e nunca mutados
depois: podem ser compartilhados entre threads sem lock.

Lookups por chave retornam None para entradas ausentes (resultado
normal); apenas describe_format e require_extension levantam erro.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Generic, TypeVar

from harmony.exceptions import (
    ConfigValidationError,
    InvalidExtensionError,
    UnknownPresetError,
    UnsupportedFormatError,
)
from harmony.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from harmony._types import FormatDescriptor

logger = get_logger("formats.registry")

T = TypeVar("T")


def normalize_extension(extension: str) -> str:
    """Normaliza extensao para chave de lookup: sem espacos, sem ponto inicial, minuscula."""
    return extension.strip().lstrip(".").lower()


class FormatRegistry:
    """Conjunto imutavel e ordenado de formatos suportados.

    A extensao (case-insensitive, ponto inicial ignorado) e a chave unica.

    Args:
        formats: Descritores na ordem da configuracao.

    Raises:
        ConfigValidationError: Extensao vazia ou duplicada.
    """

    def __init__(self, formats: Iterable[FormatDescriptor]) -> None:
        entries: dict[str, FormatDescriptor] = {}
        errors: list[str] = []
        for descriptor in formats:
            key = normalize_extension(descriptor.extension)
            if not key:
                errors.append(f"extensao vazia para mime '{descriptor.mime_type}'")
                continue
            if key in entries:
                errors.append(f"extensao duplicada '{key}'")
                continue
            entries[key] = descriptor

        if errors:
            raise ConfigValidationError("supported_formats", errors)

        self._entries: Mapping[str, FormatDescriptor] = MappingProxyType(entries)
        logger.debug("format_registry_loaded", formats_count=len(entries))

    def __len__(self) -> int:
        return len(self._entries)

    def lookup_format(self, extension: str) -> FormatDescriptor | None:
        """Retorna o descritor da extensao, ou None se nao registrada."""
        return self._entries.get(normalize_extension(extension))

    def is_format_supported(self, extension: str) -> bool:
        """Funcao total: extensao vazia ou em branco e simplesmente nao suportada."""
        key = normalize_extension(extension)
        return bool(key) and key in self._entries

    def describe_format(self, extension: str) -> tuple[str, str]:
        """Retorna (mime_type, codec) do formato.

        O codec cai para a propria extensao quando a configuracao nao
        declara um.

        Raises:
            UnsupportedFormatError: Extensao nao registrada.
        """
        descriptor = self.lookup_format(extension)
        if descriptor is None:
            raise UnsupportedFormatError(extension)
        codec = descriptor.codec or normalize_extension(descriptor.extension)
        return descriptor.mime_type, codec

    def require_extension(self, extension: str) -> str:
        """Guarda de fronteira do caminho de request.

        Rejeita extensao vazia/em branco antes do lookup, mantendo o
        lookup em si puro e total.

        Returns:
            Extensao normalizada.

        Raises:
            InvalidExtensionError: Extensao vazia ou em branco.
        """
        key = normalize_extension(extension)
        if not key:
            raise InvalidExtensionError(extension)
        return key

    def list_formats(self) -> list[FormatDescriptor]:
        """Todos os formatos, na ordem da configuracao."""
        return list(self._entries.values())

    def check_stream_info(
        self,
        extension: str,
        *,
        sample_rate: int | None = None,
        channels: int | None = None,
        bitrate: int | None = None,
    ) -> list[str]:
        """Compara metadados de codec fornecidos pelo extrator com o descritor.

        Campos que o descritor nao declara nao sao comparados. O descritor
        declara valores maximos (ex: flac ate 96kHz).

        Returns:
            Lista de divergencias legiveis; vazia quando compativel.

        Raises:
            UnsupportedFormatError: Extensao nao registrada.
        """
        descriptor = self.lookup_format(extension)
        if descriptor is None:
            raise UnsupportedFormatError(extension)

        mismatches: list[str] = []
        checks = (
            ("sample_rate", sample_rate, descriptor.sample_rate),
            ("channels", channels, descriptor.channels),
            ("bitrate", bitrate, descriptor.bitrate),
        )
        for field_name, actual, declared in checks:
            if actual is None or declared is None:
                continue
            if actual > declared:
                mismatches.append(
                    f"{field_name}={actual} excede {declared} declarado para "
                    f"'{normalize_extension(descriptor.extension)}'"
                )
        return mismatches


class PresetTable(Generic[T]):
    """Tabela somente-leitura de presets nomeados (qualidade, reverb).

    Args:
        table_name: Nome da tabela, usado nas mensagens de erro.
        presets: Mapeamento nome -> preset.
    """

    def __init__(self, table_name: str, presets: Mapping[str, T]) -> None:
        self._table_name = table_name
        self._presets: Mapping[str, T] = MappingProxyType(dict(presets))

    @property
    def table_name(self) -> str:
        return self._table_name

    def __len__(self) -> int:
        return len(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._presets

    def get(self, name: str) -> T | None:
        """Retorna o preset pelo nome, ou None se nao existe."""
        return self._presets.get(name)

    def require(self, name: str) -> T:
        """Retorna o preset pelo nome.

        Raises:
            UnknownPresetError: Preset nao existe na tabela.
        """
        preset = self._presets.get(name)
        if preset is None:
            raise UnknownPresetError(self._table_name, name)
        return preset

    def names(self) -> list[str]:
        return list(self._presets)

    def items(self) -> list[tuple[str, T]]:
        return list(self._presets.items())
