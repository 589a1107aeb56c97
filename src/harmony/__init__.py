"""Harmony — nucleo de processamento de sinal de audio.

Pipeline configuravel de efeitos (noise/echo cancellation, ganho,
normalizacao, compressao, reverb, equalizacao), funcoes de analise e
controlador de streaming em tempo real.
"""

from __future__ import annotations

__version__ = "0.1.0"
