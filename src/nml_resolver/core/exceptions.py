"""
nml_resolver — Exceções canônicas de resolução (v1)

Este módulo define as exceções tipadas levantadas pelos catálogos,
pelos Steps de resolução e pelo Validator.

Objetivo:
- Uma falha aborta a resolução inteira (fail-fast) com uma única
  mensagem acionável nomeando variável, valor ou regra
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em regras de domínio

Regras:
- `details` carrega apenas dados serializáveis (nomes, valores, regras)
- A mensagem é curta; a sugestão de correção vai em `hint`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ResolutionError(Exception):
    """Base class para falhas fatais de resolução de namelist.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - `str(exc)` devolve apenas a mensagem
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None
    decision_required: bool = False

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Catálogos / fontes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SchemaError(ResolutionError):
    """Variável não declarada, definição duplicada ou fonte de schema ausente."""


@dataclass(frozen=True)
class NotFoundError(ResolutionError):
    """Nenhum valor resolvível para algo obrigatório (default, grupo, use-case)."""


@dataclass(frozen=True)
class SourceIOError(ResolutionError):
    """Arquivo de entrada obrigatório ausente ou arquivo de saída não gravável."""


# ---------------------------------------------------------------------------
# Valores / regras
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConflictError(ResolutionError):
    """Duas fontes de precedência igual ou superior discordam do valor de uma variável.

    Nenhuma das fontes é descartada automaticamente: o usuário precisa
    escolher qual valor manter.
    """

    decision_required: bool = True


@dataclass(frozen=True)
class ValidationError(ResolutionError):
    """Valor não satisfaz tipo ou conjunto de valores permitidos."""


@dataclass(frozen=True)
class ConsistencyError(ResolutionError):
    """Regra de consistência entre campos violada."""


@dataclass(frozen=True)
class StrictWarningError(ResolutionError):
    """Warning escalado para erro pelo modo estrito."""
