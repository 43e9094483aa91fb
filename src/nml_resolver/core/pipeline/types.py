# src/nml_resolver/core/pipeline/types.py
"""
Tipos canônicos do pipeline de resolução.

Componentes principais:
    - StepStatus → estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → classificação semântica de Steps de resolução
    - StepResult → resultado imutável produzido por um Step

Invariantes:
    - Enums possuem valores textuais estáveis (serializáveis em JSON)
    - StepResult nunca é alterado após criado
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps de resolução.

    Tipos definidos:
        - SOURCE: mescla uma fonte externa (inline, arquivos, use-case)
        - OPTION: aplica um override de linha de comando e deriva flags
        - DEFAULT: preenche lacunas a partir do DefaultsCatalog
        - CHECK: apenas avalia regras de consistência

    Decisões arquiteturais:
        - O tipo é puramente informativo; o Engine não decide nada com ele
    """
    SOURCE = "source"
    OPTION = "option"
    DEFAULT = "default"
    CHECK = "check"


class StepStatus(str, Enum):
    """Estados finais possíveis da execução de um Step."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final
        - summary: resumo textual
        - metrics: contagens (ex.: variáveis escritas)
        - warnings: avisos não fatais emitidos pelo Step
        - artifacts: referências a arquivos lidos (ex.: use-case carregado)
        - payload: dados livres; em falha contém `error` (ErrorPayload.to_dict())
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, str] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)
