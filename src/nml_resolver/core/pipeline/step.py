# src/nml_resolver/core/pipeline/step.py
"""
Contrato canônico de Step de resolução.

Um Step é a menor unidade do pipeline: lê flags e documento do
RunContext, consulta catálogos, preenche variáveis ainda não definidas,
atualiza flags e avalia regras locais que podem abortar a resolução.

Invariantes:
    - Determinístico dado documento + flags
    - Idempotente: rodar duas vezes sem mudança intermediária não muta nada
    - Nunca sobrescreve variável já definida (só preenche ou valida)
    - Declara explicitamente os Steps de que depende
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Interface mínima de um Step, verificada por duck typing.

    Atributos obrigatórios:
        - id: identificador único e estável (ex.: `logic.glacier`)
        - kind: classificação semântica (`StepKind`)
        - depends_on: ids dos Steps que precisam rodar antes
    """
    id: str
    kind: StepKind
    depends_on: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa a etapa uma única vez usando exclusivamente o RunContext."""
        ...
