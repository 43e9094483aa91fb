"""
nml_resolver — Estruturas canônicas de erro (v1)

Erros de resolução são reportados ao operador (CLI) e registrados nos
StepResults como payloads serializáveis. Cada payload é:

- explícito (código estável, não texto livre)
- serializável
- acionável (hint indica onde corrigir)
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from nml_resolver.core.exceptions import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    ResolutionError,
    SchemaError,
    SourceIOError,
    StrictWarningError,
    ValidationError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro.

    Campos:
    - type: código estável do erro
    - message: mensagem curta e objetiva
    - details: dados estruturados (variável, valor, regra, fonte)
    - hint: ação sugerida ao operador
    - decision_required: resolução bloqueada aguardando escolha explícita do usuário
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo de códigos (v1)
# ---------------------------------------------------------------------------

SCHEMA_ERROR = "SCHEMA_ERROR"
NOT_FOUND = "NOT_FOUND"
CONFLICT = "CONFLICT"
VALIDATION_ERROR = "VALIDATION_ERROR"
CONSISTENCY_ERROR = "CONSISTENCY_ERROR"
SOURCE_IO_ERROR = "SOURCE_IO_ERROR"
STRICT_WARNING = "STRICT_WARNING"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"

_CODES = (
    (SchemaError, SCHEMA_ERROR),
    (NotFoundError, NOT_FOUND),
    (ConflictError, CONFLICT),
    (ValidationError, VALIDATION_ERROR),
    (ConsistencyError, CONSISTENCY_ERROR),
    (SourceIOError, SOURCE_IO_ERROR),
    (StrictWarningError, STRICT_WARNING),
)


def error_code(exc: BaseException) -> str:
    for cls, code in _CODES:
        if isinstance(exc, cls):
            return code
    return ENGINE_EXECUTION_ERROR


def payload_from_exception(exc: BaseException, *, step_id: Optional[str] = None) -> ErrorPayload:
    """Converte uma exceção em ErrorPayload sem expor stack trace.

    Regras:
    - ResolutionError: já vem com message/details/hint.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR.
    """
    if isinstance(exc, ResolutionError):
        details = dict(exc.details or {})
        if step_id is not None:
            details.setdefault("step_id", step_id)
        return ErrorPayload(
            type=error_code(exc),
            message=exc.message,
            details=details,
            hint=exc.hint,
            decision_required=exc.decision_required,
        )

    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante a resolução",
        details={"exception_class": exc.__class__.__name__, "step_id": step_id},
        hint="Verifique os catálogos e a definição do pipeline",
    )
