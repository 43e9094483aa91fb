# src/nml_resolver/core/engine/engine.py
"""
Executor do pipeline de resolução.

- Valida a ordem declarada e executa os Steps nessa ordem.
- Fail-fast obrigatório: a primeira exceção encerra a execução; o Step
  que falhou recebe status FAILED com `payload["error"]` (ErrorPayload),
  e a exceção original fica disponível em `RunResult.error`.
- Warnings registrados no RunContext durante o Step são copiados para o
  StepResult (StepResult é frozen: enriquecimento via `replace`).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from nml_resolver.core.errors import (
    ENGINE_CONFIGURATION_ERROR,
    ErrorPayload,
    payload_from_exception,
)
from nml_resolver.core.pipeline.context import LEVEL_DEBUG, RunContext
from nml_resolver.core.pipeline.step import Step
from nml_resolver.core.pipeline.types import StepKind, StepResult, StepStatus

from .planner import check_declared_order, plan_execution


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução do pipeline."""

    steps: Dict[str, StepResult] = field(default_factory=dict)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class Engine:
    """Planner + executor fail-fast."""

    def __init__(self, *, steps: Sequence[Step], ctx: RunContext):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx

    def _with_ctx_warnings(self, step_id: str, result: StepResult) -> StepResult:
        merged = list(result.warnings or [])
        for msg in self.ctx.warnings.get(step_id, []):
            if msg not in merged:
                merged.append(msg)
        return replace(result, step_id=step_id, warnings=merged)

    def _failed(self, step: Step, error: ErrorPayload) -> StepResult:
        result = StepResult(
            step_id=step.id,
            kind=getattr(step, "kind", StepKind.CHECK) or StepKind.CHECK,
            status=StepStatus.FAILED,
            summary=error.message,
            payload={"error": error.to_dict()},
        )
        return self._with_ctx_warnings(step.id, result)

    def run(self) -> RunResult:
        check_declared_order(self.steps)
        ordered = plan_execution(self.steps)

        results: Dict[str, StepResult] = {}
        for step in ordered:
            sid = step.id
            self.ctx.log(step_id=sid, level=LEVEL_DEBUG, message="step started")

            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    raise TypeError("Step.run(ctx) must return StepResult")
            except TypeError as e:
                if "must return StepResult" not in str(e):
                    results[sid] = self._failed(step, payload_from_exception(e, step_id=sid))
                    return RunResult(steps=results, error=e)
                error = ErrorPayload(
                    type=ENGINE_CONFIGURATION_ERROR,
                    message="Step returned an invalid result type",
                    details={"step_id": sid, "expected": "StepResult"},
                    hint="Make the step return StepResult",
                )
                results[sid] = self._failed(step, error)
                return RunResult(steps=results, error=e)
            except Exception as e:
                results[sid] = self._failed(step, payload_from_exception(e, step_id=sid))
                return RunResult(steps=results, error=e)

            results[sid] = self._with_ctx_warnings(sid, step_result)

        return RunResult(steps=results)
