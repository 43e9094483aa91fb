# src/nml_resolver/steps/base.py
"""
Base comum dos Steps de resolução.

`ResolutionStep` implementa `run(ctx)` em termos de `resolve(ctx)` e
oferece os atalhos que todo Step usa:
    - `default(...)`  → `add_default` com o `step_id` do Step
    - `choose(...)`   → override de linha de comando (conflict-checked),
                        senão valor já no documento, senão default
    - `enforce(...)`  → avalia regras nomeadas da tabela de consistência
    - `info/debug/warn` → eventos estruturados no RunContext

`FillDefaultsStep` cobre os grupos que só preenchem uma lista fixa de
variáveis com atributos derivados das flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from nml_resolver.core.pipeline.context import LEVEL_DEBUG, LEVEL_INFO, RunContext
from nml_resolver.core.pipeline.fill import add_default
from nml_resolver.core.pipeline.step import Step
from nml_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from nml_resolver.core.rules import RuleView, enforce

# Último Step da fase de entradas (fontes + linha de comando + use-case).
INPUTS_DONE = "cmdline.start_type"


class ResolutionStep(Step):
    id: str
    kind: StepKind
    depends_on: List[str]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        """Implementado pelas subclasses; pode devolver um resumo textual."""
        raise NotImplementedError

    def run(self, ctx: RunContext) -> StepResult:
        before = len(ctx.document)
        summary = self.resolve(ctx)
        written = len(ctx.document) - before
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=summary or f"{written} variable(s) set",
            metrics={"variables_set": written},
        )

    # -----------------------------
    # Atalhos
    # -----------------------------
    def default(self, ctx: RunContext, variable: str, **kwargs: Any) -> Any:
        return add_default(ctx, variable, step_id=self.id, **kwargs)

    def choose(
        self,
        ctx: RunContext,
        variable: str,
        *,
        option: Optional[str] = None,
        nofail: bool = False,
        **attributes: Any,
    ) -> Any:
        requested = ctx.option(option or variable)
        if requested is not None:
            return ctx.pin(variable, requested, step_id=self.id)
        return self.default(ctx, variable, nofail=nofail, **attributes)

    def enforce(self, ctx: RunContext, *rule_names: str) -> None:
        enforce(RuleView(ctx.document, ctx.flags, ctx.physics), *rule_names)

    def info(self, ctx: RunContext, message: str) -> None:
        ctx.log(step_id=self.id, level=LEVEL_INFO, message=message)

    def debug(self, ctx: RunContext, message: str) -> None:
        ctx.log(step_id=self.id, level=LEVEL_DEBUG, message=message)

    def warn(self, ctx: RunContext, message: str) -> None:
        ctx.add_warning(step_id=self.id, message=message)


AttributeFn = Callable[[RunContext], Dict[str, Any]]


def phys_only(ctx: RunContext) -> Dict[str, Any]:
    return {"phys": ctx.flags.get("phys")}


@dataclass
class FillDefaultsStep(ResolutionStep):
    """Preenche `variables`, na ordem, com atributos calculados por `attributes(ctx)`."""

    id: str = "logic.fill"
    variables: Tuple[str, ...] = ()
    attributes: AttributeFn = phys_only
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = field(default_factory=lambda: [INPUTS_DONE])

    def resolve(self, ctx: RunContext) -> Optional[str]:
        attrs = self.attributes(ctx)
        for var in self.variables:
            self.default(ctx, var, **attrs)
        return None
