# src/nml_resolver/steps/checks/hydrology.py
"""
Checagem final das chaves de hidrologia.

Roda por último porque as regras envolvem campos preenchidos por vários
grupos (solo, movimento de água, condição de contorno inferior).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.core.rules import rule_names
from nml_resolver.steps.base import ResolutionStep

HYDROLOGY_RULES = tuple(rule_names("hydrology.", "soilwater."))


@dataclass
class HydrologySwitchesStep(ResolutionStep):
    id: str = "check.hydrology_switches"
    kind: StepKind = StepKind.CHECK
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["logic.soilstate", "logic.soilwater_movement", "logic.canopyhydrology"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        self.enforce(ctx, *HYDROLOGY_RULES)
        return f"{len(HYDROLOGY_RULES)} hydrology rule(s) passed"
