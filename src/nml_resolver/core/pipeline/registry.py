# src/nml_resolver/core/pipeline/registry.py
"""
Registro estrutural de Steps do pipeline de resolução.

A ordem de registro É a ordem declarada do pipeline: o planner valida
que ela respeita todas as dependências antes de qualquer execução.

Invariantes:
    - Cada Step registrado possui um `step.id` único e não vazio
    - `list()` reflete exatamente a ordem de registro
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .step import Step


class DuplicateStepIdError(ValueError):
    """Dois Steps registrados com o mesmo `step.id`."""


@dataclass
class StepRegistry:
    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def of(cls, steps: Iterable[Step]) -> "StepRegistry":
        registry = cls()
        for step in steps:
            registry.add(step)
        return registry

    def add(self, step: Step) -> None:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")

        if step_id in self._steps:
            raise DuplicateStepIdError(f"Duplicate step id: {step_id}")

        self._steps[step_id] = step
        self._order.append(step_id)

    def get(self, step_id: str) -> Step:
        return self._steps[step_id]

    def list(self) -> List[Step]:
        return [self._steps[sid] for sid in self._order]

    def ids(self) -> List[str]:
        return list(self._order)
