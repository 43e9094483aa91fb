# src/nml_resolver/core/engine/planner.py
"""
Planejador do pipeline de resolução.

O pipeline tem uma ordem DECLARADA (ordem de registro) e dependências
DECLARADAS por Step. O planner valida, antes da execução, que:
    - ids são únicos e não vazios
    - toda dependência existe
    - o grafo é acíclico
    - a ordem declarada respeita todas as dependências

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn) com desempate pela
      ordem de declaração; para uma ordem declarada válida o resultado
      é exatamente a ordem declarada
    - Erros estruturais são `ValueError` e abortam antes de qualquer Step

Limites explícitos:
    - Não executa Steps
    - Não interage com RunContext
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from nml_resolver.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """Step declara dependência de um `step.id` inexistente."""


class CycleDetectedError(ValueError):
    """O grafo de dependências contém um ciclo."""


class OrderViolationError(ValueError):
    """Um Step foi declarado antes de uma de suas dependências."""


def _index_steps(steps: Iterable[Step]) -> Dict[str, Step]:
    by_id: Dict[str, Step] = {}
    for s in steps:
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s
    return by_id


def _dependencies(by_id: Dict[str, Step]) -> Dict[str, List[str]]:
    deps: Dict[str, List[str]] = {}
    for sid, s in by_id.items():
        d = list(getattr(s, "depends_on", []) or [])
        for dep in d:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
        deps[sid] = d
    return deps


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem topológica determinística.

    Sempre que mais de um Step estiver pronto, vence o declarado primeiro.

    Raises:
        ValueError: `id` inválido ou duplicado.
        UnknownDependencyError: Dependência inexistente.
        CycleDetectedError: Ciclo no grafo.
    """
    step_list = list(steps)
    by_id = _index_steps(step_list)
    deps = _dependencies(by_id)
    position = {s.id: i for i, s in enumerate(step_list)}

    incoming_count: Dict[str, int] = {sid: len(d) for sid, d in deps.items()}
    outgoing: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, dlist in deps.items():
        for dep in dlist:
            outgoing[dep].add(sid)

    ready: List[str] = sorted((sid for sid, c in incoming_count.items() if c == 0), key=position.get)
    order_ids: List[str] = []

    while ready:
        sid = ready.pop(0)
        order_ids.append(sid)
        for child in outgoing[sid]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
        ready.sort(key=position.get)

    if len(order_ids) != len(by_id):
        raise CycleDetectedError("Cycle detected in step dependency graph")

    return [by_id[sid] for sid in order_ids]


def check_declared_order(steps: Iterable[Step]) -> List[Step]:
    """
    Garante que a ordem declarada já é uma sequência válida.

    Raises:
        OrderViolationError: Step declarado antes de uma dependência.
        (além dos erros de `plan_execution`)
    """
    step_list = list(steps)
    plan_execution(step_list)

    seen: Set[str] = set()
    for s in step_list:
        for dep in list(getattr(s, "depends_on", []) or []):
            if dep not in seen:
                raise OrderViolationError(
                    f"Step '{s.id}' is declared before its dependency '{dep}'"
                )
        seen.add(s.id)
    return step_list
