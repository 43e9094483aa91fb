# tests/core/engine/test_planner.py
"""
Testes do planner do pipeline de resolução.

Invariantes:
    - Para uma ordem declarada válida, o plano é exatamente essa ordem
    - Dependência inexistente, ciclo, id duplicado ou vazio abortam antes
      de qualquer execução
    - Step declarado antes de uma dependência é OrderViolationError
"""

import pytest

from nml_resolver.core.engine.planner import (
    CycleDetectedError,
    OrderViolationError,
    UnknownDependencyError,
    check_declared_order,
    plan_execution,
)


class DummyStep:
    """Step mínimo via duck typing; nunca é executado pelo planner."""

    def __init__(self, step_id, depends_on=None):
        self.id = step_id
        self.kind = None
        self.depends_on = list(depends_on or [])

    def run(self, ctx):  # pragma: no cover
        raise AssertionError("planner must not run steps")


def _ids(steps):
    return [s.id for s in steps]


def test_valid_declared_order_is_kept():
    steps = [
        DummyStep("source.inline"),
        DummyStep("source.infiles", ["source.inline"]),
        DummyStep("cmdline.physics", ["source.infiles"]),
        DummyStep("cmdline.resolution", ["cmdline.physics"]),
    ]
    assert _ids(plan_execution(steps)) == _ids(steps)
    assert check_declared_order(steps) == steps


def test_ties_are_broken_by_declaration_order():
    steps = [DummyStep("b"), DummyStep("a"), DummyStep("c", ["a", "b"])]
    assert _ids(plan_execution(steps)) == ["b", "a", "c"]


def test_topological_sort_reorders_an_invalid_declaration():
    steps = [DummyStep("c", ["a"]), DummyStep("a")]
    assert _ids(plan_execution(steps)) == ["a", "c"]


def test_declared_order_violation():
    steps = [DummyStep("logic.glacier", ["cmdline.glc_nec"]), DummyStep("cmdline.glc_nec")]
    with pytest.raises(OrderViolationError) as exc:
        check_declared_order(steps)
    assert "logic.glacier" in str(exc.value)


def test_unknown_dependency():
    with pytest.raises(UnknownDependencyError):
        plan_execution([DummyStep("a", ["missing"])])


def test_cycle():
    with pytest.raises(CycleDetectedError):
        plan_execution([DummyStep("a", ["b"]), DummyStep("b", ["a"])])


@pytest.mark.parametrize("ids", [["a", "a"], ["a", ""], ["  "]])
def test_invalid_or_duplicate_ids(ids):
    with pytest.raises(ValueError):
        plan_execution([DummyStep(i) for i in ids])


def test_default_pipeline_declared_order_is_valid():
    from nml_resolver.steps.pipeline import default_pipeline

    steps = default_pipeline()
    assert check_declared_order(steps) == steps
    assert steps[0].id == "source.inline"
    assert steps[-1].id == "check.hydrology_switches"
