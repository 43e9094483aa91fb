# src/nml_resolver/steps/sources/use_case.py
"""
Fonte de menor precedência entre as do usuário: o use-case nomeado.

O use-case só pode ser resolvido depois que resolução, máscara, ano de
simulação, cenário RCP e modo BGC estão fixados, pois suas entradas
usam esses atributos como predicado.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from nml_resolver.core.defaults.use_cases import check_use_case_name
from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.envmap import expand_document
from nml_resolver.core.exceptions import SourceIOError
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.core.values import is_blank
from nml_resolver.steps.base import ResolutionStep

QUERY_FLAGS = ("res", "mask", "rcp", "sim_year", "sim_year_range", "phys", "use_cn", "use_cndv")


def use_case_query(ctx: RunContext) -> Dict[str, Any]:
    query = {name: ctx.flags.get(name) for name in QUERY_FLAGS}
    query["hgrid"] = ctx.flags.get("res")
    return query


@dataclass
class UseCaseStep(ResolutionStep):
    id: str = "source.use_case"
    kind: StepKind = StepKind.SOURCE
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [
                "cmdline.resolution",
                "cmdline.bgc",
                "cmdline.rcp",
                "cmdline.sim_year",
                "cmdline.co2",
                "cmdline.l_ncpl",
            ]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        name = ctx.option("use_case")
        if is_blank(name):
            return "no use case"
        name = str(name)
        check_use_case_name(name)
        if ctx.use_cases is None:
            raise SourceIOError(
                message="No use-case directory is configured",
                details={"use_case": name},
                hint="Set catalogs.use_case_dir in the settings file",
            )

        use_case = ctx.use_cases.load(name, schema=ctx.schema)
        partial = ConfigDocument()
        for var, raw in use_case.resolve(use_case_query(ctx)).items():
            partial.set(ctx.schema.group_of(var), var, ctx.schema.check_value(var, raw))

        written = ctx.document.merge_from(expand_document(partial, ctx.env))
        for var in written:
            self.debug(ctx, f"adding use_case {name} defaults for var '{var}'")
        self.info(ctx, f"Use case {name}: {use_case.description}")
        return f"{len(written)} variable(s) from use case {name}"
