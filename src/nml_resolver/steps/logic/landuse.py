# src/nml_resolver/steps/logic/landuse.py
"""
Variáveis exigidas explicitamente (`clm_demand`) e seleção do dataset
de superfície.

A lista de demanda é a concatenação, nesta ordem, de:
    1. `--clm-demand` da linha de comando
    2. `clm_demand` presente no documento
    3. `clm_demand` do catálogo (por `sim_year_range`)

Cada item recebe `add_default` com os atributos do experimento. É aqui
que um run transiente ganha `flanduse_timeseries`, por isso a seleção
do dataset de superfície depende deste Step.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from nml_resolver.core.exceptions import ValidationError
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.core.rules import BGC_TOGGLES
from nml_resolver.core.values import is_blank, split_list, unquote
from nml_resolver.steps.base import INPUTS_DONE, ResolutionStep


def demand_attributes(ctx: RunContext) -> Dict[str, Any]:
    attrs = {
        "hgrid": ctx.flags["res"],
        "sim_year": ctx.flags["sim_year"],
        "sim_year_range": ctx.flags["sim_year_range"],
        "mask": ctx.flags["mask"],
        "rcp": ctx.flags["rcp"],
        "glc_nec": ctx.flags["glc_nec"],
        "use_cn": ctx.flags["use_cn"],
    }
    for toggle in BGC_TOGGLES:
        attrs[toggle] = ctx.flags[toggle]
    return attrs


@dataclass
class DemandStep(ResolutionStep):
    id: str = "logic.demand"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def demand_list(self, ctx: RunContext) -> List[str]:
        sources = (
            ctx.option("clm_demand"),
            ctx.value("clm_demand"),
            ctx.defaults.get_value("clm_demand", {"sim_year_range": ctx.flags["sim_year_range"]}),
        )
        items: List[str] = []
        for raw in sources:
            if is_blank(raw):
                continue
            for item in split_list(unquote(str(raw))):
                name = unquote(item).strip().lower()
                if name and name != "null" and name not in items:
                    items.append(name)
        return items

    def resolve(self, ctx: RunContext) -> Optional[str]:
        demands = self.demand_list(ctx)
        if "finidat" in demands:
            raise ValidationError(
                message="finidat is NOT allowed in clm_demand; set it in the namelist input instead",
                details={"variable": "clm_demand", "value": "finidat"},
            )
        attrs = demand_attributes(ctx)
        for var in demands:
            self.default(ctx, var, **attrs)
        if demands:
            self.info(ctx, f"Demanded variables: {', '.join(demands)}")
        return f"{len(demands)} demanded variable(s)"


@dataclass
class SurfaceDatasetStep(ResolutionStep):
    id: str = "logic.surface_dataset"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["logic.demand"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        flanduse = ctx.value("flanduse_timeseries")
        dataset = "null" if is_blank(flanduse) else posixpath.basename(str(flanduse))
        ctx.flags.set("flanduse_timeseries", dataset)
        self.enforce(ctx, "landuse.transient_excludes_cndv")

        self.default(
            ctx,
            "fsurdat",
            hgrid=ctx.flags["res"],
            sim_year=ctx.flags["sim_year"],
            glc_nec=ctx.flags["glc_nec"],
        )
        return f"flanduse_timeseries = {dataset}"
