# src/nml_resolver/steps/logic/vegetation.py
"""
Vegetação: alocação de nitrogênio (flexible CN), estresse hídrico,
raízes dinâmicas, arquivo de parâmetros e estado de carbono.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.core.values import value_is_true
from nml_resolver.steps.base import INPUTS_DONE, ResolutionStep

FLEXIBLE_CN_OPTIONS = (
    "mm_nuptake_opt",
    "cnratio_floating",
    "reduce_dayl_factor",
    "vcmax_opt",
    "cn_residual_opt",
    "cn_partition_opt",
    "cn_evergreen_phenology_opt",
    "carbon_resp_opt",
)


@dataclass
class PlantNitrogenAllocStep(ResolutionStep):
    id: str = "logic.plant_nitrogen_alloc"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        if not ctx.flags["use_cn"]:
            ctx.flags.set("use_flexiblecn", value_is_true(ctx.value("use_flexiblecn")))
            self.enforce(ctx, "vegetation.flexiblecn_requires_cn")
            return "CN is off"

        flexible = value_is_true(self.default(ctx, "use_flexiblecn", phys=ctx.flags["phys"], use_cn=True))
        ctx.flags.set("use_flexiblecn", flexible)
        if flexible:
            for var in FLEXIBLE_CN_OPTIONS:
                self.default(ctx, var, use_flexiblecn=True)
        self.enforce(ctx, "vegetation.carbon_resp_opt_with_fun")
        return f"use_flexibleCN = {flexible}"


@dataclass
class HydraulicStressStep(ResolutionStep):
    id: str = "logic.hydrstress"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        use_hydrstress = value_is_true(self.default(ctx, "use_hydrstress", phys=ctx.flags["phys"]))
        ctx.flags.set("use_hydrstress", use_hydrstress)
        return f"use_hydrstress = {use_hydrstress}"


@dataclass
class DynamicRootsStep(ResolutionStep):
    id: str = "logic.dynamic_roots"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["logic.hydrstress"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        self.default(ctx, "use_dynroot", phys=ctx.flags["phys"], bgc_mode=ctx.flags["bgc_mode"])
        self.enforce(ctx, "vegetation.dynroot_requires_bgc", "vegetation.dynroot_hydrstress_exclusive")
        return None


@dataclass
class ParamsFileStep(ResolutionStep):
    id: str = "logic.params_file"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["logic.plant_nitrogen_alloc"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        self.default(
            ctx,
            "paramfile",
            phys=ctx.flags["phys"],
            use_flexiblecn=ctx.flags["use_flexiblecn"],
        )
        return None


@dataclass
class CnVegCarbonStateStep(ResolutionStep):
    id: str = "logic.cnvegcarbonstate"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["logic.plant_nitrogen_alloc"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        if ctx.flags["use_cn"]:
            self.default(
                ctx,
                "initial_vegc",
                use_cn=True,
                mm_nuptake_opt=ctx.value("mm_nuptake_opt"),
            )
        return None


@dataclass
class BgcSharedStep(ResolutionStep):
    id: str = "logic.bgc_shared"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        if ctx.flags["bgc_mode"] != "sp":
            self.default(ctx, "constrain_stress_deciduous_onset", phys=ctx.flags["phys"])
        return None
