# src/nml_resolver/steps/logic/physics.py
"""
Grupos de física com lógica condicional: neve, forçante atmosférica e
movimento de água no solo.

Os demais grupos (urbano, perfil de raízes, resistência do solo, ...)
só preenchem defaults e são declarados em `steps.pipeline` como
`FillDefaultsStep`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.core.rules import PRECIP_REPARTITION_VARS
from nml_resolver.core.values import value_is_true
from nml_resolver.steps.base import INPUTS_DONE, ResolutionStep

SNOWPACK_VARIABLES = (
    "nlevsno",
    "h2osno_max",
    "int_snow_max",
    "n_melt_glcmec",
    "wind_dependent_snow_density",
    "snow_overburden_compaction_method",
    "lotmp_snowdensity_method",
    "upplim_destruct_metamorph",
    "fresh_snw_rds_max",
    "reset_snow",
    "reset_snow_glc",
    "reset_snow_glc_ela",
)

ADAPTIVE_TIMESTEP_VARIABLES = (
    "dtmin",
    "verysmall",
    "xtolerupper",
    "xtolerlower",
    "expensive",
    "inexpensive",
    "flux_calculation",
)

# soilwater_movement_method: método de passo de tempo adaptativo
ADAPTIVE_TIME_STEPPING = 1


@dataclass
class SnowpackStep(ResolutionStep):
    id: str = "logic.snowpack"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        phys = ctx.flags["phys"]
        for var in SNOWPACK_VARIABLES:
            self.default(ctx, var, phys=phys)

        self.enforce(ctx, "snow.vionnet_forbids_tfactor")
        if ctx.value("snow_overburden_compaction_method") != "Vionnet2012":
            self.default(ctx, "overburden_compress_tfactor", phys=phys)
        return None


@dataclass
class AtmForcingStep(ResolutionStep):
    """Downscaling de onda longa e repartição chuva/neve só com as chaves ligadas."""

    id: str = "logic.atm_forcing"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        phys = ctx.flags["phys"]
        self.default(ctx, "glcmec_downscale_longwave", phys=phys)
        self.default(ctx, "repartition_rain_snow", phys=phys)
        self.default(ctx, "lapse_rate", phys=phys)

        self.enforce(ctx, "atm.longwave_requires_downscale")
        if value_is_true(ctx.value("glcmec_downscale_longwave")):
            self.default(ctx, "lapse_rate_longwave", phys=phys)
            self.default(ctx, "longwave_downscaling_limit", phys=phys)

        self.enforce(ctx, "atm.precip_repartition_requires_flag")
        if value_is_true(ctx.value("repartition_rain_snow")):
            for var in PRECIP_REPARTITION_VARS:
                self.default(ctx, var, phys=phys)
        return None


@dataclass
class SoilwaterMovementStep(ResolutionStep):
    id: str = "logic.soilwater_movement"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["logic.soilstate"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        method = self.default(ctx, "soilwater_movement_method", phys=ctx.flags["phys"])
        self.default(ctx, "upper_boundary_condition", soilwater_movement_method=method)
        self.default(
            ctx,
            "lower_boundary_condition",
            soilwater_movement_method=method,
            use_bedrock=ctx.value("use_bedrock"),
        )
        if method == ADAPTIVE_TIME_STEPPING:
            for var in ADAPTIVE_TIMESTEP_VARIABLES:
                self.default(ctx, var, soilwater_movement_method=method)
        return f"soilwater_movement_method = {method}"
