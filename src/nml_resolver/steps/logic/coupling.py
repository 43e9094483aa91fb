# src/nml_resolver/steps/logic/coupling.py
"""
Acoplamento com o driver: fração de terra, CO2, tipo de início efetivo
e passo de tempo.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from nml_resolver.core.envmap import expand_text
from nml_resolver.core.exceptions import ConflictError, ConsistencyError, NotFoundError
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.steps.base import INPUTS_DONE, ResolutionStep

# override_nsrest → tipo de início efetivo
NSREST_START_TYPES = {0: "startup", 1: "continue", 3: "branch"}


@dataclass
class LandFractionStep(ResolutionStep):
    id: str = "logic.lnd_frac"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        lnd_frac = ctx.option("lnd_frac")
        if lnd_frac is not None:
            if ctx.is_set("fatmlndfrc"):
                raise ConflictError(
                    message="Can NOT set both --lnd-frac option AND fatmlndfrc variable",
                    details={"variable": "fatmlndfrc", "current": ctx.value("fatmlndfrc"), "requested": lnd_frac},
                )
            self.default(ctx, "fatmlndfrc", value=expand_text(str(lnd_frac), ctx.env))

        if not ctx.is_set("fatmlndfrc"):
            raise NotFoundError(
                message="fatmlndfrc was NOT set; it is required",
                details={"variable": "fatmlndfrc"},
                hint="Pass --lnd-frac or set fatmlndfrc in the namelist input",
            )
        return None


@dataclass
class Co2TypeStep(ResolutionStep):
    """Concentração de CO2; `--co2-ppmv` já foi fixado em `cmdline.co2`."""

    id: str = "logic.co2_type"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        co2_type = str(self.default(ctx, "co2_type"))
        if co2_type == "constant":
            self.default(ctx, "co2_ppmv", sim_year=ctx.flags["sim_year"], rcp=ctx.flags["rcp"])
            self.enforce(ctx, "co2.ppmv_positive")
        return f"co2_type = {co2_type}"


@dataclass
class StartTypeStep(ResolutionStep):
    """
    Tipo de início efetivo, considerando `override_nsrest`.

    Sobrescrever o tipo só é permitido quando o driver inicia como
    `startup`. Sobrescrever para o mesmo tipo do driver não aborta a
    resolução: gera um warning, que só vira erro no modo estrito
    (`strict_warnings`).
    """

    id: str = "logic.start_type"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        driver = ctx.flags["start_type"]
        effective = driver

        nsrest = ctx.value("override_nsrest")
        if nsrest is not None:
            effective = NSREST_START_TYPES[int(nsrest)]
            if effective == driver:
                self.warn(ctx, "no need to set override_nsrest to same as start_type")
            if driver != "startup":
                raise ConsistencyError(
                    message="can NOT set override_nsrest if driver is NOT a startup type",
                    details={"variable": "override_nsrest", "start_type": driver},
                )

        ctx.flags.set("effective_start_type", effective)
        self.enforce(ctx, "start.branch_requires_nrevsn", "start.nrevsn_only_for_branch")
        return f"effective start type = {effective}"


@dataclass
class DeltaTimeStep(ResolutionStep):
    """`dtime` por grade, quando nem `--l-ncpl` nem o usuário o definiram."""

    id: str = "logic.delta_time"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        dtime = self.default(ctx, "dtime", hgrid=ctx.flags["res"])
        return f"dtime = {dtime}"
