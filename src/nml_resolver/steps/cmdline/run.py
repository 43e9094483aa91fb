# src/nml_resolver/steps/cmdline/run.py
"""
Opções de linha de comando do experimento: cenário RCP, ano de
simulação (ou faixa transiente), tipo de início do CLM, o tipo de
início derivado para o driver, CO2 e intervalo de acoplamento.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from nml_resolver.core.exceptions import ConflictError, ValidationError
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.steps.base import ResolutionStep

SECONDS_PER_DAY = 86400

_YEAR_RANGE_RE = re.compile(r"^(\d+)-(\d+)$")

# Tipos de início do CLM que o driver enxerga como `startup`.
_STARTUP_ALIASES = ("cold", "arb_ic")


@dataclass
class RcpStep(ResolutionStep):
    id: str = "cmdline.rcp"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.resolution"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        rcp = str(self.choose(ctx, "rcp", hgrid=ctx.flags["res"]))
        ctx.flags.set("rcp", rcp)
        return f"rcp = {rcp}"


@dataclass
class SimYearStep(ResolutionStep):
    """
    `--sim-year Y1-Y2` fixa `sim_year = Y1` e `sim_year_range = Y1-Y2`;
    um ano simples fixa só `sim_year` e a faixa cai no default
    (`constant`).
    """

    id: str = "cmdline.sim_year"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.resolution"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        requested = ctx.option("sim_year")
        if requested is not None:
            requested = str(requested).strip()
            m = _YEAR_RANGE_RE.match(requested)
            if m:
                ctx.pin("sim_year", m.group(1), step_id=self.id)
                ctx.pin("sim_year_range", requested, step_id=self.id)
            else:
                ctx.pin("sim_year", requested, step_id=self.id)

        sim_year = str(self.default(ctx, "sim_year", hgrid=ctx.flags["res"]))
        sim_year_range = str(self.default(ctx, "sim_year_range", sim_year=sim_year))
        ctx.flags.set("sim_year", sim_year)
        ctx.flags.set("sim_year_range", sim_year_range)
        if sim_year_range != "constant":
            self.info(ctx, f"Transient simulation over {sim_year_range}")
        return f"sim_year = {sim_year}, sim_year_range = {sim_year_range}"


@dataclass
class ClmStartTypeStep(ResolutionStep):
    id: str = "cmdline.clm_start_type"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.bgc"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        start = str(self.choose(ctx, "clm_start_type", use_cndv=ctx.flags["use_cndv"]))
        ctx.flags.set("clm_start_type", start)
        return f"clm_start_type = {start}"


@dataclass
class DriverStartTypeStep(ResolutionStep):
    """Tipo de início do driver; roda após o use-case, fechando a fase de entradas."""

    id: str = "cmdline.start_type"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["source.use_case", "cmdline.clm_start_type"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        clm_start = ctx.flags["clm_start_type"]
        driver = "startup" if clm_start in _STARTUP_ALIASES else clm_start
        start_type = str(self.default(ctx, "start_type", value=driver))
        ctx.flags.set("start_type", start_type)
        return f"start_type = {start_type}"


@dataclass
class Co2OptionsStep(ResolutionStep):
    """`--co2-type` e `--co2-ppmv`, fixados antes do use-case."""

    id: str = "cmdline.co2"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.physics"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        co2_type = ctx.option("co2_type")
        if co2_type is not None:
            ctx.pin("co2_type", co2_type, step_id=self.id)

        ppmv = ctx.option("co2_ppmv")
        if ppmv is not None and co2_type in (None, "constant"):
            if float(ppmv) <= 0:
                raise ValidationError(
                    message="co2_ppmv can NOT be less than or equal to zero",
                    details={"variable": "co2_ppmv", "value": ppmv},
                )
            ctx.pin("co2_ppmv", ppmv, step_id=self.id)
        return None


@dataclass
class CouplingIntervalStep(ResolutionStep):
    """`--l-ncpl` (acoplamentos por dia) fixa `dtime = 86400 / l_ncpl`."""

    id: str = "cmdline.l_ncpl"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.physics"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        l_ncpl = ctx.option("l_ncpl")
        if l_ncpl is None:
            return "no coupling interval requested"

        l_ncpl = int(l_ncpl)
        if l_ncpl <= 0:
            raise ValidationError(
                message="l_ncpl must be greater than zero",
                details={"variable": "l_ncpl", "value": l_ncpl},
            )
        if SECONDS_PER_DAY % l_ncpl != 0:
            raise ValidationError(
                message=f"l_ncpl = {l_ncpl} does NOT evenly divide a day",
                details={"variable": "l_ncpl", "value": l_ncpl},
            )
        dtime = SECONDS_PER_DAY // l_ncpl
        if ctx.is_set("dtime") and ctx.value("dtime") != dtime:
            raise ConflictError(
                message=(
                    f"dtime = {ctx.value('dtime')} is inconsistent with the coupling interval "
                    f"implied by l_ncpl = {l_ncpl} (dtime = {dtime})"
                ),
                details={"variable": "dtime", "current": ctx.value("dtime"), "requested": dtime},
                hint="Remove dtime from the namelist input or drop --l-ncpl",
            )
        ctx.pin("dtime", dtime, step_id=self.id, source="--l-ncpl option")
        return f"dtime = {dtime}"
