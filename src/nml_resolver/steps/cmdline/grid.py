# src/nml_resolver/steps/cmdline/grid.py
"""
Opções de linha de comando da grade: versão de física, resolução,
máscara e número de classes de elevação.

Regra comum às opções de linha de comando (ver `ResolutionStep.choose`):
    - valor da CLI → fixado; valor diferente já no documento é ConflictError
    - senão, valor já presente no documento é mantido
    - senão, default do catálogo
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from nml_resolver.core.exceptions import NotFoundError
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.steps.base import ResolutionStep


@dataclass
class PhysicsStep(ResolutionStep):
    id: str = "cmdline.physics"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["source.infiles"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        phys = ctx.physics.as_string()
        ctx.flags.set("phys", phys)
        ctx.flags.set("inputdata_rootdir", ctx.inputdata_root)
        return f"phys = {phys}"


@dataclass
class ResolutionSettingsStep(ResolutionStep):
    """
    Resolução horizontal (`res`) e máscara oceânica (`mask`).

    Com `chk_res` ligado (padrão), ambos são validados pelo schema e
    gravados no grupo `default_settings`; desligado, viram apenas flags,
    permitindo grades fora da lista conhecida.
    """

    id: str = "cmdline.resolution"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.physics"]

    def _unchecked(self, ctx: RunContext, variable: str, **attributes: Any) -> Any:
        value = ctx.option(variable)
        if value is None:
            value = ctx.value(variable)
        if value is None:
            value = ctx.defaults.get_value(variable, attributes)
        if value is None:
            raise NotFoundError(
                message=f"No default value found for {variable}",
                details={"variable": variable},
                hint=f"Pass --{variable} on the command line",
            )
        return str(value)

    def resolve(self, ctx: RunContext) -> Optional[str]:
        chk_res = bool(ctx.option("chk_res", True))
        ctx.flags.set("chk_res", chk_res)

        if chk_res:
            res = str(self.choose(ctx, "res"))
            mask = str(self.choose(ctx, "mask", hgrid=res))
        else:
            res = self._unchecked(ctx, "res")
            mask = self._unchecked(ctx, "mask", hgrid=res)

        ctx.flags.set("res", res)
        ctx.flags.set("mask", mask)
        self.info(ctx, f"CLM atm resolution is {res}, land mask is {mask}")
        return f"res = {res}, mask = {mask}"


@dataclass
class GlcNecStep(ResolutionStep):
    id: str = "cmdline.glc_nec"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.resolution"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        glc_nec = int(self.choose(ctx, "glc_nec", hgrid=ctx.flags["res"]))
        ctx.flags.set("glc_nec", glc_nec)
        self.enforce(ctx, "glacier.glc_nec_positive")
        return f"glc_nec = {glc_nec}"
