# src/nml_resolver/steps/cmdline/bgc.py
"""
Modo biogeoquímico e número máximo de PFTs.

`bgc_mode` determina `use_cn` e os defaults dos quatro toggles
derivados (`use_lch4`, `use_nitrif_denitrif`, `use_vertsoilc`,
`use_century_decomp`). Toggles explícitos que contrariam o modo são
contados em uma flag; se TODOS contrariam, a configuração é rejeitada.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from nml_resolver.core.exceptions import ConflictError
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.core.rules import BGC_TOGGLES, MAXPFT_SUPPORTED
from nml_resolver.core.values import value_is_true
from nml_resolver.steps.base import ResolutionStep


@dataclass
class BgcModeStep(ResolutionStep):
    id: str = "cmdline.bgc"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.resolution"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        phys = ctx.flags["phys"]
        requested = ctx.option("bgc")
        if requested == "default":
            requested = None

        if requested is not None:
            bgc_mode = ctx.pin("bgc_mode", requested, step_id=self.id)
        else:
            bgc_mode = self.default(ctx, "bgc_mode", phys=phys)
        bgc_mode = str(bgc_mode)
        ctx.flags.set("bgc_mode", bgc_mode)

        use_cn = bgc_mode != "sp"
        if ctx.is_set("use_cn") and bool(ctx.value("use_cn")) != use_cn:
            raise ConflictError(
                message=f"use_cn = {ctx.value('use_cn')!r} is inconsistent with bgc_mode = {bgc_mode}",
                details={"variable": "use_cn", "bgc_mode": bgc_mode},
                hint="Set the biogeochemistry mode with --bgc instead of use_cn",
            )
        self.default(ctx, "use_cn", value=use_cn)
        ctx.flags.set("use_cn", use_cn)

        mismatches = 0
        for toggle in BGC_TOGGLES:
            raw = ctx.defaults.get_value(toggle, {"bgc_mode": bgc_mode, "phys": phys})
            expected = None if raw is None else ctx.schema.coerce(toggle, raw)
            if ctx.is_set(toggle) and expected is not None and ctx.value(toggle) != expected:
                mismatches += 1
                self.debug(ctx, f"{toggle} explicitly set against the {bgc_mode} default")
            value = self.default(ctx, toggle, value=expected, bgc_mode=bgc_mode)
            ctx.flags.set(toggle, value)
        ctx.flags.set("bgc_toggle_mismatches", mismatches)
        self.enforce(ctx, "bgc.toggles_contradict_mode")

        use_cndv = bool(self.default(ctx, "use_cndv", phys=phys))
        ctx.flags.set("use_cndv", use_cndv)

        use_fun = value_is_true(
            self.default(
                ctx,
                "use_fun",
                phys=phys,
                use_cn=use_cn,
                use_nitrif_denitrif=ctx.flags["use_nitrif_denitrif"],
            )
        )
        ctx.flags.set("use_fun", use_fun)
        self.enforce(ctx, "bgc.fun_requires_nitrif_denitrif")

        self.info(ctx, f"Biogeochemistry mode is {bgc_mode} (use_cn = {use_cn})")
        return f"bgc_mode = {bgc_mode}"


@dataclass
class MaxPftStep(ResolutionStep):
    id: str = "cmdline.maxpft"
    kind: StepKind = StepKind.OPTION
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["cmdline.bgc"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        maxpft = int(self.choose(ctx, "maxpatch_pft", option="maxpft", use_cn=ctx.flags["use_cn"]))
        ctx.flags.set("maxpft", maxpft)
        self.enforce(ctx, "bgc.maxpft_limit", "bgc.maxpft_requires_17")
        if maxpft != MAXPFT_SUPPORTED:
            self.warn(
                ctx,
                f"running with maxpft = {maxpft} instead of {MAXPFT_SUPPORTED} "
                "is NOT scientifically validated",
            )
        return f"maxpft = {maxpft}"
