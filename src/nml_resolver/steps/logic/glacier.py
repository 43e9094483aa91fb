# src/nml_resolver/steps/logic/glacier.py
"""Classes de elevação glaciais e comportamento por região de geleira."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.steps.base import INPUTS_DONE, ResolutionStep

_REGION_BEHAVIOR = (
    "glacier_region_behavior",
    "glacier_region_melt_behavior",
    "glacier_region_ice_runoff_behavior",
)


@dataclass
class GlacierStep(ResolutionStep):
    id: str = "logic.glacier"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = [INPUTS_DONE, "cmdline.glc_nec"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        glc_nec = ctx.flags["glc_nec"]
        self.default(ctx, "maxpatch_glcmec", value=glc_nec)
        self.enforce(ctx, "glacier.maxpatch_glcmec_matches_glc_nec", "glacier.glc_nec_positive")

        phys = ctx.flags["phys"]
        self.default(ctx, "glc_snow_persistence_max_days", phys=phys)
        self.default(ctx, "albice", glc_nec=glc_nec)
        for var in _REGION_BEHAVIOR:
            self.default(ctx, var, phys=phys)
        return f"maxpatch_glcmec = {glc_nec}"
