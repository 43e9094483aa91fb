# src/nml_resolver/steps/pipeline.py
"""
Pipeline padrão de resolução.

A ordem declarada abaixo É a ordem de execução: o Engine valida que
cada Step aparece depois de todas as suas dependências e falha antes de
executar qualquer coisa se não for o caso.

Fases:
    1. Fontes do usuário (inline, arquivos)
    2. Opções de linha de comando (grade, BGC, anos, tipo de início),
       com o use-case mesclado assim que seus atributos estão fixados
    3. Grupos de lógica (defaults condicionados às flags)
    4. Checagem final de hidrologia
"""

from __future__ import annotations

from typing import Any, Dict, List

from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.step import Step
from nml_resolver.steps.base import FillDefaultsStep, phys_only
from nml_resolver.steps.checks.hydrology import HydrologySwitchesStep
from nml_resolver.steps.cmdline.bgc import BgcModeStep, MaxPftStep
from nml_resolver.steps.cmdline.grid import GlcNecStep, PhysicsStep, ResolutionSettingsStep
from nml_resolver.steps.cmdline.run import (
    ClmStartTypeStep,
    Co2OptionsStep,
    CouplingIntervalStep,
    DriverStartTypeStep,
    RcpStep,
    SimYearStep,
)
from nml_resolver.steps.logic.coupling import Co2TypeStep, DeltaTimeStep, LandFractionStep, StartTypeStep
from nml_resolver.steps.logic.glacier import GlacierStep
from nml_resolver.steps.logic.initial_conditions import InitialConditionsStep
from nml_resolver.steps.logic.landuse import DemandStep, SurfaceDatasetStep
from nml_resolver.steps.logic.physics import AtmForcingStep, SnowpackStep, SoilwaterMovementStep
from nml_resolver.steps.logic.vegetation import (
    BgcSharedStep,
    CnVegCarbonStateStep,
    DynamicRootsStep,
    HydraulicStressStep,
    ParamsFileStep,
    PlantNitrogenAllocStep,
)
from nml_resolver.steps.sources.namelist import InfileNamelistStep, InlineNamelistStep
from nml_resolver.steps.sources.use_case import UseCaseStep


def _by_hgrid(ctx: RunContext) -> Dict[str, Any]:
    return {"hgrid": ctx.flags["res"]}


def _by_crop(ctx: RunContext) -> Dict[str, Any]:
    return {"phys": ctx.flags["phys"], "use_cn": ctx.flags["use_cn"]}


def _by_bedrock(ctx: RunContext) -> Dict[str, Any]:
    return {"phys": ctx.flags["phys"], "hgrid": ctx.flags["res"]}


def default_pipeline() -> List[Step]:
    return [
        InlineNamelistStep(),
        InfileNamelistStep(),
        PhysicsStep(),
        ResolutionSettingsStep(),
        BgcModeStep(),
        MaxPftStep(),
        GlcNecStep(),
        RcpStep(),
        SimYearStep(),
        ClmStartTypeStep(),
        Co2OptionsStep(),
        CouplingIntervalStep(),
        UseCaseStep(),
        DriverStartTypeStep(),
        LandFractionStep(),
        Co2TypeStep(),
        StartTypeStep(),
        DeltaTimeStep(),
        FillDefaultsStep(id="logic.decomp_performance", variables=("nsegspc",), attributes=_by_hgrid),
        GlacierStep(),
        PlantNitrogenAllocStep(),
        HydraulicStressStep(),
        DynamicRootsStep(),
        ParamsFileStep(),
        FillDefaultsStep(id="logic.crop_landunit", variables=("create_crop_landunit",), attributes=_by_crop),
        FillDefaultsStep(
            id="logic.soilstate",
            variables=("organic_frac_squared", "soil_layerstruct", "use_bedrock"),
            attributes=_by_bedrock,
        ),
        DemandStep(),
        SurfaceDatasetStep(),
        InitialConditionsStep(),
        SnowpackStep(),
        AtmForcingStep(),
        FillDefaultsStep(id="logic.lnd2atm", variables=("melt_non_icesheet_ice_runoff",)),
        FillDefaultsStep(
            id="logic.urban",
            variables=("building_temp_method", "urban_hac", "urban_traffic"),
        ),
        BgcSharedStep(),
        SoilwaterMovementStep(),
        FillDefaultsStep(
            id="logic.rooting_profile",
            variables=("rooting_profile_method_water", "rooting_profile_method_carbon"),
        ),
        CnVegCarbonStateStep(),
        FillDefaultsStep(id="logic.soil_resis", variables=("soil_resis_method",)),
        FillDefaultsStep(
            id="logic.canopyhydrology",
            variables=("interception_fraction", "maximum_leaf_wetted_fraction", "use_clm5_fpi"),
            attributes=phys_only,
        ),
        FillDefaultsStep(id="logic.canopy", variables=("leaf_mr_vcm",)),
        HydrologySwitchesStep(),
    ]
