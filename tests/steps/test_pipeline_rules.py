# tests/steps/test_pipeline_rules.py
"""
Testes dos Steps do pipeline padrão sobre os catálogos empacotados.

Os testes asseguram que:
- opções de linha de comando conflitantes com o namelist do usuário
  abortam com ConflictError nomeando a variável
- inline vence use-case; opções de CO2 vencem o use-case sem conflito
- warnings não interrompem a resolução, exceto em modo estrito
- regras locais (BGC, início a frio, demanda) abortam cedo

Limites explícitos:
    - Conteúdo completo do namelist é coberto em tests/e2e
"""

import pytest

from nml_resolver.core.exceptions import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    StrictWarningError,
    ValidationError,
)
from nml_resolver.resolver import Resolver


def _resolve(resolver, base_options, **options):
    opts = dict(base_options)
    opts.update(options)
    return resolver.resolve(opts)


# -----------------------------
# Conflitos com a linha de comando
# -----------------------------
def test_l_ncpl_conflicts_with_inline_dtime(bundled_resolver, base_options):
    with pytest.raises(ConflictError) as exc:
        _resolve(bundled_resolver, base_options, namelist="&clm_inparm dtime = 3600 /", l_ncpl=48)
    assert exc.value.details["variable"] == "dtime"


def test_l_ncpl_sets_dtime(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, l_ncpl=24)
    assert result.document.value("dtime") == 3600


def test_res_option_conflicts_with_inline_res(bundled_resolver, base_options):
    with pytest.raises(ConflictError) as exc:
        _resolve(bundled_resolver, base_options, namelist="&default_settings res = '4x5' /", res="1.9x2.5")
    assert exc.value.details["variable"] == "res"


def test_invalid_res_option(bundled_resolver, base_options):
    with pytest.raises(ValidationError) as exc:
        _resolve(bundled_resolver, base_options, res="3x3")
    assert exc.value.details["variable"] == "res"


def test_lnd_frac_and_fatmlndfrc_are_exclusive(bundled_resolver, base_options):
    with pytest.raises(ConflictError):
        _resolve(bundled_resolver, base_options, namelist="fatmlndfrc = '/data/other.nc'")


def test_fatmlndfrc_is_required(bundled_resolver):
    with pytest.raises(NotFoundError) as exc:
        bundled_resolver.resolve({})
    assert exc.value.details["variable"] == "fatmlndfrc"


def test_lnd_frac_is_expanded(bundled_resolver):
    result = bundled_resolver.resolve({"lnd_frac": "$CASEROOT/domain.nc"}, {"CASEROOT": "/case"})
    assert result.document.value("fatmlndfrc") == "/case/domain.nc"


# -----------------------------
# Precedência entre fontes
# -----------------------------
def test_inline_beats_use_case(bundled_resolver, base_options):
    result = _resolve(
        bundled_resolver,
        base_options,
        use_case="2000_control",
        namelist="co2_ppmv = 400.0\nurban_hac = 'OFF'",
    )
    assert result.document.value("co2_ppmv") == 400.0
    assert result.document.value("urban_hac") == "OFF"


def test_co2_options_beat_use_case(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, use_case="2000_control", co2_ppmv=390.0)
    assert result.document.value("co2_ppmv") == 390.0


def test_co2_ppmv_must_be_positive(bundled_resolver, base_options):
    with pytest.raises(ValidationError):
        _resolve(bundled_resolver, base_options, co2_ppmv=-1.0)


def test_co2_type_option_skips_the_constant_concentration(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, co2_type="diagnostic", co2_ppmv=390.0)
    assert result.document.value("co2_type") == "diagnostic"
    assert not result.document.has("co2_ppmv")


def test_unknown_use_case(bundled_resolver, base_options):
    from nml_resolver.core.exceptions import SourceIOError

    with pytest.raises(SourceIOError):
        _resolve(bundled_resolver, base_options, use_case="2010_control")
    with pytest.raises(ValidationError):
        _resolve(bundled_resolver, base_options, use_case="not-a-use-case")


# -----------------------------
# Warnings e modo estrito
# -----------------------------
def test_maxpft_warning_does_not_stop_resolution(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, maxpft=15)

    assert result.document.value("maxpatch_pft") == 15
    assert "cmdline.maxpft" in result.warnings
    assert result.steps["cmdline.maxpft"].warnings == result.warnings["cmdline.maxpft"]


def test_strict_warnings_escalate(bundled_resolver, base_options):
    with pytest.raises(StrictWarningError) as exc:
        _resolve(bundled_resolver, base_options, maxpft=15, strict_warnings=True)
    assert exc.value.details["step_id"] == "cmdline.maxpft"


def test_maxpft_above_limit(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, maxpft=79)
    assert exc.value.details["rule"] == "bgc.maxpft_limit"


def test_bgc_requires_17_pfts(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, bgc="bgc", maxpft=15)
    assert exc.value.details["rule"] == "bgc.maxpft_requires_17"


# -----------------------------
# Biogeoquímica
# -----------------------------
def test_use_cn_contradicting_bgc_mode(bundled_resolver, base_options):
    with pytest.raises(ConflictError) as exc:
        _resolve(bundled_resolver, base_options, bgc="sp", namelist="use_cn = .true.")
    assert exc.value.details["variable"] == "use_cn"


def test_all_toggles_contradicting_the_mode(bundled_resolver, base_options):
    text = "use_lch4 = .true.\nuse_nitrif_denitrif = .true.\nuse_vertsoilc = .true.\nuse_century_decomp = .true."
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, bgc="sp", namelist=text)
    assert exc.value.details["rule"] == "bgc.toggles_contradict_mode"


def test_dynroot_needs_bgc(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, namelist="use_dynroot = .true.\nuse_hydrstress = .false.")
    assert exc.value.details["rule"] == "vegetation.dynroot_requires_bgc"


# -----------------------------
# Condições iniciais e demanda
# -----------------------------
def test_cold_start_blanks_finidat(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, clm_start_type="cold")

    assert result.document.value("finidat") == ""
    assert result.document.value("start_type") == "startup"
    assert result.warnings == {}


def test_cold_start_discards_an_explicit_finidat(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, clm_start_type="cold", namelist="finidat = '/data/init.nc'")

    assert result.document.value("finidat") == ""
    assert "logic.initial_conditions" in result.warnings


def test_blank_finidat_requires_a_cold_start(bundled_resolver, base_options):
    with pytest.raises(ValidationError) as exc:
        _resolve(bundled_resolver, base_options, namelist="finidat = ' '")
    assert exc.value.details["variable"] == "finidat"


def test_explicit_finidat_is_kept(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, namelist="finidat = '/data/init.nc'")
    assert result.document.value("finidat") == "/data/init.nc"


def test_finidat_cannot_be_demanded(bundled_resolver, base_options):
    with pytest.raises(ValidationError) as exc:
        _resolve(bundled_resolver, base_options, clm_demand="finidat")
    assert exc.value.details["variable"] == "clm_demand"


def test_demanded_variable_without_default(bundled_resolver, base_options):
    with pytest.raises(NotFoundError) as exc:
        _resolve(bundled_resolver, base_options, clm_demand="flanduse_timeseries")
    assert exc.value.details["variable"] == "flanduse_timeseries"


def test_override_nsrest_requires_a_startup_driver(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError):
        _resolve(bundled_resolver, base_options, clm_start_type="continue", namelist="override_nsrest = 3")


def test_branch_needs_nrevsn(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, namelist="override_nsrest = 3")
    assert exc.value.details["rule"] == "start.branch_requires_nrevsn"


def test_override_to_the_same_start_type_only_warns(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, namelist="override_nsrest = 0")

    assert result.document.value("override_nsrest") == 0
    assert result.warnings["logic.start_type"] == ["no need to set override_nsrest to same as start_type"]


def test_override_to_the_same_start_type_fails_in_strict_mode(bundled_resolver, base_options):
    with pytest.raises(StrictWarningError) as exc:
        _resolve(bundled_resolver, base_options, namelist="override_nsrest = 0", strict_warnings=True)
    assert exc.value.details["step_id"] == "logic.start_type"


# -----------------------------
# FUN, respiração e raízes dinâmicas
# -----------------------------
def test_fun_needs_nitrification(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, bgc="sp", namelist="use_fun = .true.")
    assert exc.value.details["rule"] == "bgc.fun_requires_nitrif_denitrif"


def test_carbon_respiration_option_conflicts_with_fun(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, bgc="bgc", namelist="carbon_resp_opt = 1")
    assert exc.value.details["rule"] == "vegetation.carbon_resp_opt_with_fun"


def test_dynroot_and_hydrstress_are_exclusive(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, bgc="bgc", namelist="use_dynroot = .true.")
    assert exc.value.details["rule"] == "vegetation.dynroot_hydrstress_exclusive"


def test_dynroot_without_hydrstress_in_bgc_mode(bundled_resolver, base_options):
    result = _resolve(bundled_resolver, base_options, bgc="bgc", namelist="use_dynroot = .true.\nuse_hydrstress = .false.")

    assert result.document.value("use_dynroot") is True
    assert result.document.value("use_hydrstress") is False


# -----------------------------
# Uso do solo transiente
# -----------------------------
def test_transient_land_use_excludes_dynamic_vegetation(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, sim_year="1850-2000", namelist="use_cndv = .true.")
    assert exc.value.details["rule"] == "landuse.transient_excludes_cndv"


# -----------------------------
# Neve e forçante atmosférica
# -----------------------------
def test_tfactor_is_only_for_anderson(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, namelist="overburden_compress_tfactor = 0.1")
    assert exc.value.details["rule"] == "snow.vionnet_forbids_tfactor"

    text = "snow_overburden_compaction_method = 'Anderson1976'\noverburden_compress_tfactor = 0.1"
    result = _resolve(bundled_resolver, base_options, namelist=text)
    assert result.document.value("overburden_compress_tfactor") == 0.1


def test_longwave_settings_need_downscaling(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(
            bundled_resolver,
            base_options,
            namelist="glcmec_downscale_longwave = .false.\nlapse_rate_longwave = 0.05",
        )
    assert exc.value.details["rule"] == "atm.longwave_requires_downscale"

    result = _resolve(bundled_resolver, base_options, namelist="lapse_rate_longwave = 0.05")
    assert result.document.value("lapse_rate_longwave") == 0.05
    assert result.document.value("longwave_downscaling_limit") == 0.5


def test_repartition_thresholds_need_the_switch(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(
            bundled_resolver,
            base_options,
            namelist="repartition_rain_snow = .false.\nprecip_repartition_glc_all_snow_t = -1.0",
        )
    assert exc.value.details["rule"] == "atm.precip_repartition_requires_flag"

    result = _resolve(bundled_resolver, base_options, namelist="precip_repartition_glc_all_snow_t = -1.0")
    assert result.document.value("precip_repartition_glc_all_snow_t") == -1.0


# -----------------------------
# Hidrologia (clm4_5, onde as chaves antigas ainda existem)
# -----------------------------
@pytest.fixture(scope="module")
def clm4_5_resolver():
    return Resolver.from_settings(phys="clm4_5")


def test_h2osfcflag_needs_subgridflag(clm4_5_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(clm4_5_resolver, base_options, namelist="h2osfcflag = 1\nsubgridflag = 0")
    assert exc.value.details["rule"] == "hydrology.h2osfcflag_requires_subgridflag"

    result = _resolve(clm4_5_resolver, base_options, namelist="h2osfcflag = 1\nsubgridflag = 1")
    assert result.document.value("h2osfcflag") == 1


def test_zeng_decker_needs_the_aquifer_boundary(clm4_5_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(clm4_5_resolver, base_options, namelist="lower_boundary_condition = 2")
    assert exc.value.details["rule"] == "soilwater.zeng_decker_requires_aquifer"


def test_adaptive_time_stepping_forbids_the_aquifer_boundary(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, namelist="lower_boundary_condition = 4")
    assert exc.value.details["rule"] == "soilwater.adaptive_forbids_aquifer"


def test_deprecated_hydrology_flags_on_clm5_0(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, namelist="h2osfcflag = 1\nsubgridflag = 1")
    assert exc.value.details["rule"] == "hydrology.deprecated_flags"


# -----------------------------
# Busca de finidat
# -----------------------------
def test_startup_without_a_matching_finidat(bundled_resolver, base_options):
    text = "use_cndv = .true.\nstart_ymd = 20000601"

    with pytest.raises(NotFoundError) as exc:
        _resolve(bundled_resolver, base_options, clm_start_type="startup", namelist=text)
    assert exc.value.details["variable"] == "finidat"
    assert "clm_start_type is startup" in str(exc.value)


def test_arbitrary_start_without_a_matching_finidat(bundled_resolver, base_options):
    text = "use_cndv = .true.\nstart_ymd = 20000601"

    result = _resolve(bundled_resolver, base_options, clm_start_type="arb_ic", namelist=text)

    assert result.document.value("finidat") == ""
    assert result.document.value("use_init_interp") is False


def test_bad_interpolation_attributes(bundled_resolver, base_options):
    with pytest.raises(ValidationError) as exc:
        _resolve(
            bundled_resolver,
            base_options,
            res="10x15",
            namelist="init_interp_attributes = 'hgrid=1.9x2.5 not-a-pair'",
        )
    assert exc.value.details["variable"] == "init_interp_attributes"
    assert exc.value.details["value"] == "not-a-pair"


def test_interpolation_needs_a_finidat(bundled_resolver, base_options):
    with pytest.raises(ConsistencyError) as exc:
        _resolve(bundled_resolver, base_options, clm_start_type="cold", namelist="use_init_interp = .true.")
    assert exc.value.details["rule"] == "init.use_init_interp_requires_finidat"
