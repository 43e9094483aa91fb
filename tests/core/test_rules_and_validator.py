# tests/core/test_rules_and_validator.py
"""
Testes da tabela de regras de consistência e do Validator.

Os testes asseguram que:
- `origflag = 1` com `subgridflag = 1` é rejeitado citando a regra
- variáveis ausentes nunca violam uma regra (exceto onde a regra exige
  presença, como `branch` sem `nrevsn`)
- flags têm prioridade sobre o documento
- a passagem de schema roda antes da de consistência

Decisões arquiteturais:
    - A primeira regra violada, na ordem da tabela, aborta
"""

import pytest

from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import ConsistencyError, SchemaError, ValidationError
from nml_resolver.core.physics import CLM4_5, CLM5_0
from nml_resolver.core.rules import RULES, RuleView, enforce, first_violation, rule_names
from nml_resolver.core.validator import Validator


def _doc(**values):
    doc = ConfigDocument()
    for var, value in values.items():
        doc.set("clm_inparm", var, value)
    return doc


def test_origflag_and_subgridflag_are_exclusive(mini_schema):
    doc = _doc(origflag=1, subgridflag=1)

    with pytest.raises(ConsistencyError) as exc:
        Validator(mini_schema).validate(doc, physics=CLM4_5)

    assert exc.value.details["rule"] == "hydrology.origflag_subgridflag"
    assert "origflag" in str(exc.value)
    assert "[hydrology.origflag_subgridflag]" in str(exc.value)


def test_origflag_alone_is_fine_on_clm4_5(mini_schema):
    Validator(mini_schema).validate(_doc(origflag=1, subgridflag=0), physics=CLM4_5)


def test_origflag_is_deprecated_on_clm5_0(mini_schema):
    with pytest.raises(ConsistencyError) as exc:
        Validator(mini_schema).validate(_doc(origflag=0), physics=CLM5_0)
    assert exc.value.details["rule"] == "hydrology.deprecated_flags"


def test_schema_pass_runs_first(mini_schema):
    doc = ConfigDocument()
    doc.set("default_settings", "dtime", 1800)
    with pytest.raises(SchemaError):
        Validator(mini_schema).validate(doc)

    bad = _doc(origflag=2)
    with pytest.raises(ValidationError):
        Validator(mini_schema).validate(bad)


def test_empty_document_violates_nothing():
    assert first_violation(RuleView(ConfigDocument())) is None


def test_branch_requires_nrevsn():
    view = RuleView(ConfigDocument(), {"effective_start_type": "branch"})
    assert first_violation(view).name == "start.branch_requires_nrevsn"

    view = RuleView(_doc(nrevsn="case.clm2.r.0001-01-01-00000.nc"), {"effective_start_type": "startup"})
    assert first_violation(view).name == "start.nrevsn_only_for_branch"


def test_flags_take_priority_over_the_document():
    doc = _doc(bgc_mode="sp", use_dynroot=True)
    assert first_violation(RuleView(doc), ["vegetation.dynroot_requires_bgc"]) is not None
    assert first_violation(RuleView(doc, {"bgc_mode": "bgc"}), ["vegetation.dynroot_requires_bgc"]) is None


def test_bgc_toggles_must_not_all_contradict_the_mode():
    view = RuleView(ConfigDocument(), {"bgc_toggle_mismatches": 4})
    with pytest.raises(ConsistencyError):
        enforce(view, "bgc.toggles_contradict_mode")
    enforce(RuleView(ConfigDocument(), {"bgc_toggle_mismatches": 3}), "bgc.toggles_contradict_mode")


def test_constant_co2_must_be_positive():
    with pytest.raises(ConsistencyError):
        enforce(RuleView(_doc(co2_type="constant", co2_ppmv=0.0)), "co2.ppmv_positive")
    enforce(RuleView(_doc(co2_type="diagnostic", co2_ppmv=0.0)), "co2.ppmv_positive")


def test_glc_nec_and_maxpatch_glcmec_agree():
    view = RuleView(_doc(maxpatch_glcmec=10), {"glc_nec": 3})
    assert first_violation(view).name == "glacier.maxpatch_glcmec_matches_glc_nec"


def test_rule_names_keep_table_order():
    names = rule_names("hydrology.")
    assert names[0] == "hydrology.origflag_subgridflag"
    assert all(n.startswith("hydrology.") for n in names)
    assert len(rule_names()) == len(RULES)
    assert len({r.name for r in RULES}) == len(RULES)


# -----------------------------
# Um caso válido e um violado por regra
# -----------------------------
RULE_CASES = [
    (
        "hydrology.h2osfcflag_requires_subgridflag",
        {"h2osfcflag": 1, "subgridflag": 1},
        {"h2osfcflag": 1, "subgridflag": 0},
    ),
    (
        "hydrology.h2osfc_off_requires_aquifer",
        {"h2osfcflag": 0, "lower_boundary_condition": 4},
        {"h2osfcflag": 0, "lower_boundary_condition": 2},
    ),
    (
        "soilwater.zeng_decker_requires_aquifer",
        {"soilwater_movement_method": 0, "lower_boundary_condition": 4},
        {"soilwater_movement_method": 0, "lower_boundary_condition": 2},
    ),
    (
        "soilwater.adaptive_forbids_aquifer",
        {"soilwater_movement_method": 1, "lower_boundary_condition": 2},
        {"soilwater_movement_method": 1, "lower_boundary_condition": 4},
    ),
    (
        "soilwater.bedrock_requires_flux",
        {"use_bedrock": True, "lower_boundary_condition": 2},
        {"use_bedrock": True, "lower_boundary_condition": 4},
    ),
    (
        "bgc.fun_requires_nitrif_denitrif",
        {"use_fun": True, "use_nitrif_denitrif": True},
        {"use_fun": True, "use_nitrif_denitrif": False},
    ),
    (
        "vegetation.dynroot_hydrstress_exclusive",
        {"use_dynroot": True, "use_hydrstress": False},
        {"use_dynroot": True, "use_hydrstress": True},
    ),
    (
        "vegetation.flexiblecn_requires_cn",
        {"use_flexiblecn": True, "use_cn": True},
        {"use_flexiblecn": True, "use_cn": False},
    ),
    (
        "vegetation.carbon_resp_opt_with_fun",
        {"carbon_resp_opt": 0, "use_fun": True},
        {"carbon_resp_opt": 1, "use_fun": True},
    ),
    (
        "landuse.transient_excludes_cndv",
        {"use_cndv": False, "flanduse_timeseries": "landuse.timeseries_1.9x2.5_hist.nc"},
        {"use_cndv": True, "flanduse_timeseries": "landuse.timeseries_1.9x2.5_hist.nc"},
    ),
    (
        "init.use_init_interp_requires_finidat",
        {"use_init_interp": True, "finidat": "/data/init.nc"},
        {"use_init_interp": True, "finidat": ""},
    ),
    (
        "snow.vionnet_forbids_tfactor",
        {"snow_overburden_compaction_method": "Anderson1976", "overburden_compress_tfactor": 0.08},
        {"snow_overburden_compaction_method": "Vionnet2012", "overburden_compress_tfactor": 0.08},
    ),
    (
        "atm.longwave_requires_downscale",
        {"glcmec_downscale_longwave": True, "lapse_rate_longwave": 0.032},
        {"glcmec_downscale_longwave": False, "lapse_rate_longwave": 0.032},
    ),
    (
        "atm.precip_repartition_requires_flag",
        {"repartition_rain_snow": True, "precip_repartition_glc_all_snow_t": -2.0},
        {"repartition_rain_snow": False, "precip_repartition_glc_all_snow_t": -2.0},
    ),
]


@pytest.mark.parametrize("name, valid, violating", RULE_CASES, ids=[c[0] for c in RULE_CASES])
def test_rule_accepts_valid_and_rejects_violating_documents(name, valid, violating):
    enforce(RuleView(_doc(**valid)), name)

    with pytest.raises(ConsistencyError) as exc:
        enforce(RuleView(_doc(**violating)), name)
    assert exc.value.details["rule"] == name
    assert f"[{name}]" in str(exc.value)


def test_transient_land_use_flag_takes_priority():
    view = RuleView(_doc(use_cndv=True), {"flanduse_timeseries": "landuse.timeseries_1.9x2.5_hist.nc"})
    assert first_violation(view, ["landuse.transient_excludes_cndv"]) is not None

    view = RuleView(_doc(use_cndv=True, flanduse_timeseries="landuse.nc"), {"flanduse_timeseries": "null"})
    assert first_violation(view, ["landuse.transient_excludes_cndv"]) is None
