# src/nml_resolver/core/rules.py
"""
Tabela ordenada de regras de consistência entre campos.

Cada regra é um predicado nomeado `violated(view) -> bool` sobre o
documento e as flags resolvidas, associado a uma mensagem fatal. A
tabela é compartilhada:
    - Steps de resolução avaliam subconjuntos pelo nome (`enforce`)
      assim que os campos envolvidos ficam conhecidos
    - o Validator avalia a tabela inteira, na ordem, após a resolução

Decisões arquiteturais:
    - A primeira regra violada aborta com ConsistencyError citando o nome
    - Regras toleram variáveis ausentes: ausência nunca viola uma regra,
      exceto onde a própria regra exige presença (ex.: branch sem nrevsn)
    - Flags têm prioridade; sem a flag, a regra cai para o valor do
      documento (permite validar documentos fora do pipeline)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence

from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import ConsistencyError
from nml_resolver.core.physics import CLM4_5, PhysicsVersion
from nml_resolver.core.values import is_blank, normalize_name, value_is_true

BGC_TOGGLES = ("use_lch4", "use_nitrif_denitrif", "use_vertsoilc", "use_century_decomp")
MAXPFT_SUPPORTED = 17


class RuleView:
    """Leitura uniforme de documento + flags para os predicados."""

    def __init__(
        self,
        document: ConfigDocument,
        flags: Optional[Mapping[str, Any]] = None,
        physics: Optional[PhysicsVersion] = None,
    ):
        self.document = document
        self.flags = flags or {}
        self._physics = physics

    def value(self, name: str) -> Any:
        return self.document.value(name)

    def setting(self, name: str) -> Any:
        key = normalize_name(name)
        if key in self.flags:
            return self.flags[key]
        return self.document.value(key)

    def number(self, name: str) -> Optional[float]:
        v = self.value(name)
        if v is None or isinstance(v, (bool, list)):
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None

    def is_true(self, name: str) -> bool:
        return value_is_true(self.setting(name))

    def is_set(self, name: str) -> bool:
        return self.document.has(name)

    @property
    def physics(self) -> Optional[PhysicsVersion]:
        if self._physics is not None:
            return self._physics
        phys = self.flags.get("phys")
        return PhysicsVersion.parse(phys) if phys else None

    @property
    def start_type(self) -> Optional[str]:
        st = self.flags.get("effective_start_type") or self.value("start_type")
        return None if st is None else str(st)


@dataclass(frozen=True)
class Rule:
    name: str
    message: str
    violated: Callable[[RuleView], bool]


def _eq(view: RuleView, name: str, expected: float) -> bool:
    return view.number(name) == expected


def _bgc_mode(view: RuleView) -> Optional[str]:
    mode = view.setting("bgc_mode")
    return None if mode is None else str(mode)


def _toggles_contradict(view: RuleView) -> bool:
    if "bgc_toggle_mismatches" in view.flags:
        return view.flags["bgc_toggle_mismatches"] >= len(BGC_TOGGLES)
    mode = _bgc_mode(view)
    if mode is None or not all(view.is_set(t) for t in BGC_TOGGLES):
        return False
    expected = mode != "sp"
    return all(value_is_true(view.value(t)) != expected for t in BGC_TOGGLES)


def _deprecated_hydrology(view: RuleView) -> bool:
    phys = view.physics
    if phys is None or phys <= CLM4_5:
        return False
    return any(view.is_set(v) for v in ("origflag", "h2osfcflag", "oldfflag"))


def _maxpft_bgc(view: RuleView) -> bool:
    maxpft = view.setting("maxpft")
    mode = _bgc_mode(view)
    return maxpft is not None and mode not in (None, "sp") and int(maxpft) != MAXPFT_SUPPORTED


def _maxpft_limit(view: RuleView) -> bool:
    maxpft = view.setting("maxpft")
    return maxpft is not None and int(maxpft) > MAXPFT_SUPPORTED


def _glcmec_mismatch(view: RuleView) -> bool:
    glc_nec = view.setting("glc_nec")
    maxpatch = view.number("maxpatch_glcmec")
    return glc_nec is not None and maxpatch is not None and float(glc_nec) != maxpatch


def _glc_nec_positive(view: RuleView) -> bool:
    glc_nec = view.setting("glc_nec")
    return glc_nec is not None and int(glc_nec) < 1


def _branch_without_nrevsn(view: RuleView) -> bool:
    return view.start_type == "branch" and is_blank(view.value("nrevsn"))


def _nrevsn_without_branch(view: RuleView) -> bool:
    st = view.start_type
    return st is not None and st != "branch" and not is_blank(view.value("nrevsn"))


def _transient_with_cndv(view: RuleView) -> bool:
    flu = view.setting("flanduse_timeseries")
    return not is_blank(flu) and str(flu) != "null" and view.is_true("use_cndv")


def _interp_without_finidat(view: RuleView) -> bool:
    return view.is_true("use_init_interp") and is_blank(view.value("finidat"))


def _longwave_without_downscale(view: RuleView) -> bool:
    if not view.is_set("glcmec_downscale_longwave") or view.is_true("glcmec_downscale_longwave"):
        return False
    return view.is_set("lapse_rate_longwave") or view.is_set("longwave_downscaling_limit")


PRECIP_REPARTITION_VARS = (
    "precip_repartition_glc_all_snow_t",
    "precip_repartition_glc_all_rain_t",
    "precip_repartition_nonglc_all_snow_t",
    "precip_repartition_nonglc_all_rain_t",
)


def _repartition_without_flag(view: RuleView) -> bool:
    if not view.is_set("repartition_rain_snow") or view.is_true("repartition_rain_snow"):
        return False
    return any(view.is_set(v) for v in PRECIP_REPARTITION_VARS)


def _co2_ppmv_nonpositive(view: RuleView) -> bool:
    ppmv = view.number("co2_ppmv")
    return str(view.value("co2_type") or "") == "constant" and ppmv is not None and ppmv <= 0


RULES: Sequence[Rule] = (
    # Hidrologia
    Rule(
        "hydrology.origflag_subgridflag",
        "if origflag is ON, subgridflag can NOT also be on",
        lambda v: _eq(v, "origflag", 1) and _eq(v, "subgridflag", 1),
    ),
    Rule(
        "hydrology.h2osfcflag_requires_subgridflag",
        "if h2osfcflag is ON, subgridflag can NOT be off",
        lambda v: _eq(v, "h2osfcflag", 1) and not _eq(v, "subgridflag", 1),
    ),
    Rule(
        "hydrology.deprecated_flags",
        "origflag, h2osfcflag and oldfflag are deprecated and can only be used with clm4_5",
        _deprecated_hydrology,
    ),
    Rule(
        "soilwater.zeng_decker_requires_aquifer",
        "if soil water movement method is zeng-decker, lower_boundary_condition can only be aquifer",
        lambda v: _eq(v, "soilwater_movement_method", 0)
        and v.number("lower_boundary_condition") not in (None, 4),
    ),
    Rule(
        "soilwater.adaptive_forbids_aquifer",
        "if soil water movement method is adaptive, lower_boundary_condition can NOT be aquifer",
        lambda v: _eq(v, "soilwater_movement_method", 1) and _eq(v, "lower_boundary_condition", 4),
    ),
    Rule(
        "soilwater.bedrock_requires_flux",
        "if use_bedrock is on, lower_boundary_condition can only be flux",
        lambda v: v.is_true("use_bedrock") and v.number("lower_boundary_condition") not in (None, 2),
    ),
    Rule(
        "hydrology.h2osfc_off_requires_aquifer",
        "if h2osfcflag is 0, lower_boundary_condition can only be aquifer",
        lambda v: _eq(v, "h2osfcflag", 0) and v.number("lower_boundary_condition") not in (None, 4),
    ),
    # Tipo de início
    Rule(
        "start.branch_requires_nrevsn",
        "nrevsn is required for a branch type",
        _branch_without_nrevsn,
    ),
    Rule(
        "start.nrevsn_only_for_branch",
        "nrevsn should ONLY be set for a branch type",
        _nrevsn_without_branch,
    ),
    # Biogeoquímica
    Rule(
        "bgc.fun_requires_nitrif_denitrif",
        "when FUN is on, use_nitrif_denitrif MUST also be on",
        lambda v: v.is_true("use_fun") and not v.is_true("use_nitrif_denitrif"),
    ),
    Rule(
        "bgc.toggles_contradict_mode",
        "the bgc toggles (use_lch4, use_nitrif_denitrif, use_vertsoilc, use_century_decomp) "
        "are all contradicting the bgc setting",
        _toggles_contradict,
    ),
    Rule(
        "bgc.maxpft_requires_17",
        f"for bgc modes other than sp, maxpft MUST be {MAXPFT_SUPPORTED}",
        _maxpft_bgc,
    ),
    Rule(
        "bgc.maxpft_limit",
        f"maxpft can only be less than or equal to {MAXPFT_SUPPORTED}",
        _maxpft_limit,
    ),
    # Vegetação
    Rule(
        "vegetation.dynroot_requires_bgc",
        "use_dynroot can only be on with bgc modes other than sp",
        lambda v: v.is_true("use_dynroot") and _bgc_mode(v) == "sp",
    ),
    Rule(
        "vegetation.dynroot_hydrstress_exclusive",
        "use_dynroot and use_hydrstress can NOT both be on",
        lambda v: v.is_true("use_dynroot") and v.is_true("use_hydrstress"),
    ),
    Rule(
        "vegetation.flexiblecn_requires_cn",
        "use_flexibleCN can ONLY be set if CN is on",
        lambda v: v.is_true("use_flexiblecn") and not v.is_true("use_cn"),
    ),
    Rule(
        "vegetation.carbon_resp_opt_with_fun",
        "carbon_resp_opt should NOT be set to 1 when FUN is also on",
        lambda v: _eq(v, "carbon_resp_opt", 1) and v.is_true("use_fun"),
    ),
    # Uso do solo
    Rule(
        "landuse.transient_excludes_cndv",
        "dynamic PFTs (flanduse_timeseries) are incompatible with dynamic vegetation (use_cndv)",
        _transient_with_cndv,
    ),
    # Glaciares
    Rule(
        "glacier.maxpatch_glcmec_matches_glc_nec",
        "maxpatch_glcmec must be the same as glc_nec",
        _glcmec_mismatch,
    ),
    Rule(
        "glacier.glc_nec_positive",
        "glc_nec must be at least 1",
        _glc_nec_positive,
    ),
    # Condições iniciais
    Rule(
        "init.use_init_interp_requires_finidat",
        "use_init_interp is set but finidat is blank",
        _interp_without_finidat,
    ),
    # Neve
    Rule(
        "snow.vionnet_forbids_tfactor",
        "overburden_compress_tfactor is only used with snow_overburden_compaction_method Anderson1976",
        lambda v: str(v.value("snow_overburden_compaction_method") or "") == "Vionnet2012"
        and v.is_set("overburden_compress_tfactor"),
    ),
    # Forçante atmosférica
    Rule(
        "atm.longwave_requires_downscale",
        "lapse_rate_longwave and longwave_downscaling_limit can only be set when glcmec_downscale_longwave is true",
        _longwave_without_downscale,
    ),
    Rule(
        "atm.precip_repartition_requires_flag",
        "precip_repartition thresholds can only be set when repartition_rain_snow is true",
        _repartition_without_flag,
    ),
    # CO2
    Rule(
        "co2.ppmv_positive",
        "co2_ppmv must be greater than zero for a constant co2_type",
        _co2_ppmv_nonpositive,
    ),
)

_BY_NAME = {r.name: r for r in RULES}


def rule_names(*prefixes: str) -> List[str]:
    """Nomes das regras com os prefixos dados, na ordem da tabela."""
    return [r.name for r in RULES if not prefixes or r.name.startswith(prefixes)]


def first_violation(view: RuleView, names: Optional[Sequence[str]] = None) -> Optional[Rule]:
    selected = RULES if names is None else [_BY_NAME[n] for n in names]
    for rule in selected:
        if rule.violated(view):
            return rule
    return None


def raise_for_rule(rule: Rule) -> None:
    raise ConsistencyError(
        message=f"{rule.message} [{rule.name}]",
        details={"rule": rule.name},
    )


def enforce(view: RuleView, *names: str) -> None:
    """Avalia as regras nomeadas (ou todas, sem nomes) e aborta na primeira violada."""
    rule = first_violation(view, list(names) if names else None)
    if rule is not None:
        raise_for_rule(rule)
