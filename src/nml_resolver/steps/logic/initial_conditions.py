# src/nml_resolver/steps/logic/initial_conditions.py
"""
Seleção do arquivo de condições iniciais (`finidat`).

Algoritmo:
    1. Início `cold`: `finidat` recebe o sentinela em branco (um
       `finidat` explícito é descartado com warning) e não há busca.
    2. `finidat` explícito em branco fora de um início `cold` é erro.
    3. Sem `finidat`: busca no catálogo por grade, física, dataset de
       superfície, flags BGC e data inicial (MMDD quando o ano é
       ignorado; data completa em runs transientes).
    4. Sem match: consulta `init_interp_sim_years` /
       `init_interp_how_close`; um ano catalogado dentro da tolerância
       substitui `sim_year`, `use_init_interp` é resolvido e, se ligado,
       `init_interp_attributes` refina a consulta para uma nova tentativa.
    5. No máximo duas tentativas. Na segunda falha `use_init_interp`
       volta ao valor inicial.
    6. Sem arquivo: `startup` exige um (NotFoundError); os demais tipos
       seguem com `finidat` em branco.

Invariantes:
    - `use_init_interp` ligado com `finidat` em branco é ConsistencyError
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from nml_resolver.core.exceptions import NotFoundError, ValidationError
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.core.rules import BGC_TOGGLES
from nml_resolver.core.values import BLANK, is_blank, split_list, unquote, value_is_true
from nml_resolver.steps.base import ResolutionStep

MAX_TRIES = 2

_ATTRIBUTE_PAIR_RE = re.compile(r"^([a-z_]+)=([a-z._0-9]+)$")


def parse_interp_attributes(text: Any) -> Dict[str, str]:
    """
    `"hgrid=0.9x1.25 maxpft=17"` → `{"hgrid": "0.9x1.25", "maxpft": "17"}`.

    Raises:
        ValidationError: Token fora do formato `chave=valor`.
    """
    pairs: Dict[str, str] = {}
    if is_blank(text):
        return pairs
    for token in unquote(str(text)).split():
        m = _ATTRIBUTE_PAIR_RE.match(token)
        if not m:
            raise ValidationError(
                message=f"Problem interpreting init_interp_attributes token {token!r}",
                details={"variable": "init_interp_attributes", "value": token},
                hint="Use space separated key=value pairs",
            )
        pairs[m.group(1)] = m.group(2)
    return pairs


@dataclass
class InitialConditionsStep(ResolutionStep):
    id: str = "logic.initial_conditions"
    kind: StepKind = StepKind.DEFAULT
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["logic.surface_dataset", "logic.start_type"]

    def _settings(self, ctx: RunContext, start_ymd: int) -> Dict[str, Any]:
        fsurdat = ctx.value("fsurdat")
        settings: Dict[str, Any] = {
            "hgrid": ctx.flags["res"],
            "phys": ctx.flags["phys"],
            "fsurdat": None if is_blank(fsurdat) else posixpath.basename(str(fsurdat)),
            "mask": ctx.flags["mask"],
            "maxpft": ctx.flags["maxpft"],
            "glc_nec": ctx.flags["glc_nec"],
            "use_cn": ctx.flags["use_cn"],
            "use_cndv": ctx.flags["use_cndv"],
        }
        for toggle in BGC_TOGGLES:
            settings[toggle] = ctx.flags[toggle]

        transient = ctx.flags["flanduse_timeseries"] != "null"
        ignore_year = bool(ctx.option("ignore_ic_year")) or not transient
        if not transient:
            settings["sim_year"] = ctx.flags["sim_year"]
        if not ctx.option("ignore_ic_date"):
            if ignore_year:
                settings["ic_md"] = "%04d" % (start_ymd % 10000)
            else:
                settings["ic_ymd"] = str(start_ymd)
        return settings

    def _retry_settings(self, ctx: RunContext, settings: Dict[str, Any], start_year: int) -> None:
        settings.pop("ic_ymd", None)
        settings.pop("ic_md", None)

        sim_years = self.default(ctx, "init_interp_sim_years")
        how_close = self.default(ctx, "init_interp_how_close")
        years = sim_years if isinstance(sim_years, list) else split_list(str(sim_years))
        for year in years:
            if abs(start_year - int(year)) < int(how_close):
                settings["sim_year"] = str(year)

    def resolve(self, ctx: RunContext) -> Optional[str]:
        clm_start = ctx.flags["clm_start_type"]

        if clm_start == "cold":
            if ctx.is_set("finidat") and not is_blank(ctx.value("finidat")):
                self.warn(
                    ctx,
                    "setting finidat is incompatible with a cold start; "
                    "overriding it with a blank file meaning arbitrary initial conditions",
                )
                ctx.set_value("finidat", BLANK)
            self.default(ctx, "finidat", value=BLANK, no_abspath=True)
            self.enforce(ctx, "init.use_init_interp_requires_finidat")
            return "cold start"

        if ctx.is_set("finidat"):
            if is_blank(ctx.value("finidat")):
                raise ValidationError(
                    message=(
                        "finidat is set to blank, which signals arbitrary initial conditions, "
                        "but the start type is not cold"
                    ),
                    details={"variable": "finidat", "clm_start_type": clm_start},
                    hint="Use --clm-start-type cold and remove finidat from the namelist input",
                )
            self.enforce(ctx, "init.use_init_interp_requires_finidat")
            return "finidat set explicitly"

        start_ymd = int(self.default(ctx, "start_ymd", sim_year=ctx.flags["sim_year"]))
        start_year = start_ymd // 10000
        settings = self._settings(ctx, start_ymd)

        interp_initial = ctx.value("use_init_interp")
        if interp_initial is None:
            interp_initial = False
        settings["use_init_interp"] = interp_initial

        finidat = None
        for attempt in range(1, MAX_TRIES + 1):
            finidat = self.default(ctx, "finidat", nofail=True, **settings)
            if finidat is not None:
                break

            self._retry_settings(ctx, settings, start_year)
            use_interp = self.default(
                ctx,
                "use_init_interp",
                nofail=True,
                use_cndv=ctx.flags["use_cndv"],
                phys=ctx.flags["phys"],
                sim_year=settings.get("sim_year"),
            )
            settings["use_init_interp"] = use_interp
            if attempt > 1:
                ctx.set_value("use_init_interp", interp_initial)

            if not value_is_true(ctx.value("use_init_interp")):
                if clm_start == "startup":
                    raise NotFoundError(
                        message=(
                            "clm_start_type is startup so an initial conditions (finidat) file is "
                            "required, but can't find one without use_init_interp being set to true"
                        ),
                        details={"variable": "finidat", "attributes": {k: str(v) for k, v in settings.items()}},
                        hint="Set finidat in the namelist input or use --clm-start-type cold",
                    )
                break

            attributes = self.default(
                ctx,
                "init_interp_attributes",
                nofail=True,
                sim_year=settings.get("sim_year"),
                use_cndv=ctx.flags["use_cndv"],
                glc_nec=ctx.flags["glc_nec"],
                use_cn=ctx.flags["use_cn"],
            )
            settings.update(parse_interp_attributes(attributes))
            self.debug(ctx, f"retrying finidat lookup with interpolation (attempt {attempt + 1})")

        if finidat is None:
            ctx.set_value("finidat", BLANK)
            self.info(ctx, "No initial conditions file; starting from arbitrary initial conditions")
        else:
            self.info(ctx, f"Initial conditions file: {finidat}")

        self.enforce(ctx, "init.use_init_interp_requires_finidat")
        return None
