# tests/steps/test_sources_and_scenarios.py
"""
Testes de Steps sobre catálogos mínimos: fontes do usuário (inline e
arquivos), preenchimento condicionado por atributos e opções de
acoplamento da linha de comando.

Cenários de referência:
    - `bgc_mode = bgc` inline → `res = 1x1` e `use_cn = .true.`
    - `bgc_mode = sp` inline → `use_cn = .false.`, sem erro
    - `--l-ncpl 48` (dtime = 1800) com `dtime = 3600` inline → ConflictError em `dtime`

Decisões arquiteturais:
    - Pipelines reduzidos são montados com os Steps reais e rodados pelo
      Resolver, que inclui validação e congelamento
"""

from pathlib import Path

import pytest

from nml_resolver.core.exceptions import ConflictError, SourceIOError, ValidationError
from nml_resolver.resolver import Resolver
from nml_resolver.steps.base import FillDefaultsStep
from nml_resolver.steps.cmdline.run import Co2OptionsStep, CouplingIntervalStep
from nml_resolver.steps.sources.namelist import InfileNamelistStep, InlineNamelistStep


def _by_bgc_mode(ctx):
    return {"bgc_mode": ctx.value("bgc_mode")}


def _resolver(schema, defaults, *extra_steps):
    steps = [InlineNamelistStep(), InfileNamelistStep(), *extra_steps]
    return Resolver(schema=schema, defaults=defaults, steps=steps)


def _bgc_fill():
    return FillDefaultsStep(
        id="logic.bgc",
        variables=("res", "use_cn"),
        attributes=_by_bgc_mode,
        depends_on=["source.infiles"],
    )


def test_inline_bgc_mode_selects_use_cn_true(mini_schema, mini_defaults):
    result = _resolver(mini_schema, mini_defaults, _bgc_fill()).resolve({"namelist": "bgc_mode = 'bgc'"})

    assert result.document.value("res") == "1x1"
    assert result.document.value("use_cn") is True
    assert result.document.frozen


def test_inline_sp_mode_selects_use_cn_false(mini_schema, mini_defaults):
    result = _resolver(mini_schema, mini_defaults, _bgc_fill()).resolve({"namelist": "bgc_mode = 'sp'"})

    assert result.document.value("use_cn") is False
    assert result.warnings == {}


def test_coupling_interval_conflicts_with_inline_dtime(mini_schema, mini_defaults):
    resolver = _resolver(mini_schema, mini_defaults, CouplingIntervalStep(depends_on=["source.infiles"]))

    with pytest.raises(ConflictError) as exc:
        resolver.resolve({"namelist": "dtime = 3600", "l_ncpl": 48})

    assert exc.value.details["variable"] == "dtime"
    assert exc.value.details["current"] == 3600
    assert exc.value.details["requested"] == 1800


def test_coupling_interval_sets_dtime(mini_schema, mini_defaults):
    resolver = _resolver(mini_schema, mini_defaults, CouplingIntervalStep(depends_on=["source.infiles"]))

    assert resolver.resolve({"l_ncpl": 24}).document.value("dtime") == 3600
    assert resolver.resolve({"l_ncpl": 48, "namelist": "dtime = 1800"}).document.value("dtime") == 1800
    assert not resolver.resolve({}).document.has("dtime")


@pytest.mark.parametrize("l_ncpl", [0, -4, 7])
def test_invalid_coupling_interval(mini_schema, mini_defaults, l_ncpl):
    resolver = _resolver(mini_schema, mini_defaults, CouplingIntervalStep(depends_on=["source.infiles"]))
    with pytest.raises(ValidationError) as exc:
        resolver.resolve({"l_ncpl": l_ncpl})
    assert exc.value.details["variable"] == "l_ncpl"


def test_co2_ppmv_option(mini_schema, mini_defaults):
    resolver = _resolver(mini_schema, mini_defaults, Co2OptionsStep(depends_on=["source.infiles"]))

    assert resolver.resolve({"co2_ppmv": 400}).document.value("co2_ppmv") == 400.0
    with pytest.raises(ValidationError):
        resolver.resolve({"co2_ppmv": 0})
    with pytest.raises(ConflictError):
        resolver.resolve({"co2_ppmv": 400, "namelist": "co2_ppmv = 367.0"})


def test_infiles_merge_in_listed_order(tmp_path: Path, mini_schema, mini_defaults):
    first = tmp_path / "user_nl_1"
    second = tmp_path / "user_nl_2"
    first.write_text("&clm_inparm\n dtime = 900\n/\n", encoding="utf-8")
    second.write_text("dtime = 1200\nuse_cn = .true.\n", encoding="utf-8")

    result = _resolver(mini_schema, mini_defaults).resolve({"infile": [str(first), str(second)]})

    assert result.document.value("dtime") == 900
    assert result.document.value("use_cn") is True


def test_inline_beats_infiles(tmp_path: Path, mini_schema, mini_defaults):
    infile = tmp_path / "user_nl"
    infile.write_text("dtime = 1200\n", encoding="utf-8")

    result = _resolver(mini_schema, mini_defaults).resolve({"namelist": "dtime = 600", "infile": str(infile)})

    assert result.document.value("dtime") == 600


def test_missing_infile(tmp_path: Path, mini_schema, mini_defaults):
    with pytest.raises(SourceIOError) as exc:
        _resolver(mini_schema, mini_defaults).resolve({"infile": str(tmp_path / "nope")})
    assert exc.value.details["file"].endswith("nope")


def test_sources_expand_environment_variables(mini_schema, mini_defaults):
    result = _resolver(mini_schema, mini_defaults).resolve(
        {"namelist": "fsurdat = '${DIN_LOC_ROOT}/lnd/surf.nc'"},
        {"DIN_LOC_ROOT": "/inputdata"},
    )
    assert result.document.value("fsurdat") == "/inputdata/lnd/surf.nc"


def test_step_results_are_reported(mini_schema, mini_defaults):
    result = _resolver(mini_schema, mini_defaults, _bgc_fill()).resolve({"namelist": "bgc_mode = 'sp'"})

    assert list(result.steps) == ["source.inline", "source.infiles", "logic.bgc"]
    assert result.steps["source.infiles"].summary == "no namelist files"
    assert result.steps["logic.bgc"].metrics == {"variables_set": 2}
