# tests/core/pipeline/test_add_default.py
"""
Testes de `add_default`, o único caminho de preenchimento por default.

Regras cobertas:
    1. Variável já definida → nada muda
    2. `value=` explícito tem prioridade sobre o catálogo
    3. Sem match → NotFoundError, ou `None` com `nofail=True`
    4. Caminhos `abs` relativos recebem o prefixo do input data
"""

import pytest

from nml_resolver.core.exceptions import NotFoundError
from nml_resolver.core.pipeline.fill import add_default, set_abs_filepath


def test_fills_from_the_catalog(make_context):
    ctx = make_context()
    assert add_default(ctx, "dtime", step_id="t", hgrid="2x2") == 3600
    assert ctx.value("dtime") == 3600


def test_existing_value_is_never_overwritten(make_context):
    ctx = make_context()
    ctx.set_value("dtime", 900)
    assert add_default(ctx, "dtime", step_id="t", hgrid="2x2") == 900
    assert add_default(ctx, "dtime", step_id="t", value=60) == 900


def test_explicit_value_wins_over_the_catalog(make_context):
    ctx = make_context()
    assert add_default(ctx, "dtime", step_id="t", value="1200") == 1200


def test_missing_default_is_fatal_unless_nofail(make_context):
    ctx = make_context()
    with pytest.raises(NotFoundError) as exc:
        add_default(ctx, "use_cn", step_id="t")
    assert exc.value.details["variable"] == "use_cn"
    assert exc.value.details["attributes"] == {"phys": "clm5_0"}

    assert add_default(ctx, "use_cn", step_id="t", nofail=True) is None
    assert not ctx.is_set("use_cn")


def test_abs_pathnames_get_the_inputdata_root(make_context):
    ctx = make_context(options={"csmdata": "/inputdata"})
    assert add_default(ctx, "fsurdat", step_id="t", hgrid="1x1") == "/inputdata/lnd/surfdata_1x1.nc"
    assert add_default(ctx, "finidat", step_id="t", value="init.nc", no_abspath=True) == "init.nc"


def test_set_abs_filepath():
    assert set_abs_filepath("lnd/surf.nc", "/inputdata") == "/inputdata/lnd/surf.nc"
    assert set_abs_filepath("/abs/surf.nc", "/inputdata") == "/abs/surf.nc"
    assert set_abs_filepath("$DIN_LOC_ROOT/surf.nc", "/inputdata") == "$DIN_LOC_ROOT/surf.nc"
    assert set_abs_filepath(" ", "/inputdata") == " "
    assert set_abs_filepath("lnd/surf.nc", "") == "lnd/surf.nc"
