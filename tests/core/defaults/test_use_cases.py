# tests/core/defaults/test_use_cases.py
"""
Testes do catálogo de use-cases: convenção de nomes, carga isolada do
catálogo global e resolução best-fit por atributos do experimento.
"""

from pathlib import Path

import pytest

from nml_resolver.core.defaults.use_cases import UseCaseCatalog, check_use_case_name, is_valid_use_case_name
from nml_resolver.core.exceptions import SchemaError, SourceIOError, ValidationError


@pytest.mark.parametrize(
    "name",
    [
        "2000_control",
        "1850_control",
        "2000_glacierMEC_control",
        "20thC_transient",
        "20thC_rcp8.5_transient",
        "1850-2100_rcp8.5_transient",
        "1850-2000_glacierMEC_transient",
        "stdurbpt_pd",
    ],
)
def test_valid_use_case_names(name):
    assert is_valid_use_case_name(name)


@pytest.mark.parametrize("name", ["control", "2000-control", "my_experiment", "20thC", "1850-2100_rcp8.5"])
def test_invalid_use_case_names(name):
    assert not is_valid_use_case_name(name)
    with pytest.raises(ValidationError):
        check_use_case_name(name)


def test_load_and_resolve(tmp_path: Path, write_yaml, mini_schema):
    write_yaml(
        "use_cases/2000_test_control.yaml",
        {
            "description": "  A test control  ",
            "defaults": {
                "dtime": 1800,
                "co2_ppmv": [
                    {"value": 367.0, "when": {"sim_year": 2000}},
                    {"value": 284.7, "when": {"sim_year": 1850}},
                ],
            },
        },
    )
    catalog = UseCaseCatalog(tmp_path / "use_cases")

    use_case = catalog.load("2000_test_control", schema=mini_schema)

    assert use_case.description == "A test control"
    assert use_case.resolve({"sim_year": "1850"}) == {"dtime": 1800, "co2_ppmv": 284.7}
    # variáveis sem entrada casando ficam de fora
    assert use_case.resolve({"sim_year": "2010"}) == {"dtime": 1800}


def test_use_case_for_undeclared_variable(tmp_path: Path, write_yaml, mini_schema):
    write_yaml("use_cases/bad_pd.yaml", {"defaults": {"not_declared": 1}})
    with pytest.raises(SchemaError):
        UseCaseCatalog(tmp_path / "use_cases").load("bad_pd", schema=mini_schema)


def test_missing_use_case_lists_the_available_ones(tmp_path: Path, write_yaml):
    write_yaml("use_cases/2000_control.yaml", {"description": "x", "defaults": {}})
    catalog = UseCaseCatalog(tmp_path / "use_cases")

    with pytest.raises(SourceIOError) as exc:
        catalog.load("1850_control")
    assert exc.value.details["available"] == ["2000_control"]


def test_catalog_without_directory_is_empty():
    assert UseCaseCatalog(None).names() == []


def test_bundled_use_cases(bundled_resolver):
    described = bundled_resolver.use_cases.describe()
    assert {"2000_control", "1850_control", "20thC_transient"} <= set(described)
    assert described["2000_control"] == "Conditions to simulate 2000 land-use"
