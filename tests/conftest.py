# tests/conftest.py
"""
Fixtures compartilhados para testes do nml-resolver.

Este módulo define fixtures reutilizáveis que fornecem:
- um schema mínimo e determinístico (poucas variáveis, quatro grupos)
- um catálogo de defaults mínimo com predicados por `bgc_mode`/`hgrid`
- uma fábrica de RunContext sobre catálogos arbitrários
- o Resolver com os catálogos empacotados, para testes ponta a ponta

Decisões arquiteturais:
    - Catálogos mínimos são declarados como YAML em memória e
      convertidos pelos mesmos parsers usados em produção
    - Fixtures que precisam de arquivos usam `tmp_path`
    - O Resolver empacotado é carregado uma vez por sessão (catálogos
      são imutáveis)

Invariantes:
    - Nenhuma fixture executa pipeline
    - Dados retornados são determinísticos e isolados por teste

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica de domínio
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest
import yaml

from nml_resolver.core.defaults.catalog import DefaultsCatalog
from nml_resolver.core.defaults.loader import parse_defaults_mapping
from nml_resolver.core.physics import CLM5_0
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.schema.catalog import SchemaCatalog
from nml_resolver.core.schema.loader import parse_schema_mapping
from nml_resolver.resolver import Resolver


MINI_SCHEMA_YAML = """
groups:
  default_settings:
    res:
      type: char
      valid_values: ["1x1", "2x2"]
    bgc_mode:
      type: char
      valid_values: ["sp", "bgc"]
  clm_inparm:
    use_cn:
      type: logical
    dtime:
      type: integer
      doc: "Time step (seconds)"
    origflag:
      type: integer
      valid_values: [0, 1]
    subgridflag:
      type: integer
      valid_values: [0, 1]
    fsurdat:
      type: char
      input_pathname: abs
    finidat:
      type: char
      input_pathname: abs
    co2_ppmv:
      type: real
      doc: "Atmospheric CO2 concentration (ppmv)"
    albice:
      type: real
      array: true
      doc: >
        Visible and near infrared
        albedo of glacier ice
  datm_stream:
    stream_dir:
      type: char
      input_pathname: abs
    stream_file:
      type: char
      input_pathname: rel:stream_dir
"""

MINI_DEFAULTS_YAML = """
defaults:
  res: "1x1"
  use_cn:
    - value: false
      when: {bgc_mode: sp}
    - value: true
      when: {bgc_mode: bgc}
  dtime:
    - value: 1800
    - value: 3600
      when: {hgrid: "2x2"}
  fsurdat:
    - value: lnd/surfdata_1x1.nc
      when: {hgrid: "1x1"}
    - value: lnd/surfdata_1x1_sp.nc
      when: {hgrid: "1x1", bgc_mode: sp}
"""


@pytest.fixture
def mini_schema() -> SchemaCatalog:
    """Schema mínimo; ver `MINI_SCHEMA_YAML`."""
    return SchemaCatalog(parse_schema_mapping(yaml.safe_load(MINI_SCHEMA_YAML), source="mini_schema"))


@pytest.fixture
def mini_defaults(mini_schema: SchemaCatalog) -> DefaultsCatalog:
    """Defaults mínimos, com `phys=clm5_0` combinado por baixo de toda consulta."""
    entries = parse_defaults_mapping(
        yaml.safe_load(MINI_DEFAULTS_YAML), source="mini_defaults", schema=mini_schema
    )
    return DefaultsCatalog(entries=tuple(entries), base_attributes={"phys": "clm5_0"})


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, Any], Path]:
    """Grava `data` (dict ou texto YAML) em `tmp_path/name` e devolve o caminho."""

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        text = data if isinstance(data, str) else yaml.safe_dump(data, sort_keys=False)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_context(mini_schema: SchemaCatalog, mini_defaults: DefaultsCatalog) -> Callable[..., RunContext]:
    """Fábrica de RunContext; por padrão sobre os catálogos mínimos."""

    def _make(
        *,
        schema: Optional[SchemaCatalog] = None,
        defaults: Optional[DefaultsCatalog] = None,
        options: Optional[Dict[str, Any]] = None,
        env: Optional[Dict[str, str]] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> RunContext:
        return RunContext(
            run_id="test-run",
            created_at=datetime.now(timezone.utc),
            config=config or {},
            schema=schema or mini_schema,
            defaults=defaults or mini_defaults,
            options=dict(options or {}),
            env=dict(env or {}),
            physics=CLM5_0,
        )

    return _make


@pytest.fixture(scope="session")
def bundled_resolver() -> Resolver:
    """Resolver sobre os catálogos empacotados (física clm5_0)."""
    return Resolver.from_settings()


@pytest.fixture
def base_options() -> Dict[str, Any]:
    """Opções mínimas para um run completo: a fração de terra é obrigatória."""
    return {"lnd_frac": "/data/domain.lnd.nc"}
