# src/nml_resolver/core/defaults/loader.py
"""
Leitura de fontes de defaults (YAML/JSON).

Formato esperado (v1):

defaults:
  dtime:
    - value: 1800
    - value: 3600
      when: {hgrid: 10x15}
  use_cn:
    - value: false
      when: {bgc_mode: sp}
    - value: true
      when: {bgc_mode: bgc}
  glc_nec: 10          # atalho: escalar = entrada incondicional

A ordem das entradas (dentro do arquivo e entre arquivos) é preservada e
usada como desempate pelo DefaultsCatalog.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from nml_resolver.core.config.errors import ConfigError
from nml_resolver.core.config.loader import load_source_file
from nml_resolver.core.defaults.catalog import DefaultEntry, normalize_predicate
from nml_resolver.core.exceptions import SchemaError, SourceIOError
from nml_resolver.core.values import normalize_name


def _fail(msg: str, *, source: str) -> SchemaError:
    return SchemaError(message=f"{source}: {msg}", details={"source": source})


def parse_defaults_mapping(
    data: Dict[str, Any],
    *,
    source: str = "<memory>",
    schema: Any = None,
    start_order: int = 0,
) -> List[DefaultEntry]:
    """Converte o bloco `defaults:` de uma fonte já carregada em entradas ordenadas."""
    block = data.get("defaults") or {}
    if not isinstance(block, dict):
        raise _fail("defaults must be a mapping", source=source)

    entries: List[DefaultEntry] = []
    order = start_order
    for var, decl in block.items():
        name = normalize_name(var)
        if schema is not None and not schema.has(name):
            raise _fail(f"default given for undeclared variable '{name}'", source=source)

        items = decl if isinstance(decl, list) else [{"value": decl}]
        for i, item in enumerate(items):
            if not isinstance(item, dict) or "value" not in item:
                raise _fail(f"defaults.{name}[{i}] must be a mapping with 'value'", source=source)
            when = item.get("when") or {}
            if not isinstance(when, dict):
                raise _fail(f"defaults.{name}[{i}].when must be a mapping", source=source)
            entries.append(
                DefaultEntry(
                    variable=name,
                    predicate=normalize_predicate(when),
                    value=item["value"],
                    order=order,
                    source=source,
                )
            )
            order += 1
    return entries


def load_default_entries(
    sources: Sequence[Union[str, Path]],
    *,
    schema: Optional[Any] = None,
) -> List[DefaultEntry]:
    """
    Carrega as fontes na ordem dada; fontes posteriores vencem empates.

    Raises:
        SourceIOError: Fonte ausente ou ilegível.
        SchemaError: Estrutura inválida ou variável não declarada.
    """
    entries: List[DefaultEntry] = []
    for src in sources:
        try:
            data = load_source_file(src)
        except ConfigError as e:
            raise SourceIOError(
                message=f"Cannot load defaults source {src}: {e}",
                details={"source": str(src)},
            ) from e
        entries.extend(
            parse_defaults_mapping(data, source=str(src), schema=schema, start_order=len(entries))
        )
    return entries
