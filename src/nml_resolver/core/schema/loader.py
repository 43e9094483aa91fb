# src/nml_resolver/core/schema/loader.py
"""
Leitura de fontes de definição de namelist (YAML/JSON).

Formato esperado (v1):

groups:
  clm_inparm:
    dtime:
      type: integer
      doc: "Time step (seconds)"
    fsurdat:
      type: char
      input_pathname: abs
    albice:
      type: real
      array: true
  default_settings:
    res:
      type: char
      valid_values: ["1x1", "2x2"]

A validação estrutural é feita à mão (sem jsonschema), com mensagens
diretas apontando o caminho do campo inválido.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from nml_resolver.core.config.errors import ConfigError
from nml_resolver.core.config.loader import load_source_file
from nml_resolver.core.exceptions import SchemaError
from nml_resolver.core.schema.catalog import (
    PATHNAME_ABS,
    PATHNAME_NONE,
    PATHNAME_REL_PREFIX,
    VariableDescriptor,
)
from nml_resolver.core.values import TYPES, normalize_name


def _expect(cond: bool, msg: str, *, source: str) -> None:
    if not cond:
        raise SchemaError(message=f"{source}: {msg}", details={"source": source})


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def parse_schema_mapping(data: Dict[str, Any], *, source: str = "<memory>") -> List[VariableDescriptor]:
    """Converte o conteúdo já carregado de uma fonte de schema em descritores."""
    groups = data.get("groups")
    _expect(isinstance(groups, dict) and bool(groups), "groups must be a non-empty mapping", source=source)

    out: List[VariableDescriptor] = []
    for group, variables in groups.items():
        _expect(_is_non_empty_str(group), "group names must be non-empty strings", source=source)
        _expect(isinstance(variables, dict), f"groups.{group} must be a mapping", source=source)

        for name, decl in variables.items():
            where = f"groups.{group}.{name}"
            _expect(_is_non_empty_str(name), f"{where}: variable name must be a string", source=source)
            _expect(isinstance(decl, dict), f"{where} must be a mapping", source=source)

            vtype = decl.get("type")
            _expect(vtype in TYPES, f"{where}.type must be one of {TYPES}", source=source)

            valid_values = decl.get("valid_values")
            if valid_values is not None:
                _expect(isinstance(valid_values, list), f"{where}.valid_values must be a list", source=source)
                valid_values = tuple(valid_values)

            pattern = decl.get("pattern")
            if pattern is not None:
                _expect(_is_non_empty_str(pattern), f"{where}.pattern must be a string", source=source)

            pathname = decl.get("input_pathname", PATHNAME_NONE) or PATHNAME_NONE
            _expect(
                pathname in (PATHNAME_NONE, PATHNAME_ABS) or str(pathname).startswith(PATHNAME_REL_PREFIX),
                f"{where}.input_pathname must be none, abs or rel:<variable>",
                source=source,
            )
            if pathname != PATHNAME_NONE:
                _expect(vtype == "char", f"{where}: pathname variables must be char", source=source)

            array = decl.get("array", False)
            _expect(isinstance(array, bool), f"{where}.array must be boolean", source=source)

            out.append(
                VariableDescriptor(
                    name=normalize_name(name),
                    group=str(group),
                    type=vtype,
                    array=array,
                    valid_values=valid_values,
                    pattern=pattern,
                    pathname=str(pathname),
                    doc=str(decl.get("doc", "") or ""),
                )
            )
    return out


def load_schema_descriptors(sources: Sequence[Union[str, Path]]) -> List[VariableDescriptor]:
    """
    Carrega todas as fontes, na ordem dada.

    Raises:
        SchemaError: Fonte ausente, ilegível ou estruturalmente inválida.
    """
    _expect(len(sources) > 0, "at least one schema source is required", source="<schema>")

    descriptors: List[VariableDescriptor] = []
    for src in sources:
        try:
            data = load_source_file(src)
        except ConfigError as e:
            raise SchemaError(
                message=f"Cannot load schema source {src}: {e}",
                details={"source": str(src)},
            ) from e
        descriptors.extend(parse_schema_mapping(data, source=str(src)))
    return descriptors
