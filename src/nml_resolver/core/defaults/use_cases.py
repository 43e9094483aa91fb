# src/nml_resolver/core/defaults/use_cases.py
"""
Use-cases: pacotes nomeados de defaults para um experimento.

Cada use-case é um arquivo `<nome>.yaml` (ou `.json`) no diretório de
use-cases, com o mesmo formato de uma fonte de defaults mais uma
descrição legível:

description: "Conditions to simulate 2000 land-use"
defaults:
  co2_type: constant
  sim_year:
    - value: 2000

Decisões arquiteturais:
    - Entradas de use-case NÃO entram no DefaultsCatalog global; o
      use-case é resolvido isoladamente e mesclado como fonte própria
    - Nomes seguem convenções fixas (`1850-2100_rcp8.5_transient`,
      `20thC_transient`, `2000_control`, `stdurbpt_pd`)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from nml_resolver.core.config.errors import ConfigError
from nml_resolver.core.config.loader import load_source_file
from nml_resolver.core.defaults.catalog import DefaultsCatalog
from nml_resolver.core.defaults.loader import parse_defaults_mapping
from nml_resolver.core.exceptions import SourceIOError, ValidationError

_DESC = r"[a-zA-Z0-9]*"
_RCP = r"rcp[0-9.]+"
_TRANSIENT_RE = re.compile(r"^[0-9]+-[0-9]+([a-zA-Z0-9_.]*)_transient$")
_20THC_RE = re.compile(r"^20thC([a-zA-Z0-9_.]*)_transient$")
_CONTROL_RE = re.compile(rf"^([0-9]+)_*({_DESC})_control$")
_PD_RE = re.compile(rf"^({_DESC})_pd$")
_TRANSIENT_SUFFIX_RE = (re.compile(rf"^_({_RCP})_*({_DESC})$"), re.compile(rf"^_*({_DESC})$"))

_SUFFIXES = (".yaml", ".yml", ".json")


def is_valid_use_case_name(name: str) -> bool:
    for pattern in (_TRANSIENT_RE, _20THC_RE):
        m = pattern.match(name)
        if m:
            return any(s.match(m.group(1)) for s in _TRANSIENT_SUFFIX_RE)
    return bool(_CONTROL_RE.match(name) or _PD_RE.match(name))


def check_use_case_name(name: str) -> None:
    if not is_valid_use_case_name(name):
        raise ValidationError(
            message=f"Bad use_case name {name}, it does not follow the naming conventions",
            details={"variable": "use_case", "value": name},
            hint="Use YEAR_desc_control, Y1-Y2[_rcpX]_desc_transient, 20thC[_rcpX]_desc_transient or desc_pd",
        )


@dataclass(frozen=True)
class UseCase:
    name: str
    description: str
    defaults: DefaultsCatalog

    def resolve(self, query: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Valor best-fit de cada variável do use-case; variáveis sem match ficam de fora."""
        resolved: Dict[str, Any] = {}
        for var in self.defaults.variables():
            entry = self.defaults.best_entry(var, query)
            if entry is not None:
                resolved[var] = entry.value
        return resolved


class UseCaseCatalog:
    """Acesso somente leitura ao diretório de use-cases."""

    def __init__(self, directory: Optional[Union[str, Path]]):
        self.directory = Path(directory) if directory else None

    def _path_for(self, name: str) -> Optional[Path]:
        if self.directory is None:
            return None
        for suffix in _SUFFIXES:
            p = self.directory / f"{name}{suffix}"
            if p.is_file():
                return p
        return None

    def names(self) -> List[str]:
        if self.directory is None or not self.directory.is_dir():
            return []
        return sorted({p.stem for p in self.directory.iterdir() if p.suffix.lower() in _SUFFIXES})

    def load(self, name: str, *, schema: Any = None) -> UseCase:
        path = self._path_for(name)
        if path is None:
            raise SourceIOError(
                message=f"Use case '{name}' does not exist",
                details={"use_case": name, "available": self.names()},
                hint="Run with --use-case list to see the available use cases",
            )
        try:
            data = load_source_file(path)
        except ConfigError as e:
            raise SourceIOError(message=f"Cannot load use case {path}: {e}", details={"use_case": name}) from e

        entries = parse_defaults_mapping(data, source=str(path), schema=schema)
        return UseCase(
            name=name,
            description=str(data.get("description", "") or "").strip(),
            defaults=DefaultsCatalog(entries=tuple(entries)),
        )

    def describe(self) -> Dict[str, str]:
        """Nome → descrição, para o modo de listagem."""
        return {name: self.load(name).description for name in self.names()}
