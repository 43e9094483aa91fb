# src/nml_resolver/core/defaults/catalog.py
"""
Catálogo de defaults com seleção best-fit por atributos.

Uma entrada é a tripla (variável, predicado, valor). O predicado é um
mapa atributo → valor esperado (ex.: `hgrid`, `mask`, `bgc_mode`,
`phys`, `sim_year`); predicado vazio casa incondicionalmente.

Algoritmo de lookup (`get_value`):
    1. Coletar todas as entradas da variável
    2. Descartar entradas cujo predicado cite um atributo ausente na
       consulta ou com valor diferente (comparação case-insensitive de
       tokens normalizados)
    3. Entre as sobreviventes, vence a de predicado mais específico
       (maior número de atributos)
    4. Empate de especificidade: vence a carregada por último
    5. Nenhuma sobrevivente: retorna `None` (o chamador decide se é fatal)

Decisões arquiteturais:
    - Uma única função de lookup para todas as variáveis
    - `base_attributes` (ex.: `phys`) é combinado por baixo de toda
      consulta; atributos explícitos da consulta têm prioridade
    - O catálogo é imutável; `with_base_attributes` devolve uma cópia rasa

Limites explícitos:
    - Não converte tipos (responsabilidade do SchemaCatalog)
    - Não prefixa caminhos de input data
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from nml_resolver.core.values import attribute_token, normalize_name


@dataclass(frozen=True)
class DefaultEntry:
    variable: str
    predicate: Tuple[Tuple[str, str], ...]
    value: Any
    order: int = 0
    source: str = ""

    @property
    def specificity(self) -> int:
        return len(self.predicate)

    def matches(self, query: Mapping[str, str]) -> bool:
        for attr, expected in self.predicate:
            actual = query.get(attr)
            if actual is None or actual != expected:
                return False
        return True


def normalize_predicate(predicate: Optional[Mapping[str, Any]]) -> Tuple[Tuple[str, str], ...]:
    items = []
    for k, v in (predicate or {}).items():
        token = attribute_token(v)
        items.append((normalize_name(k), "" if token is None else token))
    return tuple(sorted(items))


def normalize_query(query: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for k, v in (query or {}).items():
        token = attribute_token(v)
        if token is not None:
            out[normalize_name(k)] = token
    return out


@dataclass(frozen=True)
class DefaultsCatalog:
    """Coleção ordenada e imutável de entradas de default."""

    entries: Tuple[DefaultEntry, ...] = ()
    base_attributes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[Tuple[str, Mapping[str, Any], Any]],
        *,
        base_attributes: Optional[Mapping[str, Any]] = None,
    ) -> "DefaultsCatalog":
        """Constrói a partir de triplas (variável, predicado, valor) na ordem de carga."""
        built = tuple(
            DefaultEntry(
                variable=normalize_name(var),
                predicate=normalize_predicate(pred),
                value=value,
                order=i,
            )
            for i, (var, pred, value) in enumerate(entries)
        )
        return cls(entries=built, base_attributes=dict(base_attributes or {}))

    @classmethod
    def load(
        cls,
        sources: Sequence[Any],
        *,
        schema: Any = None,
        base_attributes: Optional[Mapping[str, Any]] = None,
    ) -> "DefaultsCatalog":
        from nml_resolver.core.defaults.loader import load_default_entries

        return cls(
            entries=tuple(load_default_entries(sources, schema=schema)),
            base_attributes=dict(base_attributes or {}),
        )

    def with_base_attributes(self, **attributes: Any) -> "DefaultsCatalog":
        merged = dict(self.base_attributes)
        merged.update(attributes)
        return DefaultsCatalog(entries=self.entries, base_attributes=merged)

    # -----------------------------
    # Lookup
    # -----------------------------
    def _candidates(self, variable: str) -> List[DefaultEntry]:
        key = normalize_name(variable)
        return [e for e in self.entries if e.variable == key]

    def best_entry(self, variable: str, query: Optional[Mapping[str, Any]] = None) -> Optional[DefaultEntry]:
        effective = normalize_query(self.base_attributes)
        effective.update(normalize_query(query))

        best: Optional[DefaultEntry] = None
        for entry in self._candidates(variable):
            if not entry.matches(effective):
                continue
            # >= para que a última carregada vença empates
            if best is None or (entry.specificity, entry.order) >= (best.specificity, best.order):
                best = entry
        return best

    def get_value(self, variable: str, query: Optional[Mapping[str, Any]] = None) -> Any:
        entry = self.best_entry(variable, query)
        return None if entry is None else entry.value

    def has_default(self, variable: str) -> bool:
        return bool(self._candidates(variable))

    def variables(self) -> List[str]:
        seen: Dict[str, None] = {}
        for e in self.entries:
            seen.setdefault(e.variable, None)
        return list(seen)
