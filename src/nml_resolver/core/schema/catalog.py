# src/nml_resolver/core/schema/catalog.py
"""
Catálogo imutável de definição de variáveis de namelist.

Cada variável declarada possui exatamente um descritor com:
    - grupo (seção do namelist à qual pertence)
    - tipo ∈ {char, integer, real, logical}, escalar ou com dimensão
    - conjunto de valores permitidos ou padrão regex (opcional)
    - tipo de caminho: `none`, `abs` ou `rel:<outra variável>`

Decisões arquiteturais:
    - Nomes são normalizados para minúsculas (namelists são case-insensitive)
    - Definições duplicadas, mesmo em fontes distintas, são erro de schema
    - O catálogo é construído uma vez por execução e nunca mutado

Invariantes:
    - Toda variável pertence a exatamente um grupo
    - `is_valid_value` nunca levanta exceção; `check_value` levanta
      `ValidationError` nomeando variável, valor e conjunto permitido

Limites explícitos:
    - Não lê arquivos (ver `nml_resolver.core.schema.loader`)
    - Não conhece defaults nem regras de consistência
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from nml_resolver.core.exceptions import NotFoundError, SchemaError, ValidationError
from nml_resolver.core.values import coerce, normalize_name

PATHNAME_NONE = "none"
PATHNAME_ABS = "abs"
PATHNAME_REL_PREFIX = "rel:"


@dataclass(frozen=True)
class VariableDescriptor:
    name: str
    group: str
    type: str
    array: bool = False
    valid_values: Optional[Tuple[Any, ...]] = None
    pattern: Optional[str] = None
    pathname: str = PATHNAME_NONE
    doc: str = ""

    @property
    def is_string(self) -> bool:
        return self.type == "char"

    @property
    def is_pathname(self) -> bool:
        return self.pathname != PATHNAME_NONE

    @property
    def relative_to(self) -> Optional[str]:
        if self.pathname.startswith(PATHNAME_REL_PREFIX):
            return normalize_name(self.pathname[len(PATHNAME_REL_PREFIX):])
        return None


class SchemaCatalog:
    """Registro imutável de descritores de variáveis, indexado por nome."""

    def __init__(self, descriptors: Iterable[VariableDescriptor]):
        by_name: Dict[str, VariableDescriptor] = {}
        for d in descriptors:
            key = normalize_name(d.name)
            if key in by_name:
                raise SchemaError(
                    message=f"Variable '{key}' is defined more than once in the schema",
                    details={"variable": key, "groups": [by_name[key].group, d.group]},
                )
            by_name[key] = d
        self._by_name = by_name

    @classmethod
    def load(cls, sources: Sequence[Any]) -> "SchemaCatalog":
        """Constrói o catálogo a partir de uma lista ordenada de fontes de schema."""
        from nml_resolver.core.schema.loader import load_schema_descriptors

        return cls(load_schema_descriptors(sources))

    # -----------------------------
    # Metadados
    # -----------------------------
    def has(self, name: str) -> bool:
        return normalize_name(name) in self._by_name

    def descriptor(self, name: str) -> VariableDescriptor:
        key = normalize_name(name)
        if key not in self._by_name:
            raise SchemaError(
                message=f"Undeclared variable: {key}",
                details={"variable": key},
                hint="Check the spelling or add the variable to a schema source",
            )
        return self._by_name[key]

    def group_of(self, name: str) -> str:
        key = normalize_name(name)
        if key not in self._by_name:
            raise NotFoundError(
                message=f"No group found for variable: {key}",
                details={"variable": key},
            )
        return self._by_name[key].group

    def pathname_kind(self, name: str) -> str:
        return self.descriptor(name).pathname

    def is_string(self, name: str) -> bool:
        return self.descriptor(name).is_string

    def names(self) -> List[str]:
        return sorted(self._by_name)

    def groups(self) -> List[str]:
        return sorted({d.group for d in self._by_name.values()})

    def variables_in_group(self, group: str) -> List[str]:
        return sorted(n for n, d in self._by_name.items() if d.group == group)

    def descriptors(self) -> List[VariableDescriptor]:
        return [self._by_name[n] for n in self.names()]

    # -----------------------------
    # Valores
    # -----------------------------
    def coerce(self, name: str, value: Any) -> Any:
        """Converte `value` para o tipo declarado; `ValidationError` se impossível."""
        d = self.descriptor(name)
        try:
            return coerce(value, d.type, array=d.array)
        except ValueError as e:
            raise ValidationError(
                message=f"Value {value!r} for variable '{d.name}' is not a valid {d.type}",
                details={"variable": d.name, "value": _jsonable(value), "type": d.type},
            ) from e

    def _allowed(self, d: VariableDescriptor, item: Any) -> bool:
        if d.valid_values is not None:
            allowed = []
            for v in d.valid_values:
                try:
                    allowed.append(coerce(v, d.type))
                except ValueError:
                    continue
            if item not in allowed:
                return False
        if d.pattern is not None:
            if not re.fullmatch(d.pattern, str(item)):
                return False
        return True

    def check_value(self, name: str, value: Any) -> Any:
        """
        Valida tipo e valores permitidos, devolvendo o valor coagido.

        Raises:
            SchemaError: Variável não declarada.
            ValidationError: Tipo incompatível ou valor fora do conjunto permitido.
        """
        d = self.descriptor(name)
        coerced = self.coerce(name, value)
        items = coerced if isinstance(coerced, list) else [coerced]
        for item in items:
            if not self._allowed(d, item):
                allowed = list(d.valid_values) if d.valid_values is not None else d.pattern
                raise ValidationError(
                    message=(
                        f"Value {_jsonable(value)!r} for variable '{d.name}' is not allowed; "
                        f"valid values: {allowed}"
                    ),
                    details={"variable": d.name, "value": _jsonable(value), "allowed": allowed},
                )
        return coerced

    def is_valid_value(self, name: str, value: Any) -> bool:
        try:
            self.check_value(name, value)
        except (SchemaError, ValidationError):
            return False
        return True


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return str(value)
