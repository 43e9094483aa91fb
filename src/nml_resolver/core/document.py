# src/nml_resolver/core/document.py
"""
Documento de configuração: grupo → (variável → valor resolvido).

O ConfigDocument é a estrutura central que atravessa merge, resolução,
validação e emissão. Não conhece precedência de fontes nem regras de
domínio: apenas guarda valores e oferece merge sem sobrescrita.

Decisões arquiteturais:
    - `set` é escrita incondicional, reservada ao próprio engine
    - `merge_from` só preenche lacunas e não reporta conflitos; detectar
      colisões semânticas é trabalho dos Steps que conhecem o significado
    - Nomes de variáveis são únicos no schema, então `value(var)` busca
      a variável em qualquer grupo
    - `freeze()` bloqueia escritas após a validação

Invariantes:
    - Uma variável aparece em no máximo um grupo
    - Ordem de grupos e variáveis não afeta `to_dict` nem `fingerprint`
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Iterator, List, Optional, Tuple

from nml_resolver.core.config.hashing import compute_config_hash
from nml_resolver.core.exceptions import SchemaError
from nml_resolver.core.values import normalize_name


class FrozenDocumentError(RuntimeError):
    """Escrita em documento já congelado."""


class ConfigDocument:
    def __init__(self) -> None:
        self._groups: Dict[str, Dict[str, Any]] = {}
        self._frozen = False

    # -----------------------------
    # Escrita
    # -----------------------------
    def set(self, group: str, variable: str, value: Any) -> None:
        if self._frozen:
            raise FrozenDocumentError(f"Document is frozen; cannot set {variable}")
        var = normalize_name(variable)
        for other, values in self._groups.items():
            if other != group and var in values:
                raise SchemaError(
                    message=f"Variable '{var}' already belongs to group '{other}'",
                    details={"variable": var, "group": group, "expected_group": other},
                )
        self._groups.setdefault(group, {})[var] = deepcopy(value)

    def unset(self, group: str, variable: str) -> None:
        if self._frozen:
            raise FrozenDocumentError(f"Document is frozen; cannot unset {variable}")
        values = self._groups.get(group, {})
        values.pop(normalize_name(variable), None)
        if not values:
            self._groups.pop(group, None)

    def merge_from(self, other: "ConfigDocument") -> List[str]:
        """Preenche apenas variáveis ausentes; devolve os nomes efetivamente escritos."""
        written: List[str] = []
        for group, var, value in other.items():
            if self.has(var):
                continue
            self.set(group, var, value)
            written.append(var)
        return written

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -----------------------------
    # Leitura
    # -----------------------------
    def get(self, group: str, variable: str) -> Optional[Any]:
        return deepcopy(self._groups.get(group, {}).get(normalize_name(variable)))

    def group_of(self, variable: str) -> Optional[str]:
        var = normalize_name(variable)
        for group, values in self._groups.items():
            if var in values:
                return group
        return None

    def has(self, variable: str) -> bool:
        return self.group_of(variable) is not None

    def value(self, variable: str) -> Optional[Any]:
        group = self.group_of(variable)
        return None if group is None else self.get(group, variable)

    def groups(self) -> List[str]:
        return sorted(self._groups)

    def variables(self, group: str) -> List[str]:
        return sorted(self._groups.get(group, {}))

    def items(self) -> Iterator[Tuple[str, str, Any]]:
        for group in self.groups():
            for var in self.variables(group):
                yield group, var, deepcopy(self._groups[group][var])

    def __len__(self) -> int:
        return sum(len(v) for v in self._groups.values())

    def __contains__(self, variable: object) -> bool:
        return isinstance(variable, str) and self.has(variable)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {g: {v: deepcopy(self._groups[g][v]) for v in self.variables(g)} for g in self.groups()}

    def fingerprint(self) -> str:
        return compute_config_hash(self.to_dict())

    def copy(self) -> "ConfigDocument":
        clone = ConfigDocument()
        clone._groups = deepcopy(self._groups)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigDocument):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"ConfigDocument({self.to_dict()!r})"
