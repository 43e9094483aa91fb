# src/nml_resolver/core/pipeline/flags.py
"""
Conjunto de flags resolvidas.

Flags são escalares computados ao longo da resolução (resolução de
grade, máscara, modo BGC, número de classes de elevação, tipo de
início, ...). Steps posteriores as leem como condição e como chave de
consulta ao DefaultsCatalog.

Invariantes:
    - Vazio no início do pipeline, cresce monotonicamente
    - Redefinir uma flag com o MESMO valor é permitido (idempotência);
      com valor diferente é erro de programação do Step
    - Congelado quando o pipeline termina
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping


class FlagConflictError(ValueError):
    """Tentativa de alterar o valor de uma flag já resolvida."""


class FrozenFlagsError(RuntimeError):
    """Tentativa de escrita após o congelamento."""


class ResolvedFlags(Mapping[str, Any]):
    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._frozen = False

    def set(self, name: str, value: Any) -> Any:
        if self._frozen:
            raise FrozenFlagsError(f"Flags are frozen; cannot set '{name}'")
        if name in self._values and self._values[name] != value:
            raise FlagConflictError(
                f"Flag '{name}' already resolved to {self._values[name]!r}; refusing {value!r}"
            )
        self._values[name] = value
        return value

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __repr__(self) -> str:
        return f"ResolvedFlags({self._values!r})"
