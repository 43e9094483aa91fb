# src/nml_resolver/core/config/merge.py
"""
Deep-merge determinístico de settings.

Usado para combinar `settings.defaults.yaml` (empacotado) com um arquivo
local opcional do usuário. Não é usado para merge de namelists: a
precedência de fontes de namelist segue `ConfigDocument.merge_from`,
que nunca sobrescreve valores já definidos.

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (ex.: `catalogs.defaults`, `output.groups`)
    - escalar → sobrescrita direta
    - conflito de tipos → `ConfigTypeConflictError`
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `override` sobre `base` sem mutar nenhum dos dois.

    Decisões arquiteturais:
        - Listas são substituídas inteiras: a ordem de catálogos e de
          grupos de saída é significativa e não faz sentido concatenar
        - `None` no override é tratado como escalar e sobrescreve

    Args:
        base (Dict[str, Any]): Settings base (defaults).
        override (Dict[str, Any]): Overrides locais.

    Returns:
        Dict[str, Any]: Novo dicionário resultante.

    Raises:
        ConfigTypeConflictError: Se uma chave mudar de tipo entre base e override.
    """

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    merged: Dict[str, Any] = deepcopy(base)

    for key, value in override.items():
        if key not in merged or merged[key] is None or value is None:
            merged[key] = deepcopy(value)
            continue

        current = merged[key]

        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
            continue

        if isinstance(value, list):
            merged[key] = list(deepcopy(value))
            continue

        # bool é subclasse de int: comparar tipo exato
        if type(current) is not type(value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(current).__name__} vs {type(value).__name__}"
            )

        merged[key] = deepcopy(value)

    return merged
