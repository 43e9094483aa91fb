# src/nml_resolver/core/config/hashing.py
"""
Fingerprint canônico de estruturas resolvidas.

Usado para identificar um `ConfigDocument` resolvido (e os settings
efetivos) de forma estável: duas resoluções com as mesmas entradas
devem produzir exatamente o mesmo hash.

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256 hexadecimal
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Calcula o SHA-256 da serialização canônica de `config`.

    Invariantes:
        - O valor retornado tem 64 caracteres hexadecimais
        - A ordem de inserção das chaves não afeta o resultado

    Args:
        config (Dict[str, Any]): Estrutura serializável em JSON.

    Returns:
        str: Hash hexadecimal.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
