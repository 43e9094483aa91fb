# src/nml_resolver/core/values.py
"""
Utilitários de valores de namelist.

Representação interna:
    - logical → `bool` nativo (tokens `.true.`/`.false.` só existem na
      leitura de texto e na emissão)
    - integer → `int`, real → `float`, char → `str` sem aspas
    - variáveis com dimensão → `list` dos valores escalares

O sentinela `BLANK` (string com um espaço) representa "sem arquivo"
para variáveis de caminho como `finidat`.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional

BLANK = " "

TYPES = ("char", "integer", "real", "logical")

_TRUE_TOKENS = {"true", ".true.", "t", ".t."}
_FALSE_TOKENS = {"false", ".false.", "f", ".f."}

_IS_TRUE_RE = re.compile(r"^\.?(true|t)\.?$", re.IGNORECASE)
_LIST_ITEM_RE = re.compile(r"\s*'[^']*'\s*|\s*\"[^\"]*\"\s*|[^,]+")


def normalize_name(name: str) -> str:
    """Nomes de variáveis e atributos são case-insensitive."""
    return str(name).strip().lower()


def unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def quote(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def is_blank(value: Any) -> bool:
    """Verdadeiro para valor ausente, string vazia ou só com espaços/aspas vazias."""
    if value is None:
        return True
    if isinstance(value, str):
        return unquote(value).strip() == ""
    if isinstance(value, list):
        return len(value) == 0
    return False


def value_is_true(value: Any) -> bool:
    """Interpreta bools nativos e tokens textuais (`.true.`, `T`, `true`)."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, str):
        return bool(_IS_TRUE_RE.match(unquote(value)))
    return False


def parse_logical(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        token = unquote(value).strip().lower()
        if token in _TRUE_TOKENS:
            return True
        if token in _FALSE_TOKENS:
            return False
    raise ValueError(f"not a logical value: {value!r}")


def split_list(text: str) -> List[str]:
    """Divide `a,b,'c,d'` respeitando aspas."""
    return [item.strip() for item in _LIST_ITEM_RE.findall(text) if item.strip()]


def _coerce_scalar(value: Any, type_name: str) -> Any:
    if type_name == "logical":
        return parse_logical(value)

    if type_name == "integer":
        if isinstance(value, bool):
            raise ValueError(f"not an integer: {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            return int(unquote(value))
        raise ValueError(f"not an integer: {value!r}")

    if type_name == "real":
        if isinstance(value, bool):
            raise ValueError(f"not a real: {value!r}")
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            return float(unquote(value).replace("d", "e").replace("D", "E"))
        raise ValueError(f"not a real: {value!r}")

    if type_name == "char":
        if isinstance(value, bool):
            raise ValueError(f"not a string: {value!r}")
        if isinstance(value, str):
            return unquote(value)
        if isinstance(value, (int, float)):
            return str(value)
        raise ValueError(f"not a string: {value!r}")

    raise ValueError(f"unknown type: {type_name}")


def coerce(value: Any, type_name: str, *, array: bool = False) -> Any:
    """
    Converte `value` para a representação interna do tipo declarado.

    Aceita tanto valores nativos (vindos de YAML/JSON/CLI) quanto tokens
    textuais (vindos de texto de namelist).

    Raises:
        ValueError: Se o valor não puder ser convertido.
    """
    if value is None:
        raise ValueError("missing value")

    if array:
        if isinstance(value, (list, tuple)):
            items = list(value)
        elif isinstance(value, str):
            items = split_list(value)
        else:
            items = [value]
        return [_coerce_scalar(v, type_name) for v in items]

    if isinstance(value, (list, tuple)):
        if len(value) != 1:
            raise ValueError(f"expected a single value, got {len(value)}")
        value = value[0]

    return _coerce_scalar(value, type_name)


def attribute_token(value: Any) -> Optional[str]:
    """
    Normaliza um valor para comparação em predicados de defaults.

    Tokens enumerados são comparados sem diferenciar maiúsculas; logicals
    viram `true`/`false` independentemente da grafia de origem.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(attribute_token(v) or "" for v in value)
    token = unquote(str(value)).strip().lower()
    if token in _TRUE_TOKENS:
        return "true"
    if token in _FALSE_TOKENS:
        return "false"
    return token


def format_value(value: Any, type_name: str) -> str:
    """Renderização textual usada apenas na emissão."""
    if isinstance(value, list):
        return ",".join(format_value(v, type_name) for v in value)
    if type_name == "logical" or isinstance(value, bool):
        return ".true." if value_is_true(value) else ".false."
    if type_name == "char":
        return quote(str(value))
    if type_name == "real":
        return repr(float(value))
    return str(value)
