# src/nml_resolver/core/namelist/parser.py
"""
Parser de texto de namelist para um ConfigDocument parcial.

Sintaxes aceitas (podem ser misturadas no mesmo texto):

    &clm_inparm
      dtime = 1800, use_cn = .true.
      albice = 0.60, 0.40
      fsurdat = '/data/surf.nc'
    /

    dtime = 3600          ! linha solta: o grupo vem do schema

Regras:
    - Comentários começam com `!` (fora de aspas)
    - Uma atribuição termina quando começa a próxima (`nome =`), no `/`
      que fecha o grupo ou no fim do texto
    - Variável desconhecida ou no grupo errado → SchemaError
    - Valor que não converte para o tipo declarado → ValidationError
    - Mesma variável com valores diferentes na mesma fonte → ConflictError
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import ConflictError, SchemaError
from nml_resolver.core.schema.catalog import SchemaCatalog
from nml_resolver.core.values import normalize_name

_TOKEN_RE = re.compile(
    r"""
      (?P<string>'(?:[^']|'')*'|"[^"]*")
    | (?P<group>&[A-Za-z_]\w*)
    | (?P<end>/)
    | (?P<eq>=)
    | (?P<comma>,)
    | (?P<comment>![^\n]*)
    | (?P<space>\s+)
    | (?P<word>[^\s=,/'"!&]+)
    """,
    re.VERBOSE,
)

Token = Tuple[str, str]


def tokenize(text: str, *, source: str = "<inline>") -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise SchemaError(
                message=f"{source}: cannot parse namelist text near {text[pos:pos + 20]!r}",
                details={"source": source, "offset": pos},
            )
        kind = m.lastgroup or ""
        if kind not in ("space", "comment"):
            tokens.append((kind, m.group()))
        pos = m.end()
    return tokens


def _string_value(raw: str) -> str:
    if raw.startswith("'"):
        return raw[1:-1].replace("''", "'")
    return raw[1:-1]


def parse_namelist_text(text: str, schema: SchemaCatalog, *, source: str = "<inline>") -> ConfigDocument:
    """
    Converte texto de namelist em um documento parcial tipado pelo schema.

    Args:
        text (str): Texto de namelist (inline ou conteúdo de arquivo).
        schema (SchemaCatalog): Catálogo usado para grupo e tipo.
        source (str): Identificação da fonte para mensagens de erro.

    Returns:
        ConfigDocument: Documento contendo apenas as variáveis atribuídas.
    """
    doc = ConfigDocument()
    tokens = tokenize(text, source=source)
    i = 0
    group: Optional[str] = None

    def _peek(k: int) -> Optional[Token]:
        return tokens[k] if k < len(tokens) else None

    while i < len(tokens):
        kind, raw = tokens[i]

        if kind == "group":
            if group is not None:
                raise SchemaError(
                    message=f"{source}: group &{group} is not closed before {raw}",
                    details={"source": source, "group": group},
                )
            group = raw[1:]
            i += 1
            continue

        if kind == "end":
            group = None
            i += 1
            continue

        if kind == "comma":
            i += 1
            continue

        nxt = _peek(i + 1)
        if kind != "word" or nxt is None or nxt[0] != "eq":
            raise SchemaError(
                message=f"{source}: expected 'variable = value', found {raw!r}",
                details={"source": source, "token": raw},
            )

        var = normalize_name(raw)
        descriptor = schema.descriptor(var)
        declared_group = descriptor.group
        if group is not None and group != declared_group:
            raise SchemaError(
                message=f"{source}: variable '{var}' belongs to group '{declared_group}', not '{group}'",
                details={"source": source, "variable": var, "group": group, "expected_group": declared_group},
            )

        i += 2
        items: List[str] = []
        while i < len(tokens):
            kind, raw = tokens[i]
            if kind in ("end", "group"):
                break
            if kind == "word" and (_peek(i + 1) or ("", ""))[0] == "eq":
                break
            if kind == "string":
                items.append(_string_value(raw))
            elif kind == "word":
                items.append(raw)
            i += 1

        if not items:
            raise SchemaError(
                message=f"{source}: no value given for variable '{var}'",
                details={"source": source, "variable": var},
            )

        value = schema.coerce(var, items if (descriptor.array or len(items) > 1) else items[0])
        if doc.has(var) and doc.value(var) != value:
            raise ConflictError(
                message=f"{source}: variable '{var}' is set more than once with different values",
                details={"source": source, "variable": var, "values": [doc.value(var), value]},
            )
        doc.set(declared_group, var, value)

    if group is not None:
        raise SchemaError(
            message=f"{source}: group &{group} is not terminated with '/'",
            details={"source": source, "group": group},
        )
    return doc
