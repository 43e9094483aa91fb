# src/nml_resolver/export/reals.py
"""Dump das variáveis reais (`--output-reals`): documentação + valor, ou `?.??` se ausente."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import SourceIOError
from nml_resolver.core.schema.catalog import SchemaCatalog
from nml_resolver.core.values import format_value

UNSET = "?.??"


def render_reals(document: ConfigDocument, schema: SchemaCatalog) -> str:
    lines: List[str] = []
    for d in schema.descriptors():
        if d.type != "real":
            continue
        doc = " ".join(d.doc.split())
        if doc:
            lines.append(f"! {doc}")
        value = document.value(d.name)
        lines.append(f"{d.name} = {UNSET if value is None else format_value(value, d.type)}")
    return "\n".join(lines) + "\n" if lines else ""


def write_reals(path: Union[str, Path], document: ConfigDocument, schema: SchemaCatalog) -> Path:
    out = Path(path)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(render_reals(document, schema), encoding="utf-8")
    except OSError as e:
        raise SourceIOError(message=f"Cannot write {out}: {e}", details={"file": str(out)}) from e
    return out
