"""
src/nml_resolver/export/namelist.py

Escrita do namelist resolvido.

Formato:
    ! comentários opcionais (nota com a linha de comando)
    &grupo
     var = valor
    /

Regras:
- Grupos na ordem de `output.groups`; grupos vazios também são escritos.
- Variáveis ordenadas por nome dentro do grupo.
- Strings entre aspas simples, logicals como `.true.`/`.false.`,
  arrays separados por vírgula.
- Só documentos congelados (validados) podem ser emitidos.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import SourceIOError
from nml_resolver.core.schema.catalog import SchemaCatalog
from nml_resolver.core.values import format_value

DEFAULT_FILENAME = "lnd_in"


def _require_validated(document: ConfigDocument) -> None:
    if not document.frozen:
        raise ValueError("Only a validated (frozen) document can be written")


def render_group(document: ConfigDocument, schema: SchemaCatalog, group: str) -> List[str]:
    lines = [f"&{group}"]
    for var in document.variables(group):
        value = document.get(group, var)
        lines.append(f" {var} = {format_value(value, schema.descriptor(var).type)}")
    lines.append("/")
    return lines


def render_namelist(
    document: ConfigDocument,
    schema: SchemaCatalog,
    groups: Sequence[str],
    *,
    note: Optional[Iterable[str]] = None,
) -> str:
    _require_validated(document)
    lines: List[str] = [f"! {line}" for line in (note or [])]
    for group in groups:
        lines.extend(render_group(document, schema, group))
    return "\n".join(lines) + "\n"


def write_namelist(
    document: ConfigDocument,
    schema: SchemaCatalog,
    *,
    directory: Union[str, Path],
    groups: Sequence[str],
    filename: str = DEFAULT_FILENAME,
    note: Optional[Iterable[str]] = None,
) -> Path:
    """
    Escreve `<directory>/<filename>` e devolve o caminho.

    Raises:
        ValueError: Documento não validado.
        SourceIOError: Diretório ou arquivo não pôde ser criado.
    """
    text = render_namelist(document, schema, groups, note=note)
    path = Path(directory) / filename
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise SourceIOError(message=f"Cannot write {path}: {e}", details={"file": str(path)}) from e
    return path
