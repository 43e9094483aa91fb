# src/nml_resolver/export/inputdata.py
"""
Auditoria das variáveis de caminho (input data).

Para cada variável de caminho definida e não vazia (nem `null`):
    - `abs`       → o próprio valor é o caminho
    - `rel:OTHER` → valor de OTHER (diretório) + valor da variável

Dois modos, ambos somente leitura em relação ao documento:
    - dump (`--inputdata FILE`): linhas `var = caminho`
    - checagem local (`--test`): `OK -- found` / `NOT FOUND` por arquivo
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import SourceIOError
from nml_resolver.core.schema.catalog import SchemaCatalog
from nml_resolver.core.values import is_blank


@dataclass(frozen=True)
class InputFile:
    variable: str
    path: str

    @property
    def exists(self) -> bool:
        return Path(self.path).exists()

    def status_line(self) -> str:
        status = "OK -- found" if self.exists else "NOT FOUND"
        return f"{status} {self.variable} = {self.path}"


def input_files(document: ConfigDocument, schema: SchemaCatalog) -> List[InputFile]:
    files: List[InputFile] = []
    for group, var, value in document.items():
        if not schema.has(var):
            continue
        d = schema.descriptor(var)
        if not d.is_pathname or is_blank(value) or str(value).strip() == "null":
            continue
        path = str(value).strip()
        base = d.relative_to
        if base is not None:
            root = document.value(base)
            if is_blank(root):
                continue
            path = posixpath.join(str(root).strip(), path)
        files.append(InputFile(variable=var, path=path))
    return files


def render_inputdata(document: ConfigDocument, schema: SchemaCatalog) -> str:
    return "".join(f"{f.variable} = {f.path}\n" for f in input_files(document, schema))


def write_inputdata(path: Union[str, Path], document: ConfigDocument, schema: SchemaCatalog) -> Path:
    out = Path(path)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(render_inputdata(document, schema), encoding="utf-8")
    except OSError as e:
        raise SourceIOError(message=f"Cannot write {out}: {e}", details={"file": str(out)}) from e
    return out


def check_input_files(document: ConfigDocument, schema: SchemaCatalog) -> List[str]:
    """Uma linha de status por arquivo; nunca falha por arquivo ausente."""
    return [f.status_line() for f in input_files(document, schema)]
