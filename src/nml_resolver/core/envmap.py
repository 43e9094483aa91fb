# src/nml_resolver/core/envmap.py
"""
Mapa de ambiente do caso e expansão `${VAR}` / `$VAR`.

O mapa é somente leitura: vem de arquivos `env_*.yaml|yml|json` de um
diretório de caso (mapas planos chave → valor) e de entradas extras
passadas pela CLI (ex.: `DIN_LOC_ROOT`). Nomes desconhecidos ficam
intactos no texto.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from nml_resolver.core.config.errors import ConfigError
from nml_resolver.core.config.loader import load_source_file
from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import SourceIOError

_VAR_RE = re.compile(r"\$\{(\w+)\}|\$(\w+)")
_MAX_PASSES = 10


def read_env_dir(directory: Optional[Union[str, Path]]) -> Dict[str, str]:
    """Lê todos os `env_*` do diretório; diretório sem nenhum arquivo é erro."""
    if directory is None:
        return {}
    root = Path(directory)
    files = sorted(
        p for p in root.glob("env_*") if p.suffix.lower() in (".yaml", ".yml", ".json")
    ) if root.is_dir() else []
    if not files:
        raise SourceIOError(
            message=f"No env_* files found in {root}",
            details={"directory": str(root)},
            hint="Point --envxml-dir at the case directory",
        )

    env: Dict[str, str] = {}
    for f in files:
        try:
            data = load_source_file(f)
        except ConfigError as e:
            raise SourceIOError(message=f"Cannot read {f}: {e}", details={"file": str(f)}) from e
        for key, value in data.items():
            env[str(key)] = "" if value is None else str(value)
    return env


def expand_text(text: str, env: Mapping[str, str]) -> str:
    def _sub(m: "re.Match[str]") -> str:
        name = m.group(1) or m.group(2)
        return env.get(name, m.group(0))

    for _ in range(_MAX_PASSES):
        expanded = _VAR_RE.sub(_sub, text)
        if expanded == text:
            break
        text = expanded
    return text


def expand_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return expand_text(value, env)
    if isinstance(value, list):
        return [expand_value(v, env) for v in value]
    return value


def expand_document(doc: ConfigDocument, env: Mapping[str, str]) -> ConfigDocument:
    """Cópia do documento com todos os valores string expandidos."""
    out = ConfigDocument()
    for group, var, value in doc.items():
        out.set(group, var, expand_value(value, env) if env else value)
    return out
