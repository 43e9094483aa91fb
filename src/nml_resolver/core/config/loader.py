# src/nml_resolver/core/config/loader.py
"""
Loader canônico de arquivos declarativos do nml_resolver.

Dois consumidores usam este módulo:
    - os loaders de catálogo (schema, defaults, use-cases), via
      `load_source_file`
    - a CLI, via `load_settings`, que resolve os settings efetivos da
      ferramenta a partir de um arquivo padrão empacotado e de um
      override local opcional

Decisões arquiteturais:
    - YAML (`yaml.safe_load`) e JSON são os únicos formatos aceitos
    - Arquivo vazio equivale a dicionário vazio
    - Caminhos relativos em `catalogs` são resolvidos em relação ao
      diretório do arquivo que os declarou, antes do merge

Invariantes:
    - O retorno é sempre um `dict` puro
    - Overrides locais nunca mutam os defaults
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


DATA_DIR = Path(__file__).resolve().parents[2] / "data"
DEFAULT_SETTINGS_PATH = DATA_DIR / "settings.defaults.yaml"

PathLike = Union[str, Path]


def load_source_file(path: PathLike) -> Dict[str, Any]:
    """
    Carrega um arquivo YAML/JSON e valida que a raiz é um dicionário.

    Args:
        path (PathLike): Caminho do arquivo.

    Returns:
        Dict[str, Any]: Conteúdo do arquivo.

    Raises:
        ConfigFileNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        InvalidConfigRootTypeError: Se a raiz não for um dicionário.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigFileNotFoundError(f"Arquivo não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Raiz de {path.name} deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def _absolutize_catalogs(data: Dict[str, Any], base_dir: Path) -> Dict[str, Any]:
    catalogs = data.get("catalogs")
    if not isinstance(catalogs, dict):
        return data

    def _abs(p: Any) -> Any:
        if isinstance(p, str) and p and not Path(p).is_absolute():
            return str(base_dir / p)
        return p

    fixed = dict(catalogs)
    for key in ("schema", "defaults"):
        if isinstance(fixed.get(key), list):
            fixed[key] = [_abs(p) for p in fixed[key]]
    if "use_case_dir" in fixed:
        fixed["use_case_dir"] = _abs(fixed["use_case_dir"])

    out = dict(data)
    out["catalogs"] = fixed
    return out


def load_settings(
    *,
    defaults_path: Optional[PathLike] = None,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Resolve os settings efetivos da ferramenta.

    Política de resolução:
        - `defaults_path` é obrigatório; se omitido, usa o arquivo empacotado
        - `local_path` é opcional e, quando informado, deve existir
        - O local tem prioridade via `deep_merge`

    Args:
        defaults_path (Optional[PathLike]): Settings base.
        local_path (Optional[PathLike]): Overrides locais.

    Returns:
        Dict[str, Any]: Settings efetivos.

    Raises:
        ConfigFileNotFoundError: Se algum arquivo informado não existir.
        ConfigTypeConflictError: Se o merge encontrar conflito de tipos.
    """
    defaults_file = Path(defaults_path) if defaults_path is not None else DEFAULT_SETTINGS_PATH
    effective = _absolutize_catalogs(load_source_file(defaults_file), defaults_file.resolve().parent)

    if local_path is not None:
        local_file = Path(local_path)
        local = _absolutize_catalogs(load_source_file(local_file), local_file.resolve().parent)
        effective = deep_merge(effective, local)

    return effective


def catalog_paths(settings: Dict[str, Any], key: str, *, phys: str) -> List[Path]:
    """Lista ordenada de fontes de catálogo (`schema` ou `defaults`), com `{phys}` expandido."""
    raw = ((settings.get("catalogs") or {}).get(key)) or []
    if not isinstance(raw, list):
        raise InvalidConfigRootTypeError(f"catalogs.{key} deve ser uma lista")
    return [Path(str(p).format(phys=phys)) for p in raw]
