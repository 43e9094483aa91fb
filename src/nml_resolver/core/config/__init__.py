# src/nml_resolver/core/config/__init__.py
"""
Settings da ferramenta (catálogos, grupos de saída, modo estrito).

Defaults empacotados + override local opcional, combinados por
`deep_merge` determinístico; `compute_config_hash` gera a impressão
digital canônica usada para comparar documentos resolvidos.
"""

from .errors import (  # noqa: F401
    ConfigError,
    ConfigFileNotFoundError,
    ConfigTypeConflictError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash  # noqa: F401
from .loader import catalog_paths, load_settings, load_source_file  # noqa: F401
from .merge import deep_merge  # noqa: F401
