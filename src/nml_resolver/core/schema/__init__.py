# src/nml_resolver/core/schema/__init__.py
"""SchemaCatalog: declaração de toda variável válida (grupo, tipo, valores permitidos)."""

from .catalog import (  # noqa: F401
    PATHNAME_ABS,
    PATHNAME_NONE,
    PATHNAME_REL_PREFIX,
    SchemaCatalog,
    VariableDescriptor,
)
