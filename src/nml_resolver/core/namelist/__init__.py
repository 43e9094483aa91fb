# src/nml_resolver/core/namelist/__init__.py
from .parser import parse_namelist_text  # noqa: F401
