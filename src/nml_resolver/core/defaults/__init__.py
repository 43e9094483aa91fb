# src/nml_resolver/core/defaults/__init__.py
"""
Catálogo de defaults com seleção best-fit e catálogo de use-cases.

Uma entrada é candidata quando TODOS os atributos do seu predicado
estão na consulta com o mesmo valor; entre candidatas vence a mais
específica e, no empate, a carregada por último.
"""

from .catalog import DefaultEntry, DefaultsCatalog  # noqa: F401
from .use_cases import UseCase, UseCaseCatalog  # noqa: F401
