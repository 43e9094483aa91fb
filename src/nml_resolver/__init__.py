# src/nml_resolver/__init__.py
"""
nml-resolver: resolução determinística de namelists do modelo de superfície.

O pacote transforma um catálogo declarativo de variáveis (schema), um
catálogo de defaults com predicados de atributos e as escolhas do
usuário (opções de linha de comando, namelist inline, arquivos de
override, use-case) em um ConfigDocument completo e validado, pronto
para ser emitido como arquivo de namelist.

Arquitetura em alto nível:
    - core.schema / core.defaults → catálogos imutáveis
    - core.pipeline / core.engine → Steps, RunContext, planner e executor
    - steps                       → Steps concretos de resolução
    - resolver                    → fachada: carrega, executa, valida
    - export                      → escrita do namelist e auditorias
    - cli                         → comando `nml-resolver`

Limites explícitos:
    - Não baixa arquivos de input data
    - Não executa o modelo
"""

from .resolver import ResolutionResult, Resolver

__all__ = ["Resolver", "ResolutionResult"]

__version__ = "0.1.0"
