# src/nml_resolver/core/__init__.py
"""
Core do nml-resolver.

Reúne os tipos e mecanismos independentes de qualquer catálogo
concreto: valores, schema, defaults, documento, parser de namelist,
contexto de execução, planner/engine, regras de consistência e
validação.

Princípios fundamentais:
    - Catálogos são carregados uma vez e nunca mutados
    - O documento e as flags pertencem a um único run
    - Toda falha é tipada e aborta o run (fail-fast)

Limites explícitos:
    - Não define Steps concretos
    - Não escreve arquivos de saída
    - Não depende da CLI
"""
