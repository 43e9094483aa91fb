# src/nml_resolver/steps/__init__.py
"""
Steps concretos de resolução.

    - sources → namelist inline, arquivos de override, use-case
    - cmdline → opções de linha de comando (grade, BGC, anos, início)
    - logic   → grupos de namelist condicionados às flags
    - checks  → checagens finais entre grupos

`steps.pipeline.default_pipeline()` devolve a lista na ordem declarada.
"""
