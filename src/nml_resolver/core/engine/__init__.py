# src/nml_resolver/core/engine/__init__.py
"""
Planejamento e execução do pipeline de resolução.

    - planner → valida ordem declarada e dependências (Kahn determinístico)
    - engine  → executa Steps em ordem, fail-fast
"""
