# src/nml_resolver/export/__init__.py
"""
Saídas de um run validado.

    - namelist   → arquivo de namelist (`lnd_in`)
    - reals      → dump das variáveis reais com documentação
    - inputdata  → auditoria/dump das variáveis de caminho
"""
