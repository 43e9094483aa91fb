# src/nml_resolver/core/pipeline/__init__.py
"""
Contratos do pipeline de resolução.

## Componentes

- **types**: `StepKind`, `StepStatus`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext` (documento, flags, catálogos, eventos)
- **flags**: `ResolvedFlags`
- **fill**: `add_default`
- **registry**: `StepRegistry`

## Invariantes

- Steps se comunicam apenas via `RunContext`
- Dependências entre Steps são explícitas
"""
