# src/nml_resolver/core/validator.py
"""
Validação final de um ConfigDocument resolvido.

Duas passagens, nesta ordem:
    1. Schema: toda variável definida está declarada, no grupo declarado,
       com tipo e valor permitidos → SchemaError / ValidationError
    2. Consistência: tabela ordenada de regras (`nml_resolver.core.rules`)
       → ConsistencyError citando a regra

Invariantes:
    - Fail-fast: a primeira violação encontrada aborta
    - A ordem de avaliação é determinística (grupos e variáveis ordenados;
      regras na ordem da tabela)
    - O Validator nunca altera o documento
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import SchemaError
from nml_resolver.core.physics import PhysicsVersion
from nml_resolver.core.rules import RuleView, enforce
from nml_resolver.core.schema.catalog import SchemaCatalog


class Validator:
    def __init__(self, schema: SchemaCatalog):
        self.schema = schema

    def validate_schema(self, document: ConfigDocument) -> None:
        for group, var, value in document.items():
            descriptor = self.schema.descriptor(var)
            if descriptor.group != group:
                raise SchemaError(
                    message=f"Variable '{var}' is in group '{group}' but is declared in '{descriptor.group}'",
                    details={"variable": var, "group": group, "expected_group": descriptor.group},
                )
            self.schema.check_value(var, value)

    def validate_consistency(
        self,
        document: ConfigDocument,
        flags: Optional[Mapping[str, Any]] = None,
        physics: Optional[PhysicsVersion] = None,
    ) -> None:
        enforce(RuleView(document, flags, physics))

    def validate(
        self,
        document: ConfigDocument,
        flags: Optional[Mapping[str, Any]] = None,
        physics: Optional[PhysicsVersion] = None,
    ) -> None:
        self.validate_schema(document)
        self.validate_consistency(document, flags, physics)
