# src/nml_resolver/core/pipeline/context.py
"""
Contexto de execução de uma resolução.

O `RunContext` é o único meio de comunicação entre Steps e substitui
qualquer objeto global de log/erro: ele é criado por execução, passado
explicitamente a cada Step e devolvido ao chamador ao final.

O RunContext consolida:
    - identidade da execução (run_id, created_at)
    - settings efetivos da ferramenta (`config`)
    - catálogos imutáveis (schema, defaults, use-cases)
    - opções de linha de comando já normalizadas (`options`)
    - mapa de ambiente para expansão de variáveis
    - o ConfigDocument em construção e as flags resolvidas
    - eventos estruturados de log e warnings por Step

Decisões arquiteturais:
    - Steps escrevem no documento apenas via `set_value`/`pin`, que
      aplicam grupo e tipo do schema
    - `pin` implementa o override de precedência máxima: se o documento
      já tem valor diferente, falha com ConflictError (nunca sobrescreve)
    - Em modo estrito, `add_warning` levanta StrictWarningError

Invariantes:
    - Logs incluem sempre `run_id`, `step_id`, `level` e timestamp UTC
    - Warnings são agrupados por `step_id`

Limites explícitos:
    - Não executa Steps
    - Não lê nem escreve arquivos
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from nml_resolver.core.defaults.catalog import DefaultsCatalog
from nml_resolver.core.defaults.use_cases import UseCaseCatalog
from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.exceptions import ConflictError, StrictWarningError
from nml_resolver.core.physics import CLM5_0, PhysicsVersion
from nml_resolver.core.pipeline.flags import ResolvedFlags
from nml_resolver.core.schema.catalog import SchemaCatalog
from nml_resolver.core.values import normalize_name

LEVEL_DEBUG = "DEBUG"
LEVEL_INFO = "INFO"
LEVEL_WARNING = "WARNING"


@dataclass
class RunContext:
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    schema: SchemaCatalog
    defaults: DefaultsCatalog
    options: Dict[str, Any] = field(default_factory=dict)
    env: Dict[str, str] = field(default_factory=dict)
    use_cases: Optional[UseCaseCatalog] = None
    physics: PhysicsVersion = CLM5_0
    meta: Dict[str, Any] = field(default_factory=dict)

    document: ConfigDocument = field(default_factory=ConfigDocument, init=False)
    flags: ResolvedFlags = field(default_factory=ResolvedFlags, init=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Opções e settings
    # -----------------------------
    def option(self, name: str, default: Any = None) -> Any:
        value = self.options.get(name)
        return default if value is None else value

    @property
    def strict_warnings(self) -> bool:
        if self.options.get("strict_warnings") is not None:
            return bool(self.options["strict_warnings"])
        engine_cfg = (self.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("strict_warnings", False))

    @property
    def inputdata_root(self) -> str:
        return str(self.option("csmdata", "") or "")

    # -----------------------------
    # Documento
    # -----------------------------
    def value(self, variable: str) -> Any:
        return self.document.value(variable)

    def is_set(self, variable: str) -> bool:
        return self.document.has(variable)

    def set_value(self, variable: str, value: Any) -> Any:
        """Escrita incondicional tipada pelo schema (uso interno do engine)."""
        var = normalize_name(variable)
        coerced = self.schema.check_value(var, value)
        self.document.set(self.schema.group_of(var), var, coerced)
        return coerced

    def pin(self, variable: str, value: Any, *, step_id: str, source: str = "command line") -> Any:
        """
        Aplica um valor de precedência máxima.

        Raises:
            ConflictError: Se o documento já contém valor diferente.
            ValidationError: Se o valor não for permitido pelo schema.
        """
        var = normalize_name(variable)
        coerced = self.schema.check_value(var, value)
        if self.document.has(var):
            current = self.document.value(var)
            if current != coerced:
                raise ConflictError(
                    message=(
                        f"Variable '{var}' is set to {current!r} in the namelist input "
                        f"but the {source} requests {coerced!r}"
                    ),
                    details={"variable": var, "current": current, "requested": coerced, "step_id": step_id},
                    hint=f"Remove '{var}' from the namelist input or drop the {source} setting",
                )
            return current
        self.document.set(self.schema.group_of(var), var, coerced)
        self.log(step_id=step_id, level=LEVEL_DEBUG, message=f"{var} = {coerced!r} ({source})")
        return coerced

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        self.warnings.setdefault(step_id, []).append(message)
        self.log(step_id=step_id, level=LEVEL_WARNING, message=message)
        if self.strict_warnings:
            raise StrictWarningError(
                message=f"Warning escalated to error: {message}",
                details={"step_id": step_id},
                hint="Drop --strict-warnings to continue past warnings",
            )

    def all_warnings(self) -> List[str]:
        return [w for ws in self.warnings.values() for w in ws]
