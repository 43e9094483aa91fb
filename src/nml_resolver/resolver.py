# src/nml_resolver/resolver.py
"""
Fachada de resolução.

Fluxo de um run:
    1. Catálogos (schema, defaults, use-cases) carregados uma única vez
       a partir dos settings e da versão de física
    2. RunContext novo por run (documento e flags vazios)
    3. Engine executa o pipeline declarado (fail-fast)
    4. Validator: passagem de schema + tabela completa de consistência
    5. Documento e flags congelados; resultado imutável devolvido

Decisões arquiteturais:
    - A exceção tipada do Step que falhou é relançada ao chamador
    - O emissor só recebe documentos congelados (validados)
    - Nenhum estado persiste entre runs: o Resolver guarda apenas os
      catálogos imutáveis

Invariantes:
    - Mesmas entradas → documento idêntico (mesma fingerprint)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from nml_resolver.core.config.loader import catalog_paths, load_settings
from nml_resolver.core.defaults.catalog import DefaultsCatalog
from nml_resolver.core.defaults.use_cases import UseCaseCatalog
from nml_resolver.core.document import ConfigDocument
from nml_resolver.core.engine.engine import Engine
from nml_resolver.core.physics import PhysicsVersion
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.registry import StepRegistry
from nml_resolver.core.pipeline.step import Step
from nml_resolver.core.pipeline.types import StepResult
from nml_resolver.core.schema.catalog import SchemaCatalog
from nml_resolver.core.validator import Validator
from nml_resolver.steps.pipeline import default_pipeline

DEFAULT_PHYS = "clm5_0"


@dataclass(frozen=True)
class ResolutionResult:
    document: ConfigDocument
    flags: Dict[str, Any]
    steps: Dict[str, StepResult]
    events: List[Dict[str, Any]] = field(default_factory=list)
    warnings: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def fingerprint(self) -> str:
        return self.document.fingerprint()


class Resolver:
    def __init__(
        self,
        *,
        schema: SchemaCatalog,
        defaults: DefaultsCatalog,
        use_cases: Optional[UseCaseCatalog] = None,
        settings: Optional[Dict[str, Any]] = None,
        physics: Optional[PhysicsVersion] = None,
        steps: Optional[Sequence[Step]] = None,
    ):
        self.settings: Dict[str, Any] = settings or {}
        self.physics = physics or PhysicsVersion.parse(
            str((self.settings.get("build") or {}).get("phys") or DEFAULT_PHYS)
        )
        self.schema = schema
        self.defaults = defaults.with_base_attributes(phys=self.physics.as_string())
        self.use_cases = use_cases
        self.steps: List[Step] = StepRegistry.of(steps if steps is not None else default_pipeline()).list()
        self.validator = Validator(schema)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Dict[str, Any]] = None,
        *,
        phys: Optional[str] = None,
        steps: Optional[Sequence[Step]] = None,
    ) -> "Resolver":
        """
        Carrega os catálogos declarados nos settings.

        Args:
            settings: Settings efetivos; se omitidos, os empacotados.
            phys: Versão de física (`clm4_5`, `clm5_0`); sobrepõe `build.phys`.
            steps: Pipeline alternativo (testes); padrão `default_pipeline()`.

        Raises:
            SchemaError: Fonte de schema ausente, inválida ou duplicada.
            SourceIOError: Fonte de defaults ilegível.
            ValidationError: Versão de física mal formada.
        """
        if settings is None:
            settings = load_settings()
        physics = PhysicsVersion.parse(phys or str((settings.get("build") or {}).get("phys") or DEFAULT_PHYS))
        phys_name = physics.as_string()

        schema = SchemaCatalog.load(catalog_paths(settings, "schema", phys=phys_name))
        defaults = DefaultsCatalog.load(catalog_paths(settings, "defaults", phys=phys_name), schema=schema)
        use_case_dir = (settings.get("catalogs") or {}).get("use_case_dir")
        return cls(
            schema=schema,
            defaults=defaults,
            use_cases=UseCaseCatalog(use_case_dir) if use_case_dir else None,
            settings=settings,
            physics=physics,
            steps=steps,
        )

    def new_context(
        self,
        options: Optional[Mapping[str, Any]] = None,
        env: Optional[Mapping[str, str]] = None,
        *,
        run_id: Optional[str] = None,
    ) -> RunContext:
        return RunContext(
            run_id=run_id or uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=self.settings,
            schema=self.schema,
            defaults=self.defaults,
            options={k: v for k, v in (options or {}).items() if v is not None},
            env=dict(env or {}),
            use_cases=self.use_cases,
            physics=self.physics,
        )

    def run(self, ctx: RunContext) -> ResolutionResult:
        """Executa o pipeline sobre `ctx`, valida e congela o resultado."""
        result = Engine(steps=self.steps, ctx=ctx).run()
        result.raise_for_error()

        self.validator.validate(ctx.document, ctx.flags, ctx.physics)
        ctx.document.freeze()
        ctx.flags.freeze()

        return ResolutionResult(
            document=ctx.document,
            flags=ctx.flags.as_dict(),
            steps=result.steps,
            events=list(ctx.events),
            warnings={k: list(v) for k, v in ctx.warnings.items()},
        )

    def resolve(
        self,
        options: Optional[Mapping[str, Any]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ResolutionResult:
        return self.run(self.new_context(options, env))
