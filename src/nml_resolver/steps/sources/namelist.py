# src/nml_resolver/steps/sources/namelist.py
"""
Steps de fonte: namelist inline e arquivos de override do usuário.

Ordem de precedência entre fontes (maior → menor):
    inline (`--namelist`) → arquivos (`--infile`, na ordem listada) → use-case

Cada fonte é lida isoladamente para um ConfigDocument parcial, tem
`${VAR}` expandido pelo mapa de ambiente e é mesclada no documento do
run em modo fill-only: variáveis já presentes nunca são sobrescritas.

Decisões arquiteturais:
    - Entre vários arquivos, o listado primeiro vence (fill-only)
    - Duplicidade com valores diferentes DENTRO de uma fonte é
      ConflictError (detectada pelo parser)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from nml_resolver.core.envmap import expand_document
from nml_resolver.core.exceptions import SourceIOError
from nml_resolver.core.namelist.parser import parse_namelist_text
from nml_resolver.core.pipeline.context import RunContext
from nml_resolver.core.pipeline.types import StepKind
from nml_resolver.core.values import is_blank
from nml_resolver.steps.base import ResolutionStep


def _merge_source(step: ResolutionStep, ctx: RunContext, text: str, *, source: str) -> List[str]:
    partial = parse_namelist_text(text, ctx.schema, source=source)
    written = ctx.document.merge_from(expand_document(partial, ctx.env))
    for var in written:
        step.debug(ctx, f"{var} from {source}")
    return written


@dataclass
class InlineNamelistStep(ResolutionStep):
    id: str = "source.inline"
    kind: StepKind = StepKind.SOURCE
    depends_on: List[str] = field(default_factory=list)

    def resolve(self, ctx: RunContext) -> Optional[str]:
        text = ctx.option("namelist")
        if is_blank(text):
            return "no inline namelist"
        written = _merge_source(self, ctx, str(text), source="--namelist")
        return f"{len(written)} variable(s) from the inline namelist"


def _as_paths(raw: object) -> Sequence[str]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(p) for p in raw if not is_blank(p)]
    return [p.strip() for p in str(raw).split(",") if p.strip()]


@dataclass
class InfileNamelistStep(ResolutionStep):
    id: str = "source.infiles"
    kind: StepKind = StepKind.SOURCE
    depends_on: List[str] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["source.inline"]

    def resolve(self, ctx: RunContext) -> Optional[str]:
        paths = _as_paths(ctx.option("infile"))
        if not paths:
            return "no namelist files"

        total = 0
        for raw in paths:
            path = Path(raw)
            if not path.is_file():
                raise SourceIOError(
                    message=f"input namelist file does NOT exist: {raw}",
                    details={"file": raw},
                )
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                raise SourceIOError(message=f"Cannot read {raw}: {e}", details={"file": raw}) from e
            total += len(_merge_source(self, ctx, text, source=raw))
            self.info(ctx, f"Merged namelist file {raw}")
        return f"{total} variable(s) from {len(paths)} file(s)"
