# src/nml_resolver/core/pipeline/fill.py
"""
Preenchimento de lacunas a partir do DefaultsCatalog (`add_default`).

Todo Step que precisa de um default passa por esta função; nenhuma
variável tem lógica própria de "escolher o default mais específico".

Regras:
    1. Variável já definida no documento → nada muda (retorna o valor atual)
    2. Valor explícito (`value=`) tem prioridade sobre o catálogo
    3. Sem valor explícito → `ctx.defaults.get_value(var, attributes)`
    4. Nada encontrado → NotFoundError, exceto com `nofail=True`
    5. Variáveis `input_pathname: abs` com caminho relativo recebem o
       prefixo do diretório de input data, exceto com `no_abspath=True`
    6. O valor é validado/coagido pelo schema antes de ser gravado
"""

from __future__ import annotations

import posixpath
from typing import Any, Optional

from nml_resolver.core.exceptions import NotFoundError
from nml_resolver.core.pipeline.context import LEVEL_DEBUG, RunContext
from nml_resolver.core.schema.catalog import PATHNAME_ABS
from nml_resolver.core.values import is_blank, normalize_name


def set_abs_filepath(value: str, root: str) -> str:
    """Prefixa `root` em caminhos relativos; absolutos e vazios ficam intactos."""
    if not root or is_blank(value) or value.startswith("/") or value.startswith("$"):
        return value
    return posixpath.join(root, value)


def add_default(
    ctx: RunContext,
    variable: str,
    *,
    step_id: str,
    value: Any = None,
    nofail: bool = False,
    no_abspath: bool = False,
    **attributes: Any,
) -> Optional[Any]:
    var = normalize_name(variable)
    descriptor = ctx.schema.descriptor(var)

    if ctx.document.has(var):
        return ctx.document.value(var)

    if value is None:
        value = ctx.defaults.get_value(var, attributes)
        if value is None:
            if nofail:
                ctx.log(step_id=step_id, level=LEVEL_DEBUG, message=f"No default value found for {var}")
                return None
            query = dict(ctx.defaults.base_attributes)
            query.update({k: v for k, v in attributes.items() if v is not None})
            raise NotFoundError(
                message=f"No default value found for {var}",
                details={"variable": var, "attributes": {k: str(v) for k, v in query.items()}},
                hint=f"Set {var} explicitly in the namelist input",
            )

    if descriptor.pathname == PATHNAME_ABS and not no_abspath and isinstance(value, str):
        value = set_abs_filepath(value, ctx.inputdata_root)

    coerced = ctx.set_value(var, value)
    ctx.log(step_id=step_id, level=LEVEL_DEBUG, message=f"Default {var} = {coerced!r}")
    return coerced
