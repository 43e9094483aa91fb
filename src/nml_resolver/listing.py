# src/nml_resolver/listing.py
"""
Modo de listagem: `--<opção> list` imprime os valores aceitos e sai.

Opções listáveis:
    - res, mask, sim_year, rcp → valores permitidos pelo schema + default
      (sim_year inclui também as faixas de `sim_year_range`)
    - clm_demand → toda variável dos grupos de saída com default no catálogo
    - use_case   → nome e descrição de cada use-case disponível
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from nml_resolver.core.exceptions import ValidationError

if TYPE_CHECKING:
    from nml_resolver.resolver import Resolver

LIST_KEYWORD = "list"
LISTABLE_OPTIONS = ("res", "mask", "sim_year", "rcp", "clm_demand", "use_case")


def _valid_values(resolver: "Resolver", variable: str) -> List[str]:
    descriptor = resolver.schema.descriptor(variable)
    return [str(v) for v in (descriptor.valid_values or ())]


def _default_for(resolver: "Resolver", variable: str) -> Optional[str]:
    query = {"hgrid": resolver.defaults.get_value("res")}
    value = resolver.defaults.get_value(variable, query)
    return None if value is None else str(value)


def list_values(option: str, resolver: "Resolver") -> List[str]:
    """
    Linhas a imprimir para `--<option> list`.

    Raises:
        ValidationError: Opção sem modo de listagem.
    """
    if option not in LISTABLE_OPTIONS:
        raise ValidationError(
            message=f"Option '{option}' does not support listing",
            details={"option": option, "listable": list(LISTABLE_OPTIONS)},
        )

    if option == "use_case":
        lines = ["Use cases available:"]
        if resolver.use_cases is not None:
            for name, description in resolver.use_cases.describe().items():
                lines.append(f"  {name} = {description}")
        return lines

    if option == "clm_demand":
        groups = list((resolver.settings.get("output") or {}).get("groups") or resolver.schema.groups())
        names = [
            d.name
            for d in resolver.schema.descriptors()
            if d.group in groups and resolver.defaults.has_default(d.name)
        ]
        return [f"Possible values for clm_demand: {' '.join(names)}"]

    lines = [f"Valid values for {option}: {' '.join(_valid_values(resolver, option))}"]
    if option == "sim_year":
        lines.append(f"Valid values for sim_year_range: {' '.join(_valid_values(resolver, 'sim_year_range'))}")
    default = _default_for(resolver, option)
    if default is not None:
        lines.append(f"Default = {default}")
    return lines
