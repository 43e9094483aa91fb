# src/nml_resolver/cli.py
"""
Command-line interface for nml-resolver.

Builds the land-model namelist from the bundled (or configured)
catalogs and the user's choices, validates it and writes `lnd_in`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import click

from nml_resolver.core.config.errors import ConfigError
from nml_resolver.core.config.loader import load_settings
from nml_resolver.core.envmap import read_env_dir
from nml_resolver.core.exceptions import ResolutionError
from nml_resolver.core.pipeline.context import LEVEL_DEBUG, LEVEL_WARNING
from nml_resolver.export.inputdata import check_input_files, write_inputdata
from nml_resolver.export.namelist import DEFAULT_FILENAME, write_namelist
from nml_resolver.export.reals import write_reals
from nml_resolver.listing import LIST_KEYWORD, LISTABLE_OPTIONS, list_values
from nml_resolver.resolver import Resolver

# Opções repassadas ao pipeline (nome do parâmetro click → nome da opção).
PIPELINE_OPTIONS = (
    "res",
    "mask",
    "bgc",
    "rcp",
    "glc_nec",
    "sim_year",
    "l_ncpl",
    "clm_demand",
    "clm_start_type",
    "co2_type",
    "co2_ppmv",
    "lnd_frac",
    "maxpft",
    "use_case",
    "namelist",
    "infile",
    "csmdata",
    "chk_res",
    "ignore_ic_date",
    "ignore_ic_year",
    "strict_warnings",
)


def _split_infiles(values: Sequence[str]) -> List[str]:
    files: List[str] = []
    for value in values:
        files.extend(p.strip() for p in value.split(",") if p.strip())
    return files


def _note_lines(options: Dict[str, Any]) -> List[str]:
    args = []
    for key in sorted(options):
        value = options[key]
        if isinstance(value, bool):
            if value:
                args.append(f"--{key.replace('_', '-')}")
            continue
        if isinstance(value, list):
            value = ",".join(value)
        args.append(f"--{key.replace('_', '-')} {value}")
    return [
        "Namelist generated by nml-resolver",
        "Command line: nml-resolver " + " ".join(args),
    ]


def _echo_events(events: List[Dict[str, Any]], *, silent: bool, verbose: bool) -> None:
    if silent:
        return
    for event in events:
        level = event.get("level")
        if level == LEVEL_DEBUG and not verbose:
            continue
        prefix = "WARNING: " if level == LEVEL_WARNING else ""
        click.echo(f"{prefix}{event.get('message')}", err=level == LEVEL_WARNING)


@click.command()
@click.option("--res", help="Horizontal resolution (or 'list').")
@click.option("--mask", help="Land mask (or 'list').")
@click.option("--bgc", type=click.Choice(["sp", "bgc", "default"]), help="Biogeochemistry mode.")
@click.option("--rcp", help="Representative concentration pathway (or 'list').")
@click.option("--glc-nec", type=int, help="Number of glacier elevation classes.")
@click.option("--sim-year", help="Simulation year, a Y1-Y2 range, or 'list'.")
@click.option("--l-ncpl", type=int, help="Land coupling intervals per day.")
@click.option("--clm-demand", help="Comma list of variables that must be set (or 'list').")
@click.option(
    "--clm-start-type",
    type=click.Choice(["cold", "arb_ic", "startup", "continue", "branch"]),
    help="CLM start type.",
)
@click.option("--co2-type", type=click.Choice(["constant", "diagnostic", "prognostic"]), help="CO2 type.")
@click.option("--co2-ppmv", type=float, help="Constant CO2 concentration (ppmv).")
@click.option("--lnd-frac", help="Land fraction file (fatmlndfrc).")
@click.option("--maxpft", type=int, help="Maximum number of plant functional types.")
@click.option("--phys", help="Physics version (clm4_5, clm5_0).")
@click.option("--use-case", help="Use case name (or 'list').")
@click.option("--namelist", help="Inline namelist text, e.g. \"&clm_inparm dtime=1800 /\".")
@click.option("--infile", multiple=True, help="Namelist override file(s); comma list, repeatable.")
@click.option("--csmdata", envvar="CSMDATA", help="Root directory of the input data.")
@click.option("--envxml-dir", type=click.Path(), help="Case directory holding env_* files.")
@click.option("--dir", "output_dir", default=".", show_default=True, type=click.Path(), help="Output directory.")
@click.option("--inputdata", type=click.Path(), help="Write input pathnames to FILE instead of checking them.")
@click.option("--output-reals", type=click.Path(), help="Write real-valued variables to FILE.")
@click.option("--test", "check_files", is_flag=True, help="Check that input data files exist locally.")
@click.option("--note/--no-note", default=True, show_default=True, help="Add a note header to the namelist.")
@click.option("--chk-res/--no-chk-res", default=True, show_default=True, help="Validate res and mask.")
@click.option("--ignore-ic-date", is_flag=True, help="Ignore the start date when matching finidat.")
@click.option("--ignore-ic-year", is_flag=True, help="Ignore the start year when matching finidat.")
@click.option("--silent", is_flag=True, help="Only print fatal errors.")
@click.option("--verbose", is_flag=True, help="Print debug messages.")
@click.option("--strict-warnings", is_flag=True, help="Treat warnings as fatal errors.")
@click.option("--config", "config_path", type=click.Path(), help="Settings file (defaults to the bundled one).")
@click.option("--local-config", type=click.Path(), help="Local settings overriding --config.")
def main(
    output_dir: str,
    envxml_dir: Optional[str],
    inputdata: Optional[str],
    output_reals: Optional[str],
    check_files: bool,
    note: bool,
    silent: bool,
    verbose: bool,
    phys: Optional[str],
    config_path: Optional[str],
    local_config: Optional[str],
    **params: Any,
) -> None:
    """Build a validated land-model namelist (lnd_in)."""
    try:
        settings = load_settings(defaults_path=config_path, local_path=local_config)
        resolver = Resolver.from_settings(settings, phys=phys)

        for option in LISTABLE_OPTIONS:
            if params.get(option) == LIST_KEYWORD:
                for line in list_values(option, resolver):
                    click.echo(line)
                return

        options: Dict[str, Any] = {k: params.get(k) for k in PIPELINE_OPTIONS}
        options["infile"] = _split_infiles(params.get("infile") or ()) or None
        for flag in ("ignore_ic_date", "ignore_ic_year", "strict_warnings"):
            options[flag] = options[flag] or None

        env = read_env_dir(envxml_dir)
        if options.get("csmdata"):
            env.setdefault("DIN_LOC_ROOT", options["csmdata"])

        ctx = resolver.new_context(options, env)
        try:
            result = resolver.run(ctx)
        finally:
            _echo_events(ctx.events, silent=silent, verbose=verbose)

        output = settings.get("output") or {}
        groups = list(output.get("groups") or resolver.schema.groups())
        path = write_namelist(
            result.document,
            resolver.schema,
            directory=output_dir,
            groups=groups,
            filename=str(output.get("filename") or DEFAULT_FILENAME),
            note=_note_lines(ctx.options) if note else None,
        )

        if output_reals:
            write_reals(output_reals, result.document, resolver.schema)
        if inputdata:
            write_inputdata(inputdata, result.document, resolver.schema)
        elif check_files:
            for line in check_input_files(result.document, resolver.schema):
                click.echo(line)
    except ResolutionError as e:
        click.echo(f"ERROR: {e}", err=True)
        if e.hint:
            label = "DECISION REQUIRED" if e.decision_required else "HINT"
            click.echo(f"{label}: {e.hint}", err=True)
        raise SystemExit(1)
    except (ConfigError, ValueError) as e:
        click.echo(f"ERROR: {e}", err=True)
        raise SystemExit(1)

    if not silent:
        click.echo(f"Successfully made CLM namelist file {Path(path)}")


if __name__ == "__main__":
    main()
