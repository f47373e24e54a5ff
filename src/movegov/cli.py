"""movegov CLI interface.

Commands:
- analyze: Show scanned facts and the governability of each function
- discover: List every public function (for manual action selection)
- generate: Generate governance modules from Move source
- fetch: Generate governance modules for a published package (JSON-RPC)
- init: Initialize movegov configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines
- --version: Show version and exit
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from movegov import __version__
from movegov.analyzers.base import MoveGovError
from movegov.config import MoveGovConfig, create_default_config, load_config, parse_policy
from movegov.models.governance import ClassificationPolicy, ParseResult
from movegov.utils.logging import configure_from_cli, get_logger

# Create Typer app
app = typer.Typer(
    name="movegov",
    help="Governance module generator for Move smart contracts",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: MoveGovConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"movegov {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """movegov - Governance module generator for Move contracts.

    Finds the entry points of a Move module that can be gated behind a vote
    and generates a proposal/voting module that executes them.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _get_config() -> MoveGovConfig:
    return _config or MoveGovConfig()


def _resolve_policy(policy: str | None) -> ClassificationPolicy:
    """Resolve the --policy option against the loaded config."""
    if policy is None:
        return _get_config().classifier.policy
    try:
        return parse_policy(policy)
    except ValueError as e:
        _logger.error(str(e))
        raise typer.Exit(1)


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        _logger.error(f"Failed to read {path}: {e}")
        raise typer.Exit(1)


def _emit_result(
    result: ParseResult,
    output: Path | None,
    dry_run: bool,
    json_output: bool,
) -> None:
    """Print or write the generated modules."""
    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    if dry_run:
        typer.echo(result.governance_contract or "")
        typer.echo(result.token_contract or "")
        _logger.info("Dry run complete - no files written")
        return

    output_config = _get_config().output
    output_dir = output or Path(output_config.directory)
    output_dir.mkdir(parents=True, exist_ok=True)

    governance_path = output_dir / output_config.governance_filename
    token_path = output_dir / output_config.token_filename
    governance_path.write_text(result.governance_contract or "", encoding="utf-8")
    token_path.write_text(result.token_contract or "", encoding="utf-8")

    typer.echo(f"Governance module written to: {governance_path}")
    typer.echo(f"Token module written to: {token_path}")
    typer.echo(f"Actions: {', '.join(a.name for a in result.governable_actions)}")


# =============================================================================
# analyze command
# =============================================================================


@app.command()
def analyze(
    source: Annotated[
        Path,
        typer.Argument(help="Move source file", exists=True, dir_okay=False),
    ],
    policy: Annotated[
        str | None,
        typer.Option("--policy", "-p", help="Classification policy: strict or broad"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results as JSON"),
    ] = False,
) -> None:
    """Show scanned facts and which functions are governable.

    Exit codes:
        0: Analysis completed
        1: The source could not be analyzed
    """
    from movegov.pipeline import GovernancePipeline

    resolved = _resolve_policy(policy)
    pipeline = GovernancePipeline(_get_config())

    try:
        result = pipeline.analyze(_read_source(source), resolved)
    except MoveGovError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    facts = result.facts
    if facts is None:
        _logger.error(f"No contract facts produced for {source}")
        raise typer.Exit(1)

    if json_output:
        data = facts.to_dict()
        data["policy"] = resolved.value
        data["mainStruct"] = result.main_struct
        data["governableActions"] = [a.to_dict() for a in result.governable_actions]
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"\nModule: {facts.module.qualified_name}")
    typer.echo(f"Main struct: {result.main_struct}")
    typer.echo(f"Policy: {resolved.value}\n")

    for function in facts.functions:
        mark = "+" if function.governance_candidate else "-"
        entry = "entry " if function.is_entry else ""
        params = ", ".join(f"{p.name}: {p.type}" for p in function.parameters)
        typer.echo(f"  [{mark}] public {entry}fun {function.name}({params})")
        if function.description:
            typer.echo(f"      {function.description}")

    typer.echo(
        f"\n{len(result.governable_actions)} of {len(facts.functions)} function(s) governable"
    )


# =============================================================================
# discover command
# =============================================================================


@app.command()
def discover(
    source: Annotated[
        Path,
        typer.Argument(help="Move source file", exists=True, dir_okay=False),
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results as JSON"),
    ] = False,
) -> None:
    """List every public function without the governability filter.

    Pass the names you choose to `generate --action`.
    """
    from movegov.pipeline import GovernancePipeline

    try:
        result = GovernancePipeline(_get_config()).discover(_read_source(source))
    except MoveGovError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    typer.echo(f"\nModule: {result.module_info.qualified_name}\n")
    for function in result.entry_points:
        params = ", ".join(f"{p.name}: {p.type}" for p in function.parameters)
        typer.echo(f"  {function.name}({params})")
        if function.description:
            typer.echo(f"      {function.description}")


# =============================================================================
# generate command
# =============================================================================


@app.command()
def generate(
    source: Annotated[
        Path,
        typer.Argument(help="Move source file", exists=True, dir_okay=False),
    ],
    policy: Annotated[
        str | None,
        typer.Option("--policy", "-p", help="Classification policy: strict or broad"),
    ] = None,
    action: Annotated[
        list[str] | None,
        typer.Option(
            "--action",
            "-a",
            help="Action to govern (repeatable); skips automatic classification",
        ),
    ] = None,
    main_struct: Annotated[
        str | None,
        typer.Option("--main-struct", help="Primary state struct name"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output directory (overrides config)"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the modules instead of writing files"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the result as JSON"),
    ] = False,
) -> None:
    """Generate governance modules from Move source.

    Exit codes:
        0: Modules generated
        1: Nothing to generate, or the source could not be analyzed
    """
    from movegov.pipeline import GovernancePipeline, PipelineOptions

    options = PipelineOptions(
        policy=_resolve_policy(policy),
        selected_actions=list(action or []),
        main_struct=main_struct,
    )

    try:
        result = GovernancePipeline(_get_config()).from_source(_read_source(source), options)
    except MoveGovError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    try:
        _emit_result(result, output, dry_run, json_output)
    except OSError as e:
        _logger.error(f"Failed to write output: {e}")
        raise typer.Exit(1)


# =============================================================================
# fetch command
# =============================================================================


@app.command()
def fetch(
    package_id: Annotated[
        str,
        typer.Argument(help="Published package ID (0x...)"),
    ],
    module: Annotated[
        str | None,
        typer.Option("--module", "-m", help="Module to govern (first module if omitted)"),
    ] = None,
    policy: Annotated[
        str | None,
        typer.Option("--policy", "-p", help="Classification policy: strict or broad"),
    ] = None,
    action: Annotated[
        list[str] | None,
        typer.Option("--action", "-a", help="Action to govern (repeatable)"),
    ] = None,
    rpc_url: Annotated[
        str | None,
        typer.Option("--rpc-url", help="JSON-RPC endpoint (overrides config)"),
    ] = None,
    governance: Annotated[
        bool,
        typer.Option(
            "--governance",
            help="Only locate an existing governance module in the package",
        ),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output directory (overrides config)"),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the modules instead of writing files"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the result as JSON"),
    ] = False,
) -> None:
    """Generate governance modules for a published package.

    Reads the package's normalized module descriptors over JSON-RPC.

    Exit codes:
        0: Modules generated (or governance module found)
        1: Fetch failed, nothing to generate, or no governance module found
    """
    from dataclasses import replace

    from movegov.pipeline import GovernancePipeline, PipelineOptions
    from movegov.rpc import SuiRPCClient

    config = _get_config()
    if rpc_url:
        config.rpc = replace(config.rpc, url=rpc_url)

    options = PipelineOptions(
        policy=_resolve_policy(policy),
        selected_actions=list(action or []),
        module_name=module,
    )

    try:
        with SuiRPCClient(config.rpc) as client:
            if governance:
                info = client.get_governance_info(package_id)
                if info is None:
                    _logger.error(f"No governance module found in package {package_id}")
                    raise typer.Exit(1)
                if json_output:
                    typer.echo(
                        json.dumps(
                            {
                                "governanceModuleName": info.module_name,
                                "createProposalFunction": info.create_proposal,
                                "proposalKindEnum": info.proposal_kind,
                            },
                            indent=2,
                        )
                    )
                else:
                    typer.echo(f"Governance module: {info.module_name}")
                return

            result = GovernancePipeline(config).from_package(package_id, options, client=client)
    except MoveGovError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    try:
        _emit_result(result, output, dry_run, json_output)
    except OSError as e:
        _logger.error(f"Failed to write output: {e}")
        raise typer.Exit(1)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Initialize movegov configuration.

    Creates .movegov/config.yaml with the default settings.
    """
    config_dir = Path(".movegov")
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_dir.mkdir(exist_ok=True)
    config_file.write_text(create_default_config(), encoding="utf-8")
    typer.echo(f"Created {config_file}")


if __name__ == "__main__":
    app()
