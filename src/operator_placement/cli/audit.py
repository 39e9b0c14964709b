"""Placement audit CLI commands.

This module provides CLI commands for auditing service placement:
- run: Check every service against its preference and print the drift,
  optionally with the corrective commands
- services: List the (database, service) pairs that would be audited

Data comes from srvctl by default, or from a JSON snapshot (file or URL)
when --snapshot is given. Commands never execute corrective actions.

Exit codes for run:
    0: every service is compliant
    1: at least one service is not running on its preferred instances
    2: at least one service could not be evaluated
    3: the service registry could not be read
"""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from operator_placement.audit import PlacementAuditor
from operator_placement.commands import CommandFormatter
from operator_placement.config import DEFAULT_SRVCTL, AuditSettings, SrvctlSettings
from operator_placement.errors import RegistryUnavailableError
from operator_placement.protocols import PlacementSourceProtocol
from operator_placement.report import PlacementReporter, report_to_dict
from operator_placement.snapshot import SnapshotSource
from operator_placement.srvctl import SrvctlSource
from operator_placement.synthesizer import RelocationSourceMode

audit_app = typer.Typer(help="Audit service placement against preferred instances")


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich, DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


async def _create_source(
    snapshot: str | None, settings: SrvctlSettings
) -> PlacementSourceProtocol:
    """Build the snapshot source when a snapshot is given, srvctl otherwise."""
    if snapshot:
        return await SnapshotSource.load(snapshot, timeout_s=settings.timeout_s)
    return SrvctlSource(settings)


@audit_app.command("run")
def run_audit(
    database: str = typer.Option(
        None, "--database", "-d", help="Only audit services of this database (case-insensitive)"
    ),
    plan: bool = typer.Option(False, "--plan", "-p", help="Print the corrective commands"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace observation and decisions"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    snapshot: str = typer.Option(
        None, "--snapshot", envvar="PLACEMENT_SNAPSHOT", help="JSON snapshot path or URL instead of srvctl"
    ),
    oracle_home: Path = typer.Option(None, "--oracle-home", envvar="ORACLE_HOME", help="Oracle home for srvctl"),
    srvctl: str = typer.Option(DEFAULT_SRVCTL, "--srvctl", envvar="PLACEMENT_SRVCTL", help="srvctl executable"),
    timeout: float = typer.Option(30.0, "--timeout", help="Seconds allowed per srvctl call"),
    relocate_source: RelocationSourceMode = typer.Option(
        RelocationSourceMode.SINGLE,
        "--relocate-source",
        help="Name the single fallback instance or the full current list as relocation source",
    ),
) -> None:
    """
    Audit service placement.

    Prints a warning for every service not running exactly on its
    preferred instances. With --plan, also prints one start or relocate
    command per corrective action.

    Environment variables:
        ORACLE_HOME: Oracle home used to locate and run srvctl
        PLACEMENT_SNAPSHOT: Snapshot path or URL
        PLACEMENT_SRVCTL: srvctl executable
    """
    _configure_logging(verbose)
    console = Console()
    srvctl_settings = SrvctlSettings(oracle_home=oracle_home, srvctl_path=srvctl, timeout_s=timeout)
    settings = AuditSettings(
        database_filter=database,
        show_plan=plan,
        relocation_source_mode=relocate_source,
    )

    async def _run():
        source = await _create_source(snapshot, srvctl_settings)
        return await PlacementAuditor(source, settings).run()

    try:
        report = asyncio.run(_run())
    except RegistryUnavailableError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(3)

    formatter = CommandFormatter(srvctl=srvctl_settings.executable())
    if json_output:
        print(json.dumps(report_to_dict(report, formatter), indent=2))
    else:
        PlacementReporter(console, formatter, show_plan=settings.show_plan).render(report)
        if not report.outcomes:
            console.print("[yellow]No services found[/yellow]")

    raise typer.Exit(report.exit_code)


@audit_app.command("services")
def list_services(
    database: str = typer.Option(
        None, "--database", "-d", help="Only list services of this database (case-insensitive)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace observation"),
    snapshot: str = typer.Option(
        None, "--snapshot", envvar="PLACEMENT_SNAPSHOT", help="JSON snapshot path or URL instead of srvctl"
    ),
    oracle_home: Path = typer.Option(None, "--oracle-home", envvar="ORACLE_HOME", help="Oracle home for srvctl"),
    srvctl: str = typer.Option(DEFAULT_SRVCTL, "--srvctl", envvar="PLACEMENT_SRVCTL", help="srvctl executable"),
    timeout: float = typer.Option(30.0, "--timeout", help="Seconds allowed per srvctl call"),
) -> None:
    """List the services that an audit would cover."""
    _configure_logging(verbose)
    console = Console()
    srvctl_settings = SrvctlSettings(oracle_home=oracle_home, srvctl_path=srvctl, timeout_s=timeout)

    async def _list():
        source = await _create_source(snapshot, srvctl_settings)
        return await source.list_services(database)

    try:
        keys = asyncio.run(_list())
    except RegistryUnavailableError as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(3)

    if not keys:
        console.print("[yellow]No services found[/yellow]")
        return

    table = Table(title="Services")
    table.add_column("Database", style="cyan")
    table.add_column("Service", style="green")
    for key in keys:
        table.add_row(key.database, key.service)
    console.print(table)
