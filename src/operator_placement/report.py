"""
Rendering of audit reports for operators.

PlacementReporter prints, in audit order:
- one WARNING line per non-compliant service with its current and
  preferred instance lists exactly as declared (never re-sorted)
- one WARNING line per preferred instance that could not be targeted
- one ERROR line per service that could not be evaluated
- when enabled, one command line per action in the plan
followed by a summary table when no plan is printed, so plan output
holds only literal lines.

Literal lines are printed with markup disabled so instance lists in
square brackets and command text reach the terminal unchanged.
"""

from rich.console import Console
from rich.table import Table

from operator_placement.audit import AuditReport, ServiceOutcome
from operator_placement.commands import CommandFormatter
from operator_placement.types import ReconciliationResult


def format_drift(result: ReconciliationResult) -> str:
    """Build the drift warning line for a non-compliant service."""
    key = result.key
    current = "down" if result.observed.down else ",".join(result.observed.running)
    preferred = ",".join(result.desired.preferred)
    return f"WARNING: {key.service} ({key.database}) running on [{current}], preferred [{preferred}]"


class PlacementReporter:
    """Prints an AuditReport to a rich Console."""

    def __init__(
        self,
        console: Console | None = None,
        formatter: CommandFormatter | None = None,
        show_plan: bool = False,
        show_summary: bool = True,
    ) -> None:
        self.console = console or Console()
        self.formatter = formatter or CommandFormatter()
        self.show_plan = show_plan
        self.show_summary = show_summary

    def _line(self, text: str, style: str | None = None) -> None:
        self.console.print(text, style=style, markup=False, highlight=False, soft_wrap=True)

    def render(self, report: AuditReport) -> None:
        for outcome in report.outcomes:
            self.render_outcome(outcome)
        if self.show_summary and not self.show_plan and report.outcomes:
            self.console.print()
            self.console.print(self.summary_table(report))

    def render_outcome(self, outcome: ServiceOutcome) -> None:
        key = outcome.key
        if outcome.error is not None:
            self._line(f"ERROR: {key.service} ({key.database}): {outcome.error}", style="red")
            return

        result = outcome.result
        if result is None or result.compliant:
            return

        self._line(format_drift(result), style="yellow")
        for warning in result.warnings:
            self._line(f"WARNING: {key.service} ({key.database}): {warning.message}", style="yellow")
        if self.show_plan:
            for line in self.formatter.render_plan(key, result.plan):
                self._line(line)

    def summary_table(self, report: AuditReport) -> Table:
        table = Table(title="Service Placement")
        table.add_column("Database", style="cyan")
        table.add_column("Service", style="cyan")
        table.add_column("Preferred")
        table.add_column("Running")
        table.add_column("Status")
        table.add_column("Actions", justify="right")

        for outcome in report.outcomes:
            key = outcome.key
            result = outcome.result
            if result is None:
                table.add_row(key.database, key.service, "-", "-", "[red]error[/red]", "-")
                continue
            running = "down" if result.observed.down else ",".join(result.observed.running)
            status = "[green]compliant[/green]" if result.compliant else "[yellow]drift[/yellow]"
            table.add_row(
                key.database,
                key.service,
                ",".join(result.desired.preferred),
                running,
                status,
                str(len(result.plan)),
            )

        return table


def report_to_dict(report: AuditReport, formatter: CommandFormatter | None = None) -> dict:
    """Convert a report into JSON-serialisable data for automation."""
    formatter = formatter or CommandFormatter()
    services = []
    for outcome in report.outcomes:
        key = outcome.key
        entry: dict = {"database": key.database, "service": key.service}
        if outcome.error is not None:
            entry["error"] = {"type": type(outcome.error).__name__, "message": str(outcome.error)}
            services.append(entry)
            continue

        result = outcome.result
        entry.update(
            {
                "compliant": result.compliant,
                "preferred": list(result.desired.preferred),
                "available": list(result.desired.available),
                "running": list(result.observed.running),
                "down": result.observed.down,
                "instance_health": {
                    instance: health.value
                    for instance, health in result.observed.instance_health.items()
                },
                "warnings": [
                    {"kind": w.kind.value, "instance": w.instance, "message": w.message}
                    for w in result.warnings
                ],
                "plan": formatter.render_plan(key, result.plan),
            }
        )
        services.append(entry)

    return {"exit_code": report.exit_code, "services": services}
