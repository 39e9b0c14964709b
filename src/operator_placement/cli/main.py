"""Placement CLI - service placement auditing for clustered databases."""

import typer

from operator_placement.cli.audit import audit_app

app = typer.Typer(
    name="operator-placement",
    help="Audit clustered service placement against preferred instances",
    no_args_is_help=True,
)

# Add command groups
app.add_typer(audit_app, name="audit")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
