import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from filterbox.application.schema_config import load_schema_config, load_serialized_expressions
from filterbox.application.serialization import deserialize, serialize, to_display_string, to_query_string
from filterbox.application.validation import validate_expressions, validate_schema
from filterbox.config import load_settings
from filterbox.domain.errors import FilterBoxError
from filterbox.domain.schema import FilterSchema
from filterbox.domain.types import FilterExpression, ValidationResult
from filterbox.logger import get_logger, setup_logger
from filterbox.presentation.demo_schema import build_demo_schema

logger = get_logger("main")
console = Console()

cli = typer.Typer(
    name="filterbox",
    help="Build, validate and inspect structured filter expressions",
    epilog="""
    Examples:
    $ filterbox demo
    $ filterbox validate examples/issues_schema.json examples/issues_filters.json
    """,
    add_completion=False,
)


@cli.callback()
def configure(
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG level"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Also log to stderr (not useful with demo)"),
):
    """Configure logging from FILTERBOX_* settings (and .env)."""
    settings = load_settings()
    path = setup_logger(
        log_file=settings.log_file,
        log_level="DEBUG" if debug else settings.log_level,
        console_output=verbose,
    )
    logger.debug(f"Logging to {path}")


def _fail(error: FilterBoxError) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(code=1)


def _load(schema_path: Optional[Path], filters_path: Optional[Path]) -> tuple[FilterSchema, list[FilterExpression]]:
    try:
        schema = load_schema_config(schema_path) if schema_path else build_demo_schema(load_settings(dotenv=False))
        expressions = deserialize(load_serialized_expressions(filters_path), schema) if filters_path else []
    except FilterBoxError as e:
        _fail(e)
    return schema, expressions


def _print_result(result: ValidationResult, title: str) -> None:
    if result.errors or result.warnings:
        table = Table(title=title)
        table.add_column("Severity")
        table.add_column("Expression")
        table.add_column("Field")
        table.add_column("Message")
        for error in result.errors:
            index = "" if error.expression_index is None else str(error.expression_index)
            table.add_row("[red]error[/red]", index, error.field or "", error.message)
        for warning in result.warnings:
            index = "" if warning.expression_index is None else str(warning.expression_index)
            table.add_row("[yellow]warning[/yellow]", index, warning.field or "", warning.message)
        console.print(table)

    if result.valid:
        console.print(f"[green]✓[/green] {title}: valid")
    else:
        console.print(f"[red]✗[/red] {title}: {len(result.errors)} error(s)")


@cli.command()
def demo(
    schema_path: Optional[Path] = typer.Option(None, "--schema", "-s", help="JSON schema file (defaults to the built-in demo schema)"),
    filters_path: Optional[Path] = typer.Option(None, "--filters", "-f", help="JSON file with initial expressions"),
):
    """Build filters interactively in the terminal."""
    from filterbox.presentation.tui import FilterApp

    schema, expressions = _load(schema_path, filters_path)
    logger.info(f"Starting demo with {len(schema.fields)} fields and {len(expressions)} expressions")

    app = FilterApp(schema, expressions)
    app.run()

    final = app.store.expressions
    if final:
        console.print(to_display_string(final))
        console.print_json(json.dumps([item.to_dict() for item in serialize(final, schema)]))


@cli.command()
def validate(
    schema_path: Path = typer.Argument(..., help="JSON schema file"),
    filters_path: Optional[Path] = typer.Argument(None, help="JSON file with expressions to validate"),
):
    """Check a schema and, optionally, a list of expressions against it."""
    schema, expressions = _load(schema_path, filters_path)

    schema_result = validate_schema(schema)
    _print_result(schema_result, f"Schema {schema_path.name}")
    valid = schema_result.valid

    if filters_path is not None:
        filters_result = validate_expressions(expressions, schema)
        _print_result(filters_result, f"Filters {filters_path.name}")
        valid = valid and filters_result.valid

    if not valid:
        raise typer.Exit(code=1)


@cli.command()
def describe(
    filters_path: Path = typer.Argument(..., help="JSON file with expressions"),
    schema_path: Optional[Path] = typer.Option(None, "--schema", "-s", help="JSON schema file (defaults to the built-in demo schema)"),
):
    """Print expressions as readable text and as a URL query string."""
    schema, expressions = _load(schema_path, filters_path)
    if not expressions:
        console.print("[dim]No filters[/dim]")
        return
    console.print(to_display_string(expressions))
    console.print(f"?{to_query_string(expressions)}")


@cli.command()
def fields(
    schema_path: Optional[Path] = typer.Option(None, "--schema", "-s", help="JSON schema file (defaults to the built-in demo schema)"),
):
    """List the fields and operators a schema offers."""
    schema, _ = _load(schema_path, None)

    table = Table(title="Fields")
    table.add_column("Key", style="cyan")
    table.add_column("Label")
    table.add_column("Type")
    table.add_column("Operators")
    for field in schema.fields:
        table.add_row(field.key, field.label, field.type.value, ", ".join(op.key for op in field.operators))
    console.print(table)
    if schema.allow_freeform_fields:
        console.print("[dim]Free-form fields are allowed[/dim]")


if __name__ == "__main__":
    cli()
