"""Command-line interface for Swagger to JMeter converter.

This module provides a Click-based CLI for compiling JMeter JMX test plans
from OpenAPI/Swagger specifications.
"""

import re
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from swagger_jmeter import __version__
from swagger_jmeter.core.compiler import TestPlanCompiler
from swagger_jmeter.core.data_structures import TestPlanConfig
from swagger_jmeter.exceptions import MalformedSpecException, SwaggerJMeterException

console = Console()

DEFAULT_PLAN_NAME = "API Performance Test"


def _default_output_path(plan_name: str) -> Path:
    """Build output file name from test plan name (spaces -> underscores)."""
    stem = re.sub(r"\s+", "_", plan_name)
    return Path(f"{stem}.jmx")


def _read_spec(spec_path: Path) -> str:
    """Read spec file text as UTF-8.

    Raises:
        MalformedSpecException: File is not valid UTF-8
    """
    try:
        return spec_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedSpecException(f"Spec file is not valid UTF-8 text: {e}") from e


@click.group()
@click.version_option(version=__version__, prog_name="swagger-jmeter")
def cli():
    """Swagger to JMeter - Compile JMX test plans from OpenAPI specifications.

    Reads an OpenAPI 3.x or Swagger 2.0 document (JSON or YAML) and emits a
    JMeter test plan with one HTTP sampler per operation.
    """
    pass


@cli.command()
@click.argument("spec", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    default=None,
    help="Output JMX file path (default: <test plan name>.jmx)",
    type=click.Path(dir_okay=False),
)
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    help="Print the test plan instead of writing a file",
)
@click.option(
    "--threads",
    default=10,
    help="Number of virtual users/threads (default: 10)",
    type=click.IntRange(min=1),
)
@click.option(
    "--rampup",
    default=10,
    help="Ramp-up period in seconds (default: 10)",
    type=click.IntRange(min=1),
)
@click.option(
    "--loops",
    default=1,
    help="Loop count per thread (default: 1)",
    type=click.IntRange(min=1),
)
@click.option(
    "--base-url",
    default="",
    help="Base URL (default: derived from servers/host in the spec)",
)
@click.option(
    "--name",
    default=DEFAULT_PLAN_NAME,
    help=f"Test plan name (default: {DEFAULT_PLAN_NAME})",
)
def generate(
    spec: str,
    output: Optional[str],
    to_stdout: bool,
    threads: int,
    rampup: int,
    loops: int,
    base_url: str,
    name: str,
):
    """Generate JMeter JMX test plan from OpenAPI specification.

    Example:
        swagger-jmeter generate openapi.yaml
        swagger-jmeter generate swagger.json --output tests/api.jmx
        swagger-jmeter generate openapi.yaml --threads 50 --rampup 30 --loops 5
        swagger-jmeter generate openapi.yaml --base-url https://staging.example.com
        swagger-jmeter generate openapi.yaml --stdout > plan.jmx
    """
    try:
        config = TestPlanConfig(
            thread_count=threads,
            ramp_up_seconds=rampup,
            loop_count=loops,
            base_url=base_url,
            test_plan_name=name,
        )

        spec_path = Path(spec)
        raw_text = _read_spec(spec_path)

        compiler = TestPlanCompiler()
        jmx = compiler.compile(raw_text, config, filename=spec_path.name)

        if to_stdout:
            click.echo(jmx, nl=False)
            return

        output_file = Path(output) if output else _default_output_path(name)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(jmx, encoding="utf-8")

        sampler_count = jmx.count("<HTTPSamplerProxy ")
        console.print(
            Panel(
                f"[bold green]✓ JMeter test plan generated[/bold green]\n\n"
                f"File: {output_file}\n"
                f"Samplers: {sampler_count}\n"
                f"Load profile: {threads} threads, {rampup}s ramp-up, {loops} loop(s)",
                border_style="green",
            )
        )

    except SwaggerJMeterException as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except OSError as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


@cli.command()
@click.argument("spec", type=click.Path(exists=True, dir_okay=False))
def inspect(spec: str):
    """List the operations a test plan would contain.

    Example:
        swagger-jmeter inspect openapi.yaml
    """
    try:
        spec_path = Path(spec)
        raw_text = _read_spec(spec_path)

        spec_data = TestPlanCompiler().describe(raw_text, filename=spec_path.name)

        title = escape(spec_data["title"] or spec_path.name)
        spec_kind = escape(f"{spec_data['spec_type']} {spec_data['spec_version']}")
        base_url = escape(spec_data["base_url"]) if spec_data["base_url"] else "[dim]not declared[/dim]"
        console.print(f"\n[bold]{title}[/bold] ({spec_kind})")
        console.print(f"Base URL: {base_url}\n")

        table = Table(title=f"{len(spec_data['operations'])} Operations", show_header=True)
        table.add_column("#", style="dim", width=3)
        table.add_column("Method", style="cyan")
        table.add_column("Path", style="green")
        table.add_column("Sampler")
        table.add_column("Tags", style="yellow")
        table.add_column("Body")

        for idx, operation in enumerate(spec_data["operations"], 1):
            table.add_row(
                str(idx),
                operation.method,
                escape(operation.path),
                escape(operation.sampler_name),
                escape(", ".join(operation.tags)),
                "yes" if operation.needs_body else "",
            )

        console.print(table)

    except SwaggerJMeterException as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except OSError as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


def main():
    """Entry point for CLI application."""
    cli()


if __name__ == "__main__":
    main()
