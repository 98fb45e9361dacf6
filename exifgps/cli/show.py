import typer
from rich import print
from rich.console import Console
from rich.table import Table

from exifgps.cli import settings
from exifgps.pipeline import Variant, build_header

cli = typer.Typer(no_args_is_help=True)

console = Console()


@cli.command(name="settings")
def show_settings():
    """
    Display the current settings that have been detected.
    """
    print(settings)


@cli.command(name="variants")
def show_variants():
    """
    List the output variants and the columns each one writes.
    """
    table = Table(
        "[green]Variant[/green]",
        "Steps",
        "Columns",
        title="Output variants",
        title_style="bold",
        title_justify="left",
    )
    for variant in Variant:
        options = variant.options
        steps = [name for name, enabled in options.model_dump().items() if enabled]
        name = f"[green]{variant.value}[/green]"
        if variant is settings.variant:
            name += " [yellow](active)[/yellow]"
        table.add_row(name, "\n".join(steps), "\n".join(build_header(options)))

    console.print(table)
