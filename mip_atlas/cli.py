"""
Command-line interface for baking texture atlases.
"""

import os
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table

from .config import AtlasBuildConfig, ENV_PREFIX, ENV_VARIABLES
from .pipeline import AtlasBuildPipeline, AtlasBuildError, BuildResult

app = typer.Typer(
    name="mip-atlas",
    help="Texture atlas baker - pack textures into mip-mapped atlas pages",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]mip-atlas build textures/ -o build/atlas[/cyan]                  Bake with default settings
  [cyan]mip-atlas build textures/ --method mip_with_padding --padding 8[/cyan]
  [cyan]mip-atlas config --env-vars[/cyan]                               List environment overrides
    """
)
console = Console()


@app.command()
def build(
    input_dir: Optional[Path] = typer.Argument(None, help="Directory containing source textures"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    size: Optional[int] = typer.Option(None, "--size", help="Page edge length in pixels"),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", help="Maximum number of pages"),
    method: Optional[str] = typer.Option(None, "--method", help="Mip method (no_mip, no_mip_with_padding, mip, mip_with_padding, mip_with_block)"),
    mip_filter: Optional[str] = typer.Option(None, "--filter", help="Mip filter (nearest, linear, cubic, gaussian, lanczos3)"),
    padding: Optional[int] = typer.Option(None, "--padding", help="Padding in pixels for padding methods"),
    block_size: Optional[int] = typer.Option(None, "--block-size", help="Block size for mip_with_block"),
    wrap: Optional[str] = typer.Option(None, "--wrap", help="Default wrap mode (clamp, repeat, mirror)"),
    manifest_format: Optional[str] = typer.Option(None, "--manifest-format", help="Manifest format (json, toml)"),
    no_mips: bool = typer.Option(False, "--no-mips", help="Write only level 0 of each page"),
):
    """Pack a directory of textures into atlas pages."""
    console.print("[bold blue]Baking texture atlas...[/bold blue]")

    config = _load_config(config_file)

    overrides = {
        'size': size,
        'max_page_count': max_pages,
        'mip_method': method,
        'mip_filter': mip_filter,
        'padding': padding,
        'block_size': block_size,
        'default_wrap': wrap,
        'manifest_format': manifest_format,
    }
    for attribute, value in overrides.items():
        if value is not None:
            setattr(config, attribute, value)
    if no_mips:
        config.save_mip_maps = False

    errors = config.validate()
    if errors:
        console.print("[red]Configuration validation errors:[/red]")
        for error in errors:
            console.print(f"  • {error}")
        raise typer.Exit(1)

    try:
        result = AtlasBuildPipeline(config).run(input_dir, output_dir)
    except AtlasBuildError as e:
        console.print(f"[red]Atlas build failed:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)

    _display_build_summary(result)

    if result.validation_errors:
        console.print(f"[yellow]Warning:[/yellow] {len(result.validation_errors)} validation issue(s)")
        for error in result.validation_errors:
            console.print(f"  • {error}")

    console.print(f"[green]✓[/green] Wrote manifest: {result.manifest_path}")


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate_config: bool = typer.Option(False, "--validate", help="Validate configuration file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables")
):
    """Manage build configuration."""
    try:
        if env_vars:
            _display_env_vars()
            return

        if show or validate_config:
            config = _load_config(config_file)

            if show:
                _display_config(config)

            if validate_config:
                errors = config.validate()
                if errors:
                    console.print("[red]Configuration validation errors:[/red]")
                    for error in errors:
                        console.print(f"  • {error}")
                    raise typer.Exit(1)
                else:
                    console.print("[green]✓ Configuration is valid[/green]")
        else:
            console.print("Use --show to display configuration, --validate to check it, or --env-vars to see environment variables.")

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"[red]Error managing configuration:[/red] {e}")
        raise typer.Exit(1)


def _load_config(config_file: Optional[Path]) -> AtlasBuildConfig:
    """Load configuration from file or use defaults with environment variable support."""
    config = None

    if config_file:
        if not config_file.exists():
            console.print(f"[red]Configuration file not found:[/red] {config_file}")
            raise typer.Exit(1)
        try:
            config = AtlasBuildConfig.from_file(config_file)
        except ValueError as e:
            console.print(f"[red]Invalid configuration file:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"[dim]Using configuration: {config_file}[/dim]")
    else:
        for config_path in (Path("mip_atlas.toml"), Path("mip_atlas.json")):
            if config_path.exists():
                console.print(f"[dim]Using configuration: {config_path}[/dim]")
                config = AtlasBuildConfig.from_file(config_path)
                break

        if config is None:
            console.print("[dim]Using default configuration[/dim]")
            config = AtlasBuildConfig()

    config = AtlasBuildConfig._apply_env_overrides(config)

    env_vars_used = [key for key in os.environ if key.startswith(ENV_PREFIX)]
    if env_vars_used:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")

    return config


def _display_build_summary(result: BuildResult) -> None:
    """Display atlas build summary."""
    atlas = result.atlas

    table = Table(title="Atlas Build Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Entries", str(len(result.entry_names)))
    table.add_row("Pages", str(atlas.page_count))
    table.add_row("Page size", f"{atlas.size}×{atlas.size}")
    table.add_row("Mip levels", str(atlas.mip_level_count))
    table.add_row("Pixel mode", atlas.mode)
    table.add_row("Files written", str(sum(len(files) for files in result.page_files) + 1))
    table.add_row("Build time", f"{result.duration:.2f}s")

    console.print(table)


def _display_config(config: AtlasBuildConfig) -> None:
    """Display configuration in a formatted table."""
    table = Table(title="Atlas Build Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Max Page Count", str(config.max_page_count))
    table.add_row("Page Size", f"{config.size}×{config.size}")
    table.add_row("Mip Method", config.mip_method)
    table.add_row("Mip Filter", config.mip_filter)
    table.add_row("Padding", str(config.padding))
    table.add_row("Block Size", str(config.block_size))

    table.add_row("Default Wrap", config.default_wrap)
    table.add_row("Wrap Overrides", str(config.wrap_overrides))

    table.add_row("Input Directory", config.input_dir)
    table.add_row("Output Directory", config.output_dir)

    table.add_row("Atlas Name", config.atlas_name)
    table.add_row("Output Format", config.output_format)
    table.add_row("Manifest Format", config.manifest_format)
    table.add_row("Compression Level", str(config.compression_level))
    table.add_row("Save Mip Maps", str(config.save_mip_maps))

    console.print(table)


def _display_env_vars() -> None:
    """Display available environment variables."""
    table = Table(title="Environment Variables")
    table.add_column("Variable", style="cyan")
    table.add_column("Setting", style="green")
    table.add_column("Current Value", style="yellow")

    for variable, (attribute, _) in ENV_VARIABLES.items():
        table.add_row(variable, attribute, os.getenv(variable, "-"))

    console.print(table)


if __name__ == "__main__":
    app()
