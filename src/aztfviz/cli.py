"""Command-line interface for Python AzTfViz."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .core import (
    AzTfViz,
    FlowDirection,
    GroupBy,
    LayoutMode,
    LayoutOptions,
    ResourceCategory,
    Theme,
    ZoneClassifier,
)
from .core.zones import layer_of
from .visualization.layout_engine import extract_resource_group_name

# Setup rich console
console = Console()


# Configure logging
def setup_logging(verbose: bool = False) -> None:
    """Setup logging with rich handler."""
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_resources_file(path: str) -> list[dict[str, Any]]:
    """Read extractor output: a JSON list of resources or ``{"resources": [...]}``."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("resources")
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of resources or an object with a 'resources' list")
    return data


def build_options(options_file: str | None, overrides: dict[str, Any]) -> dict[str, Any]:
    """Options from an optional JSON file, with command-line values taking precedence."""
    options: dict[str, Any] = {}
    if options_file:
        with open(options_file, encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ValueError(f"{options_file} must contain a JSON object")
        # normalise camelCase keys to field names so command-line values win
        options.update(LayoutOptions.model_validate(loaded).model_dump(exclude_unset=True))

    for key, value in overrides.items():
        if value is None or value == ():
            continue
        options[key] = list(value) if isinstance(value, tuple) else value
    return options


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Python AzTfViz - Terraform/Azure diagram layout tool.

    Turn Terraform resources into a positioned diagram: nodes with
    coordinates, group containers and typed connections.

    \b
    Examples:
      python-aztfviz preview resources.json
      python-aztfviz recommend resources.json
      python-aztfviz export resources.json -o diagram.json
      python-aztfviz export resources.json --layout zones --group-by zone --theme dark
    """
    setup_logging(verbose)

    # Store global options in context for commands to use
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("resources_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    default="diagram.json",
    help="Output file path, '-' for stdout (default: diagram.json)",
)
@click.option("--options-file", type=click.Path(exists=True, dir_okay=False), help="JSON file with layout options")
@click.option("--layout", "-l", type=click.Choice([m.value for m in LayoutMode]), help="Layout strategy (default: flow)")
@click.option(
    "--flow-direction",
    type=click.Choice([d.value for d in FlowDirection]),
    help="Flow layout direction (default: top-bottom)",
)
@click.option(
    "--group-by",
    type=click.Choice([g.value for g in GroupBy]),
    help="Grouping; resourceGroup overrides --layout (default: resourceGroup)",
)
@click.option("--theme", "-t", type=click.Choice([t.value for t in Theme]), help="Visual theme (default: light)")
@click.option("--compact", "compact_mode", is_flag=True, help="Use compact node size")
@click.option("--no-zones", "hide_zones", is_flag=True, help="Do not draw zone containers in the flow layout")
@click.option("--max-connections", type=click.IntRange(min=0), help="Maximum connections per resource (default: 2)")
@click.option("--show-implicit", is_flag=True, help="Include references found in attribute values")
@click.option("--hide-cross-environment", is_flag=True, help="Drop references between environments")
@click.option("--width", type=float, help="Canvas width (default: 4000)")
@click.option("--height", type=float, help="Canvas height (default: 3000)")
@click.option("--padding", type=float, help="Canvas padding (default: 100)")
@click.option(
    "--include-category",
    multiple=True,
    type=click.Choice([c.value for c in ResourceCategory]),
    help="Only include these categories. Can be specified multiple times.",
)
@click.option(
    "--exclude-category",
    multiple=True,
    type=click.Choice([c.value for c in ResourceCategory]),
    help="Exclude these categories. Can be specified multiple times.",
)
@click.option("--include-type", multiple=True, help="Only include these resource types (supports wildcards).")
@click.option(
    "--exclude",
    "exclude_type",
    multiple=True,
    help="Resource types to exclude (supports wildcards). Can be specified multiple times.",
)
@click.option("--environment", "-e", help="Only include resources from this environment")
@click.pass_context
def export(
    ctx: click.Context,
    resources_file: str,
    output: str,
    options_file: str | None,
    layout: str | None,
    flow_direction: str | None,
    group_by: str | None,
    theme: str | None,
    compact_mode: bool,
    hide_zones: bool,
    max_connections: int | None,
    show_implicit: bool,
    hide_cross_environment: bool,
    width: float | None,
    height: float | None,
    padding: float | None,
    include_category: tuple,
    exclude_category: tuple,
    include_type: tuple,
    exclude_type: tuple,
    environment: str | None,
) -> None:
    """Lay out resources and write the diagram as JSON.

    RESOURCES_FILE is the extractor output: a JSON list of resources
    or an object with a "resources" list.

    \b
    Examples:
      python-aztfviz export resources.json
      python-aztfviz export resources.json --layout microservices --group-by none
      python-aztfviz export resources.json --exclude "*_subnet" -o - | jq .connections
    """
    try:
        verbose_mode = ctx.obj.get("verbose", False)

        resources = load_resources_file(resources_file)
        options = build_options(
            options_file,
            {
                "layout": layout,
                "flow_direction": flow_direction,
                "group_by": group_by,
                "theme": theme,
                "compact_mode": True if compact_mode else None,
                "show_zones": False if hide_zones else None,
                "max_connections_per_resource": max_connections,
                "hide_implicit_dependencies": False if show_implicit else None,
                "hide_cross_environment": True if hide_cross_environment else None,
                "width": width,
                "height": height,
                "padding": padding,
                "include_categories": include_category,
                "exclude_categories": exclude_category,
                "include_types": include_type,
                "exclude_types": exclude_type,
                "environment": environment,
            },
        )

        if verbose_mode:
            console.print(f"🎨 Laying out {len(resources)} resources...", style="green")

        diagram = AzTfViz().generate(resources, options)
        content = json.dumps(diagram.to_dict(), indent=2)

        if output == "-":
            click.echo(content)
            return

        Path(output).write_text(content + "\n", encoding="utf-8")
        if verbose_mode:
            console.print(
                f"📊 {len(diagram.nodes)} nodes, {len(diagram.connections)} connections",
                style="blue",
            )
        console.print(f"{output}", style="green")

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red")
        if logging.getLogger().level == logging.DEBUG:
            console.print_exception()
        sys.exit(1)


@cli.command("preview")
@click.argument("resources_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def preview_resources(ctx: click.Context, resources_file: str) -> None:
    """Preview how resources are classified without laying them out.

    \b
    Examples:
      python-aztfviz preview resources.json
    """
    try:
        verbose_mode = ctx.obj.get("verbose", False)

        aztfviz = AzTfViz()
        resources = aztfviz.load_resources(load_resources_file(resources_file))

        if not resources:
            console.print("No resources found.", style="yellow")
            return

        classifier = ZoneClassifier(aztfviz.icon_manager)

        table = Table(title=f"Resources in '{resources_file}'")
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Type", style="magenta")
        table.add_column("Category", style="green")
        table.add_column("Zone", style="blue")
        table.add_column("Layer", style="blue")
        table.add_column("Resource Group", style="yellow")
        table.add_column("Environment", style="white")

        for resource in resources:
            zone = classifier.classify(resource.type)
            table.add_row(
                resource.name,
                resource.type,
                aztfviz.icon_manager.get_resource_info(resource.type).category.value,
                zone.value,
                layer_of(zone).value,
                extract_resource_group_name(resource),
                resource.environment or "",
            )

        console.print(table)
        if verbose_mode:
            console.print(f"\n📊 Total: {len(resources)} resources", style="blue")

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red")
        if logging.getLogger().level == logging.DEBUG:
            console.print_exception()
        sys.exit(1)


@cli.command("recommend")
@click.argument("resources_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the options as JSON for --options-file")
def recommend_layout(resources_file: str, as_json: bool) -> None:
    """Recommend layout options for a set of resources.

    \b
    Examples:
      python-aztfviz recommend resources.json
      python-aztfviz recommend resources.json --json > options.json
    """
    try:
        resources = AzTfViz.load_resources(load_resources_file(resources_file))
        options = AzTfViz.get_recommended_layout(len(resources), [r.type for r in resources])
        recommended = options.model_dump(
            mode="json",
            by_alias=True,
            include={"layout", "flow_direction", "show_zones", "compact_mode", "group_by"},
        )

        if as_json:
            click.echo(json.dumps(recommended, indent=2))
            return

        table = Table(title=f"Recommended Layout ({len(resources)} resources)")
        table.add_column("Option", style="cyan")
        table.add_column("Value", style="magenta")
        for key, value in recommended.items():
            table.add_row(key, str(value))

        console.print(table)

    except Exception as e:
        console.print(f"❌ Error: {e}", style="red")
        if logging.getLogger().level == logging.DEBUG:
            console.print_exception()
        sys.exit(1)


@cli.command("info")
def show_info() -> None:
    """Show information about supported layouts, themes, and options."""
    # Layouts
    layouts_table = Table(title="Supported Layouts")
    layouts_table.add_column("Layout", style="cyan")
    layouts_table.add_column("Description", style="green")

    layout_descriptions = {
        "flow": "Zones as bands along the flow direction (default)",
        "layered": "Seven fixed tiers from client to management",
        "zones": "Security zone columns with titles",
        "microservices": "Compute on an inner ring, shared services on an outer ring",
    }

    for mode in LayoutMode:
        layouts_table.add_row(mode.value, layout_descriptions.get(mode.value, ""))

    console.print(layouts_table)

    # Themes
    themes_table = Table(title="Supported Themes")
    themes_table.add_column("Theme", style="cyan")
    themes_table.add_column("Description", style="green")

    theme_descriptions = {
        "light": "Standard Azure colors (default)",
        "dark": "Every color darkened for dark backgrounds",
        "blueprint": "Light blue group containers",
    }

    for theme in Theme:
        themes_table.add_row(theme.value, theme_descriptions.get(theme.value, ""))

    console.print(themes_table)

    # Layout options
    options_table = Table(title="Layout Options")
    options_table.add_column("Option", style="cyan")
    options_table.add_column("Values", style="magenta")
    options_table.add_column("Description", style="green")

    options_table.add_row(
        "--flow-direction",
        ", ".join(d.value for d in FlowDirection),
        "Primary axis of the flow layout",
    )
    options_table.add_row(
        "--group-by",
        ", ".join(g.value for g in GroupBy),
        "resourceGroup stacks one container per resource group",
    )
    options_table.add_row(
        "--max-connections",
        "0..n",
        "Connections kept per resource (default: 2)",
    )
    options_table.add_row(
        "--compact",
        "flag",
        "140x52 nodes instead of 180x64",
    )

    console.print(options_table)


def main() -> None:
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
