"""CLI entry point for Logseek."""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from logseq_blocks import page_title, serialize_blocks
from logseq_blocks.parser import parse_property_value
from logseek.config import ConfigManager
from logseek.services.exceptions import LogseekError
from logseek.services.graph_store import GraphStore
from logseek.services.path_filter import PathFilter
from logseek.services.search import SearchService
from logseek.utils.logging import configure_logging, get_logger
from logseek.utils.logseq_urls import create_logseq_url, create_terminal_link


logger = get_logger(__name__)
console = Console()


def load_config(config_path: Optional[Path], graph_path: Optional[Path]) -> ConfigManager:
    """
    Resolve the configuration for this invocation.

    Args:
        config_path: Explicit config file (--config)
        graph_path: Graph directory (--graph), bypasses the config file

    Returns:
        ConfigManager for the selected graph

    Raises:
        click.ClickException: If config is missing or validation fails
    """
    try:
        if graph_path is not None:
            return ConfigManager.for_graph(graph_path)
        if config_path is not None:
            return ConfigManager.load_from_path(config_path)
        return ConfigManager.load_default()
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except PermissionError as e:
        logger.error("config_permission_error", error=str(e))
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.ClickException(str(e))


def _path_filter(config: ConfigManager) -> PathFilter:
    return PathFilter(
        ignored_patterns=config.graph.ignored_patterns,
        allowed_extensions=config.graph.allowed_extensions,
    )


def _config(ctx: click.Context) -> ConfigManager:
    """Load the configuration once per invocation."""
    options = ctx.obj
    if "config" not in options:
        options["config"] = load_config(options["config_path"], options["graph_path"])
    return options["config"]


def _graph_store(ctx: click.Context) -> GraphStore:
    config = _config(ctx)
    return GraphStore(Path(config.graph.graph_path), _path_filter(config))


def _search_service(ctx: click.Context) -> SearchService:
    config = _config(ctx)
    return SearchService(Path(config.graph.graph_path), _path_filter(config))


def _run(coro) -> Any:
    """Run a service coroutine, turning domain errors into CLI errors."""
    try:
        return asyncio.run(coro)
    except LogseekError as e:
        logger.error("command_failed", error=str(e), error_type=type(e).__name__)
        raise click.ClickException(str(e))
    except ValueError as e:
        logger.error("command_failed", error=str(e), error_type=type(e).__name__)
        raise click.ClickException(str(e))


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _parse_properties(values: tuple[str, ...]) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected key=value, got {item!r}", param_hint="--property")
        properties[key.strip()] = parse_property_value(value.strip())
    return properties


def _page_link(path: str, graph_path: Path, block_id: Optional[str] = None) -> str:
    title = page_title(path)
    return create_terminal_link(title, create_logseq_url(title, graph_path, block_id))


@click.group()
@click.version_option(version="0.1.0", prog_name="logseek")
@click.option(
    "--graph",
    "graph_path",
    type=click.Path(path_type=Path, file_okay=False),
    help="Logseq graph directory (overrides the config file)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    help="Configuration file (default: ~/.config/logseek/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, graph_path: Optional[Path], config_path: Optional[Path]):
    """Logseek: search and edit a Logseq graph from the command line."""
    configure_logging()
    ctx.obj = {"graph_path": graph_path, "config_path": config_path}


@cli.command()
@click.argument("query")
@click.option("--limit", type=int, default=None, help="Maximum results (at most 20)")
@click.option("--case-sensitive", is_flag=True, help="Match case exactly")
@click.option("--frontmatter/--no-frontmatter", default=False, help="Search YAML frontmatter")
@click.option("--properties/--no-properties", default=True, help="Search block properties")
@click.option("--content/--no-content", default=True, help="Search block content")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    limit: Optional[int],
    case_sensitive: bool,
    frontmatter: bool,
    properties: bool,
    content: bool,
    as_json: bool,
):
    """
    Search blocks for a literal text.

    Examples:
        logseek search "quarterly review"
        logseek search status --frontmatter --no-content --json
    """
    config = _config(ctx)
    logger.info("search_command_started", query=query)

    results = _run(
        _search_service(ctx).search(
            query,
            limit=limit if limit is not None else config.search.default_limit,
            search_content=content,
            search_frontmatter=frontmatter,
            search_block_properties=properties,
            case_sensitive=case_sensitive or config.search.case_sensitive,
        )
    )

    if as_json:
        _echo_json([result.to_dict() for result in results])
        return

    if not results:
        console.print("No results found.")
        return

    graph_path = Path(config.graph.graph_path)
    for idx, result in enumerate(results, 1):
        location = f"line {result.line}" if result.line else result.block_id
        click.echo(f"{idx}. {_page_link(result.path, graph_path, result.block_id)}  ({location})")
        console.print(f"   [dim]{escape(result.path)}[/dim]  matches: {result.match_count}")
        console.print(f"   {escape(result.excerpt)}", highlight=False)
        click.echo()

    logger.info("search_command_completed", results=len(results))


@cli.command()
@click.option("--marker", "markers", multiple=True, help="Task marker to include (repeatable)")
@click.option("--path", "path_prefix", default=None, help="Only files under this path prefix")
@click.option("--limit", type=int, default=None, help="Maximum results (at most 20)")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def tasks(ctx: click.Context, markers: tuple[str, ...], path_prefix: Optional[str], limit: Optional[int], as_json: bool):
    """
    List task blocks (TODO, DOING, DONE, ...).

    Examples:
        logseek tasks
        logseek tasks --marker todo --marker doing --path journals/
    """
    config = _config(ctx)
    results = _run(
        _search_service(ctx).search_tasks(
            markers=list(markers) or None,
            path=path_prefix,
            limit=limit if limit is not None else config.search.task_limit,
        )
    )

    if as_json:
        _echo_json([result.to_dict() for result in results])
        return

    if not results:
        console.print("No tasks found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Marker")
    table.add_column("Pri")
    table.add_column("Task")
    table.add_column("Page")
    for result in results:
        table.add_row(
            result.marker.value,
            result.priority.value if result.priority else "",
            escape(result.content),
            escape(result.path),
        )
    console.print(table)


@cli.command("read-page")
@click.argument("path")
@click.option("--resolve-refs", is_flag=True, help="Replace ((uuid)) references with block content")
@click.option("--json", "as_json", is_flag=True, help="Print the page and its blocks as JSON")
@click.pass_context
def read_page(ctx: click.Context, path: str, resolve_refs: bool, as_json: bool):
    """Print a page of the graph."""
    page = _run(_graph_store(ctx).read_page(path, resolve_refs=resolve_refs))

    if as_json:
        _echo_json(page.to_dict())
        return

    console.print(f"[bold]{escape(page.title)}[/bold]  [dim]{escape(page.path)}[/dim]")
    if page.frontmatter:
        for key, value in page.frontmatter.items():
            console.print(f"[cyan]{escape(str(key))}[/cyan]: {escape(str(value))}", highlight=False)
    click.echo()
    click.echo(page.content)


@cli.command("read-block")
@click.argument("block_id")
@click.option("--json", "as_json", is_flag=True, help="Print the block as JSON")
@click.pass_context
def read_block(ctx: click.Context, block_id: str, as_json: bool):
    """Print a block and its children, found anywhere in the graph."""
    block = _run(_graph_store(ctx).find_block_by_id(block_id))
    if block is None:
        raise click.ClickException(f"Block not found: {block_id}")

    if as_json:
        _echo_json(block.to_dict(include_children=True))
        return

    graph_path = Path(_config(ctx).graph.graph_path)
    click.echo(_page_link(block.source_path, graph_path, block.block_id))
    console.print(f"[dim]{escape(block.source_path)}[/dim]")
    click.echo(serialize_blocks([block]))


@cli.command()
@click.argument("block_id")
@click.option("--json", "as_json", is_flag=True, help="Print references as JSON")
@click.pass_context
def refs(ctx: click.Context, block_id: str, as_json: bool):
    """List blocks that reference BLOCK_ID."""
    references = _run(_graph_store(ctx).get_block_refs(block_id))

    if as_json:
        _echo_json([reference.to_dict() for reference in references])
        return

    if not references:
        console.print("No references found.")
        return

    for reference in references:
        console.print(
            f"[dim]{escape(reference.path)}[/dim] {reference.block.block_id}\n"
            f"   {escape(reference.block.content)}",
            highlight=False,
        )


@cli.command()
@click.argument("path")
@click.argument("content")
@click.option("--parent", "parent_id", default=None, help="Append as last child of this block")
@click.option("--property", "property_items", multiple=True, help="Block property as key=value (repeatable)")
@click.pass_context
def append(ctx: click.Context, path: str, content: str, parent_id: Optional[str], property_items: tuple[str, ...]):
    """Append a block to a page and print its id."""
    properties = _parse_properties(property_items)
    block = _run(
        _graph_store(ctx).append_block(path, content, parent_id=parent_id, properties=properties or None)
    )
    click.echo(block.block_id)


@cli.command()
@click.argument("path")
@click.argument("block_id")
@click.argument("ref_block_id")
@click.pass_context
def link(ctx: click.Context, path: str, block_id: str, ref_block_id: str):
    """Append a ((REF_BLOCK_ID)) reference to block BLOCK_ID on page PATH."""
    block = _run(_graph_store(ctx).create_block_ref(path, block_id, ref_block_id))
    click.echo(block.content)


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
