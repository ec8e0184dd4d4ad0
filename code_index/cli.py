# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""code-index command line interface."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from code_index.codebase.code_index import CodeIndex
from code_index.errors import CodeIndexError
from code_index.models import Symbol

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _open_index(root: Path) -> CodeIndex:
    """Load the cached index, building it when no usable cache exists."""
    index = CodeIndex(root=root)
    if not index.load_from_cache(root):
        asyncio.run(index.build(root))
    return index


async def _semantic_search(
    index: CodeIndex, topic: str, limit: int, kinds: List[str]
) -> List[Symbol]:
    try:
        return await index.semantic_search(topic, max_results=limit, kinds=kinds)
    finally:
        await index.close()


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Index a source tree and query its symbols."""
    configure_logging(verbose)


@cli.command("build")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@click.option("--force", is_flag=True, help="Ignore the cache and rescan every file")
@click.option("--no-incremental", is_flag=True, help="Full scan even when a cache exists")
def build_command(root: Path, force: bool, no_incremental: bool) -> None:
    """Build or refresh the index for ROOT."""
    index = CodeIndex(root=root)
    asyncio.run(index.build(root, force_rebuild=force, incremental=not no_incremental))

    stats = index.index_data.stats
    console.print(
        f"[green]Indexed[/green] {stats.total_files} files: "
        f"{stats.total_symbols} symbols, {stats.total_references} references"
        + ("" if stats.using_structural else " [dim](regex extraction)[/dim]")
    )
    changes = index.builder.last_changes
    if changes:
        console.print(
            f"  {len(changes['updated'])} updated, {len(changes['added'])} added, "
            f"{len(changes['removed'])} removed, {changes['unchanged']} unchanged"
        )
    console.print(f"  cache: {index.get_cache_path(root)}")


@cli.command("search")
@click.argument("topic")
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@click.option("--kind", "kinds", multiple=True, help="Restrict to symbol kinds (repeatable)")
@click.option("--limit", default=20, show_default=True, help="Maximum results")
@click.option("--llm", "use_llm", is_flag=True, help="Re-rank with the local LLM if configured")
def search_command(topic: str, root: Path, kinds: tuple, limit: int, use_llm: bool) -> None:
    """Find symbols relevant to TOPIC."""
    index = _open_index(root)
    if use_llm:
        symbols = asyncio.run(_semantic_search(index, topic, limit, list(kinds)))
    else:
        symbols = index.find_relevant_symbols(topic, max_results=limit, kinds=list(kinds))

    if not symbols:
        console.print(f"[yellow]No symbols match[/yellow] {topic!r}")
        return

    table = Table(title=f"Symbols for {topic!r}")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Location")
    table.add_column("Exported", justify="center")
    for symbol in symbols:
        table.add_row(
            symbol.name,
            symbol.kind,
            f"{symbol.file}:{symbol.start_line}",
            "✓" if symbol.exported else "",
        )
    console.print(table)


@cli.command("overview")
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
def overview_command(root: Path) -> None:
    """Summarize the indexed codebase."""
    overview = _open_index(root).get_overview()

    console.print(
        f"[bold]{overview['total_files']}[/bold] files, "
        f"[bold]{overview['total_symbols']}[/bold] symbols "
        f"({overview['exported_symbols']} exported), "
        f"[bold]{overview['total_references']}[/bold] references"
    )
    table = Table(title="Symbols by kind")
    table.add_column("Kind")
    table.add_column("Count", justify="right")
    for kind, count in sorted(overview["by_kind"].items(), key=lambda item: -item[1]):
        table.add_row(kind, str(count))
    console.print(table)


@cli.command("graph")
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@click.option("--json", "as_json", is_flag=True, help="Print the graph as JSON")
def graph_command(root: Path, as_json: bool) -> None:
    """Show import edges between project files."""
    graph = _open_index(root).get_dependency_graph()
    if as_json:
        click.echo(json.dumps(graph, indent=2))
        return
    for edge in graph["edges"]:
        console.print(f"{edge['source']} [dim]->[/dim] {edge['target']} [dim]({edge['type']})[/dim]")
    console.print(f"[dim]{len(graph['nodes'])} files, {len(graph['edges'])} edges[/dim]")


@cli.command("clear")
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
def clear_command(root: Path) -> None:
    """Delete the cached index."""
    index = CodeIndex(root=root)
    cache_path = index.get_cache_path(root)
    if not cache_path.exists():
        console.print("[yellow]Nothing to clear[/yellow]")
        return
    index.clear_cache(root)
    console.print(f"[green]✓[/green] Removed {cache_path}")


def main() -> None:
    try:
        cli()
    except CodeIndexError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
