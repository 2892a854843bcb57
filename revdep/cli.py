"""Click CLI with resolve, entry-points, files, node-modules, circular and serve subcommands."""

from __future__ import annotations

import functools
import logging
import shutil
from pathlib import Path

import click

from revdep import __version__
from revdep.errors import RevDepError
from revdep.models import DependencyTable, ResolveConfig, ResolveResult
from revdep.pipeline import (
    get_circular,
    get_entry_points,
    get_files_for_entry_point,
    get_max_depths,
    get_node_modules_for_entry_point,
    resolve,
)


def _common_options(func):
    """Options shared by every analysis command."""
    options = [
        click.option("--cwd", type=click.Path(exists=True, file_okay=False, path_type=Path),
                     default=".", help="Directory used as the resolution root"),
        click.option("--alias-config", "-ac", type=click.Path(path_type=Path),
                     help="tsconfig.json or JSON alias map for aliased imports"),
        click.option("--deps-file", type=click.Path(path_type=Path),
                     help="Use a pre-extracted dependency table (JSON) instead of parsing sources"),
        click.option("--ignore-type-imports", "-t", is_flag=True,
                     help="Skip type-only imports"),
        click.option("--verbose", "-v", is_flag=True, help="Log what is being done"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RevDepError as e:
            raise click.ClickException(str(e))
    return wrapper


def _relative(module_id: str, cwd: Path) -> str:
    path = Path(module_id)
    if not path.is_absolute():
        return module_id
    try:
        return path.relative_to(cwd).as_posix()
    except ValueError:
        return module_id


def format_results(result: ResolveResult, target: str, cwd: Path, compact_summary: bool = False) -> str:
    """Render resolution paths; one module per line, indented by depth."""
    entry_points = [_relative(e, cwd) for e in result.entry_points]

    if not result.has_results:
        return f"No results found for {target} in {', '.join(entry_points) or 'any entry point'}\n"

    lines = ["Results:", ""]
    if compact_summary:
        width = max(len(e) for e in entry_points)
        for entry_point, paths in zip(entry_points, result.paths):
            lines.append(f"{entry_point.ljust(width)} : {len(paths)}")
        lines.append("")
        lines.append(f"Total: {result.total}")
        return "\n".join(lines) + "\n"

    separator = "_" * shutil.get_terminal_size().columns
    for index, paths in enumerate(result.paths):
        for path in paths:
            for depth, module_id in enumerate(path):
                lines.append(f"{' ' * depth} ➞ {_relative(module_id, cwd)}")
            lines.append("")
        if paths and index < len(result.paths) - 1:
            lines.append(separator)
    return "\n".join(lines) + "\n"


def format_cycles(cycles: list[list[str]], deps: DependencyTable, cwd: Path) -> str:
    """Render each cycle as an indented chain annotated with the import request."""
    if not cycles:
        return "No circular dependencies found\n"

    lines = [f"Found {len(cycles)} circular dependencies:", ""]
    for number, cycle in enumerate(cycles, 1):
        lines.append(f"Circular dependency {number}:")
        for depth, module_id in enumerate(cycle):
            line = f"{' ' * depth} ➞ {_relative(module_id, cwd)}"
            if depth == 0:
                line += " (cycle start)"
            else:
                request = next(
                    (e.request for e in deps.get(cycle[depth - 1]) or [] if e.target_id == module_id),
                    None,
                )
                if request is not None:
                    line += f" ('{request}')"
            lines.append(line)
        lines.append("")
    return "\n".join(lines) + "\n"


@click.group()
@click.version_option(version=__version__)
def cli():
    """revdep: find out why a module is part of your dependency graph."""


@cli.command("resolve")
@click.argument("target")
@click.argument("entry_points", nargs=-1)
@_common_options
@click.option("--include", "-i", multiple=True, help="Only discover entry points matching this glob")
@click.option("--exclude", "-e", multiple=True, help="Skip discovered entry points matching this glob")
@click.option("--all", "-a", "all_paths", is_flag=True, help="Find all paths instead of the first one")
@click.option("--not-traverse", "-n", multiple=True, help="Leave files matching this glob out of the graph")
@click.option("--include-node-modules", "-inm", is_flag=True,
              help="Treat external packages as terminal modules, so a package name can be the target")
@click.option("--max-paths", type=click.IntRange(min=1), help="Stop after this many paths per entry point")
@click.option("--compact-summary", "-cs", is_flag=True, help="Print only the path count per entry point")
@click.option("--print-max-depth", is_flag=True, help="Print the deepest import chain per entry point")
@_handle_errors
def resolve_cmd(
    target: str,
    entry_points: tuple[str, ...],
    cwd: Path,
    alias_config: Path | None,
    deps_file: Path | None,
    ignore_type_imports: bool,
    verbose: bool,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    all_paths: bool,
    not_traverse: tuple[str, ...],
    include_node_modules: bool,
    max_paths: int | None,
    compact_summary: bool,
    print_max_depth: bool,
):
    """Show the import chains from entry points to TARGET (a file or, with -inm, a package)."""
    _configure_logging(verbose)
    config = ResolveConfig(
        cwd=cwd,
        alias_config=alias_config,
        deps_file=deps_file,
        include=list(include),
        exclude=list(exclude),
        all_paths=all_paths,
        not_traverse=list(not_traverse),
        include_node_modules=include_node_modules,
        ignore_type_imports=ignore_type_imports,
        max_paths=max_paths,
    )

    result = resolve(target, config, entry_points=list(entry_points))

    if print_max_depth:
        for entry_point, (depth, chain) in zip(result.entry_points, get_max_depths(result, config)):
            click.echo(f"Max depth for {_relative(entry_point, config.cwd)}: {depth}")
            click.echo("  " + " ➞ ".join(_relative(m, config.cwd) for m in chain))
        click.echo()

    click.echo(format_results(result, target, config.cwd, compact_summary), nl=False)


@cli.command("entry-points")
@_common_options
@click.option("--include", "-i", multiple=True, help="Only keep entry points matching this glob")
@click.option("--exclude", "-e", multiple=True, help="Skip entry points matching this glob")
@click.option("--count", "-c", is_flag=True, help="Print only the number of entry points")
@click.option("--print-deps-count", "-pdc", is_flag=True, help="Print the number of files each entry point requires")
@_handle_errors
def entry_points_cmd(
    cwd: Path,
    alias_config: Path | None,
    deps_file: Path | None,
    ignore_type_imports: bool,
    verbose: bool,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    count: bool,
    print_deps_count: bool,
):
    """List modules that nothing else imports."""
    _configure_logging(verbose)
    config = ResolveConfig(
        cwd=cwd,
        alias_config=alias_config,
        deps_file=deps_file,
        include=list(include),
        exclude=list(exclude),
        ignore_type_imports=ignore_type_imports,
    )

    entry_points, _ = get_entry_points(config)

    if not entry_points:
        click.echo("No results found")
        return
    if count:
        click.echo(len(entry_points))
        return

    for entry_point in entry_points:
        line = _relative(entry_point, config.cwd)
        if print_deps_count:
            files = get_files_for_entry_point(entry_point, config)
            line = f"{line} {click.style(str(len(files)), dim=True)}"
        click.echo(line)


@cli.command("files")
@click.argument("entry_point")
@_common_options
@click.option("--count", "-c", is_flag=True, help="Print only the number of files")
@_handle_errors
def files_cmd(
    entry_point: str,
    cwd: Path,
    alias_config: Path | None,
    deps_file: Path | None,
    ignore_type_imports: bool,
    verbose: bool,
    count: bool,
):
    """List every file ENTRY_POINT requires, itself included."""
    _configure_logging(verbose)
    config = ResolveConfig(
        cwd=cwd,
        alias_config=alias_config,
        deps_file=deps_file,
        ignore_type_imports=ignore_type_imports,
    )

    files = get_files_for_entry_point(entry_point, config)

    if not files:
        click.echo("No results found")
        return
    if count:
        click.echo(len(files))
        return
    for file_path in files:
        click.echo(_relative(file_path, config.cwd))


@cli.command("node-modules")
@click.argument("entry_point")
@_common_options
@click.option("--count", "-c", is_flag=True, help="Print only the number of packages")
@_handle_errors
def node_modules_cmd(
    entry_point: str,
    cwd: Path,
    alias_config: Path | None,
    deps_file: Path | None,
    ignore_type_imports: bool,
    verbose: bool,
    count: bool,
):
    """List external package imports ENTRY_POINT requires."""
    _configure_logging(verbose)
    config = ResolveConfig(
        cwd=cwd,
        alias_config=alias_config,
        deps_file=deps_file,
        ignore_type_imports=ignore_type_imports,
    )

    requests = get_node_modules_for_entry_point(entry_point, config)

    if not requests:
        click.echo("No results found")
        return
    if count:
        click.echo(len(requests))
        return
    for request in requests:
        click.echo(request)


@cli.command("circular")
@_common_options
@click.option("--count", "-c", is_flag=True, help="Print only the number of cycles")
@_handle_errors
def circular_cmd(
    cwd: Path,
    alias_config: Path | None,
    deps_file: Path | None,
    ignore_type_imports: bool,
    verbose: bool,
    count: bool,
):
    """List circular imports in the project."""
    _configure_logging(verbose)
    config = ResolveConfig(
        cwd=cwd,
        alias_config=alias_config,
        deps_file=deps_file,
        ignore_type_imports=ignore_type_imports,
    )

    cycles, deps = get_circular(config)

    if count:
        click.echo(len(cycles))
        return
    click.echo(format_cycles(cycles, deps, config.cwd), nl=False)


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(port: int, host: str):
    """Start the JSON API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the API server. "
            "Install with: pip install 'revdep[web]'"
        )

    from revdep.web import create_app

    click.echo(f"Starting revdep API at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
