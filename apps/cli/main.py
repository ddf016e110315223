"""CLI application for depup."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from depup.config import VERSION
from depup.errors import DepupError, DirectoryNotFound
from depup.logging import configure_logging
from depup.models import Language
from depup.orchestrator import Orchestrator, build_filter
from depup.output import format_diff, format_json, format_text
from depup.package_manager import run_installs
from depup.pnpm_settings import parse_age

# Diagnostics go to stderr so stdout carries only the report.
console = Console(stderr=True)


def echo_err(message: str = "", style: str | None = None) -> None:
    console.print(message, style=style, markup=False, highlight=False)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"depup {VERSION}")
        raise typer.Exit()


def selected_languages(**flags: bool) -> list[Language]:
    """Map ``--node``/``--python``/... switches to languages."""
    return [Language(name) for name, enabled in flags.items() if enabled]


def install_updates(languages: list[Language], target: Path, verbose: bool) -> bool:
    """Run package managers for updated ecosystems; False if any failed."""
    if verbose:
        echo_err()
        echo_err("Running package manager install...")

    ok = True
    for result in run_installs(languages, target):
        if result.success:
            if verbose:
                echo_err(f"  {result.language.display_name} install completed: {result.command}")
            continue
        ok = False
        echo_err(f"  {result.language.display_name} install failed: {result.command}", style="red")
        if result.stderr:
            echo_err(f"    {result.stderr.strip()}")
    return ok


app = typer.Typer(
    name="depup",
    help="depup - Update dependencies across Node.js, Python, Rust, Go, Ruby, PHP and Java projects",
    add_completion=False,
)


@app.command()
def update(
    path: str = typer.Argument(".", help="Project directory to update"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show what would change without writing"),
    verbose: bool = typer.Option(False, "--verbose", help="Show skipped packages and diagnostics"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print the summary"),
    node: bool = typer.Option(False, "--node", help="Update Node.js (package.json)"),
    python: bool = typer.Option(False, "--python", help="Update Python (pyproject.toml)"),
    rust: bool = typer.Option(False, "--rust", help="Update Rust (Cargo.toml)"),
    go: bool = typer.Option(False, "--go", help="Update Go (go.mod)"),
    ruby: bool = typer.Option(False, "--ruby", help="Update Ruby (Gemfile)"),
    php: bool = typer.Option(False, "--php", help="Update PHP (composer.json)"),
    java: bool = typer.Option(False, "--java", help="Update Java (build.gradle)"),
    exclude: list[str] | None = typer.Option(None, "--exclude", help="Package to leave alone (repeatable)"),
    only: list[str] | None = typer.Option(None, "--only", help="Only update this package (repeatable)"),
    include_pinned: bool = typer.Option(False, "--include-pinned", help="Also update pinned versions"),
    age: str | None = typer.Option(None, "--age", help="Minimum release age, e.g. 7d, 2w, 1m"),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    diff: bool = typer.Option(False, "--diff", help="Print the result as a diff"),
    install: bool = typer.Option(False, "--install", help="Run the package manager after updating"),
    version: bool = typer.Option(
        False, "--version", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """depup - Update dependency manifests to their latest versions."""
    configure_logging(verbose=verbose, quiet=quiet)
    target = Path(path)

    try:
        if not target.is_dir():
            raise DirectoryNotFound(path)
        update_filter = build_filter(
            target,
            languages=selected_languages(
                node=node, python=python, rust=rust, go=go, ruby=ruby, php=php, java=java
            ),
            exclude=exclude or [],
            only=only or [],
            include_pinned=include_pinned,
            min_age=parse_age(age) if age else None,
        )
    except DepupError as e:
        echo_err(f"Error: {e}", style="red")
        raise typer.Exit(1)

    if verbose:
        echo_err(f"depup v{VERSION}")
        echo_err(f"Target: {target}")
        if dry_run:
            echo_err("Mode: dry-run")

    orchestrator = Orchestrator(
        target,
        update_filter,
        dry_run=dry_run,
        show_progress=not quiet and not json_output,
    )
    try:
        result = asyncio.run(orchestrator.run())
    except DepupError as e:
        echo_err(f"Error: {e}", style="red")
        raise typer.Exit(1)

    if json_output:
        typer.echo(format_json(result.summary, result.errors, verbose=verbose))
    elif diff:
        typer.echo(format_diff(result.summary))
    else:
        typer.echo(format_text(result.summary, result.errors, verbose=verbose, quiet=quiet))

    if verbose and result.errors:
        echo_err()
        echo_err("Errors encountered:")
        for error in result.errors:
            echo_err(f"  - {error}")

    updated = result.summary.updated_languages()
    if install and not dry_run and updated:
        if not install_updates(updated, target, verbose):
            raise typer.Exit(1)

    if result.errors:
        raise typer.Exit(2)


if __name__ == "__main__":
    app()
