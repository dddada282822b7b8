"""Typer CLI entry point for J-Artifact Resolver."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from j_artifact_resolver.config import (
    RemoteRepository,
    RepositoryConfig,
    parse_remote_repositories,
)
from j_artifact_resolver.exceptions import ResolverError
from j_artifact_resolver.models import Coordinate
from j_artifact_resolver.resolver import ArtifactResolver

app = typer.Typer(add_completion=False, help="Resolve Maven artifacts into a local repository.")
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_config(
    local_repository: Path | None,
    remotes: list[str] | None,
    offline: bool | None,
    resolve_descriptor: bool | None,
) -> RepositoryConfig:
    """Start from the environment and apply command line overrides."""
    config = RepositoryConfig.from_env()
    updates: dict[str, object] = {}
    if local_repository is not None:
        updates["local_repository"] = str(local_repository)
    if remotes:
        parsed = parse_remote_repositories(",".join(remotes))
        updates["remote_repositories"] = {
            name: config.remote_repositories.get(name, RemoteRepository(url=url)).model_copy(
                update={"url": url}
            )
            for name, url in parsed.items()
        }
    if offline is not None:
        updates["offline"] = offline
    if resolve_descriptor is not None:
        updates["resolve_descriptor"] = resolve_descriptor
    return config.model_copy(update=updates)


@app.command()
def resolve(
    coordinate: Annotated[
        str,
        typer.Argument(help="Coordinate: groupId:artifactId[:extension[:classifier]]:version"),
    ],
    local_repository: Annotated[
        Optional[Path],
        typer.Option("--local-repository", help="Local repository directory."),
    ] = None,
    remote: Annotated[
        Optional[list[str]],
        typer.Option("--remote", help="Remote repository as name=url (repeatable)."),
    ] = None,
    offline: Annotated[
        Optional[bool],
        typer.Option("--offline/--online", help="Disable or enable network access."),
    ] = None,
    resolve_descriptor: Annotated[
        Optional[bool],
        typer.Option("--resolve-descriptor/--no-resolve-descriptor", help="Also resolve the pom."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Resolve COORDINATE and print the path of the local file."""
    _configure_logging(verbose)
    try:
        config = _build_config(local_repository, remote, offline, resolve_descriptor)
        artifact = ArtifactResolver(config).resolve(Coordinate.from_string(coordinate))
    except (ResolverError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from None

    if verbose:
        table = Table(title=str(artifact.coordinate))
        table.add_column("Field", style="dim")
        table.add_column("Value")
        table.add_row("path", str(artifact.path))
        table.add_row("repository", artifact.repository)
        if artifact.descriptor_path is not None:
            table.add_row("descriptor", str(artifact.descriptor_path))
        console.print(table)
    else:
        console.print(str(artifact.path), markup=False, highlight=False, soft_wrap=True)


@app.command()
def repositories() -> None:
    """List the remote repositories configured in the environment."""
    try:
        config = RepositoryConfig.from_env()
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from None

    table = Table(title=f"Remote repositories (local: {config.local_repository})")
    table.add_column("#", style="dim", width=4)
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Auth", style="dim")
    for i, (name, repo) in enumerate(config.remote_repositories.items(), start=1):
        table.add_row(str(i), name, repo.url, "yes" if repo.credentials else "no")
    console.print(table)
    if config.offline:
        console.print("[dim]Offline mode is enabled.[/dim]")


def main() -> None:
    """Console-script entry point."""
    app()
