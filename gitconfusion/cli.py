"""CLI interface for GitConfusion."""

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import load_config
from .report import render_report, summary_rows
from .utils import ConfigError, GitHubAPIError, TransportError, setup_logging
from .walker import scan_organization

app = typer.Typer(help="GitConfusion - dependency confusion auditor for GitHub organizations")


def print_summary(result, console: Console) -> None:
    """Print a table of packages missing from their public registry."""
    rows = summary_rows(result)
    if not rows:
        console.print(f"[green]No unclaimed packages found in {result.org}[/green]")
        return

    table = Table(title=f"Unclaimed packages in {result.org}")
    table.add_column("Repository")
    table.add_column("Manifest")
    table.add_column("Package", style="bold red")
    table.add_column("Version")
    for repo, manifest, name, version in rows:
        table.add_row(repo, manifest, name, version or "")
    console.print(table)


@app.command()
def scan(
    org: Optional[str] = typer.Argument(None, help="GitHub organization to audit"),
    config_file: str = typer.Option(None, "--config", "-c", help="Path to config file"),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    leaks: Optional[bool] = typer.Option(None, "--leaks/--no-leaks", help="Search org code for leaked credentials"),
    branch: str = typer.Option(None, "--branch", help="Branch to read manifests from (default: repo default branch)"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Repositories scanned in parallel"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output")
):
    """Audit an organization's manifests for unclaimed package names."""

    try:
        config = load_config(config_file)
    except (ConfigError, FileNotFoundError) as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    # Override settings from CLI
    if leaks is not None:
        config.search.enable = leaks
    if branch:
        config.github.branch = branch
    if concurrency is not None:
        if concurrency < 1:
            typer.echo("Configuration error: --concurrency must be >=1", err=True)
            raise typer.Exit(code=2)
        config.scanner.max_concurrency = concurrency

    setup_logging(config, "DEBUG" if verbose else None)
    logger = logging.getLogger(__name__)

    if not org:
        org = typer.prompt("Enter the GitHub organization name")
    org = org.strip()

    if not config.has_token:
        logger.warning("No GitHub token set (GH_TOKEN); only public data is visible")
        if config.search.enable:
            logger.warning("Code search needs a token and will be skipped")
            config.search.enable = False

    logger.info(f"GitConfusion starting for organization: '{org}'")

    try:
        result = asyncio.run(scan_organization(org, config))
    except (GitHubAPIError, TransportError) as e:
        typer.echo(f"Error fetching repositories: {e}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
        return

    typer.echo(render_report(result))
    print_summary(result, Console())


@app.command()
def config(
    config_file: str = typer.Option(None, "--config", "-c", help="Path to config file")
):
    """Show current configuration."""
    try:
        settings = load_config(config_file)
    except (ConfigError, FileNotFoundError) as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    typer.echo("Current Configuration:")
    typer.echo(f"  Branch: {settings.github.branch or 'repository default'}")
    typer.echo(f"  Concurrency: {settings.scanner.max_concurrency}")
    typer.echo(f"  Timeout: {settings.scanner.timeout}s")
    typer.echo(f"  Probe retries: {settings.rate_limit.max_retries}")
    typer.echo(f"  Code search: {'on' if settings.search.enable else 'off'} ({', '.join(settings.search.terms)})")
    typer.echo()

    status = "✅ Set" if settings.has_token else "❌ Not set"
    typer.echo(f"  GH_TOKEN: {status}")


if __name__ == "__main__":
    app()
