"""CLI for the role detection engine.

Commands:
- detect: Rank catalog roles for a parsed-CV JSON document
- profiles: List the role profiles the catalog serves
- show-config: Print the effective detection config
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Annotated, Protocol

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from . import __version__
from .application.candidate_input import load_candidate
from .application.serialisation import analysis_to_dict
from .application.service import DEFAULT_SEARCH_LIMIT, RoleDetectionService
from .config import DetectionConfig, EngineSettings
from .config_file import load_detection_config_file
from .domain.results import RoleProfileAnalysis
from .exceptions import RoleDetectionError
from .protocols import FileSystem


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, settings: EngineSettings) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    fs: FileSystem
    service: RoleDetectionService


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: DetectionConfig
    settings: EngineSettings
    config_file: Path | None
    deps_builder: DependenciesBuilder

    def build_dependencies(self) -> CliDependencies:
        """Return dependencies using the configured builder."""
        return self.deps_builder(settings=self.settings)

    def resolve_config(self, fs: FileSystem) -> DetectionConfig:
        """Apply the config file, when one is set, over the env-derived config."""
        if self.config_file is None:
            return self.config
        file_config = load_detection_config_file(path=self.config_file, fs=fs)
        return self.config.with_file_overrides(file_config)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the role-detect entry point.")


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


@contextmanager
def _open_dependencies(state: CliContext) -> Iterator[CliDependencies]:
    deps = state.build_dependencies()
    try:
        yield deps
    finally:
        deps.service.close()


def _version_callback(value: bool) -> None:
    if value:
        rprint(f"role-detection-engine {__version__}")
        raise typer.Exit()


def _fail(exc: RoleDetectionError) -> typer.Exit:
    rprint(f"[red]✗ {exc}[/red]")
    return typer.Exit(code=1)


def _print_summary(analysis: RoleProfileAnalysis) -> None:
    table = Table(title="Detected roles")
    table.add_column("#", justify="right")
    table.add_column("Role")
    table.add_column("Confidence", justify="right")
    table.add_column("Potential", justify="right")
    table.add_column("Note")
    for rank, match in enumerate(analysis.all_roles, start=1):
        table.add_row(
            str(rank),
            match.role_name,
            f"{match.confidence:.0%}",
            str(match.enhancement_potential),
            "low confidence" if match.low_confidence else "",
        )
    Console().print(table)

    gaps = analysis.gap_analysis
    if gaps.missing_skills:
        rprint(f"[yellow]Missing skills:[/yellow] {', '.join(gaps.missing_skills)}")
    for item in analysis.enhancement_suggestions.immediate:
        rprint(f"[bold]• {item.title}[/bold] ({item.target_section}): {item.description}")
    for note in analysis.detection_metadata.adjustments:
        rprint(f"[dim]{note}[/dim]")


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Role detection: rank role profiles against a parsed CV and explain the fit",
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        config_file: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="TOML detection config file (overrides ROLE_CONFIG_FILE)",
            ),
        ] = None,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                callback=_version_callback,
                is_eager=True,
                help="Show the package version and exit",
            ),
        ] = False,
    ) -> None:
        """Initialise CLI context."""
        _ = version
        settings = EngineSettings.from_env()
        if config_file is None and settings.config_file:
            config_file = Path(settings.config_file)
        ctx.obj = CliContext(
            config=DetectionConfig.from_env(),
            settings=settings,
            config_file=config_file,
            deps_builder=deps_builder,
        )

    @app.command()
    def detect(
        ctx: typer.Context,
        candidate_path: Annotated[
            Path,
            typer.Argument(help="Parsed-CV JSON document"),
        ],
        threshold: Annotated[
            float | None,
            typer.Option(
                "--threshold",
                "-t",
                help="Override the confidence threshold (default: 0.6)",
            ),
        ] = None,
        max_results: Annotated[
            int | None,
            typer.Option("--max-results", help="Override the maximum number of roles"),
        ] = None,
        min_results: Annotated[
            int | None,
            typer.Option("--min-results", help="Override the guaranteed minimum of roles"),
        ] = None,
        roles: Annotated[
            list[str] | None,
            typer.Option(
                "--role",
                "-r",
                help="Only consider this role profile id (repeat for several)",
            ),
        ] = None,
        as_of: Annotated[
            datetime | None,
            typer.Option(
                "--as-of",
                formats=["%Y-%m-%d"],
                help="Reference date for current positions and recency (default: today)",
            ),
        ] = None,
        output: Annotated[
            Path | None,
            typer.Option("--output", "-o", help="Write the analysis JSON to this path"),
        ] = None,
        as_json: Annotated[
            bool,
            typer.Option("--json", help="Print the analysis as JSON instead of a summary"),
        ] = False,
    ) -> None:
        """Detect the best-fitting roles for a candidate."""
        state = _get_context(ctx)
        with _open_dependencies(state) as deps:
            try:
                config = state.resolve_config(deps.fs).with_overrides(
                    confidence_threshold=threshold,
                    max_results=max_results,
                    min_results=min_results,
                )
                deps.service.configure(config)
                candidate = load_candidate(path=candidate_path, fs=deps.fs)
            except RoleDetectionError as exc:
                raise _fail(exc) from exc

            analysis = deps.service.detect_roles(
                candidate,
                as_of=as_of.date() if as_of is not None else None,
                target_roles=roles or None,
            )
            payload = analysis_to_dict(analysis)
            if output is not None:
                deps.fs.write_json(payload, output)
                rprint(f"[green]✓ Analysis written:[/green] {output}")
        if as_json:
            typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        else:
            _print_summary(analysis)

    @app.command()
    def profiles(
        ctx: typer.Context,
        category: Annotated[
            str | None,
            typer.Option("--category", help="Only list active profiles in this category"),
        ] = None,
        search: Annotated[
            str | None,
            typer.Option(
                "--search",
                "-s",
                help="Only list active profiles mentioning this text",
            ),
        ] = None,
        limit: Annotated[
            int,
            typer.Option("--limit", min=1, help="Maximum number of search results"),
        ] = DEFAULT_SEARCH_LIMIT,
    ) -> None:
        """List the role profiles in the catalog."""
        state = _get_context(ctx)
        with _open_dependencies(state) as deps:
            if category is not None:
                catalog = deps.service.profiles_by_category(category)
            else:
                catalog = deps.service.list_profiles()
            if search is not None:
                found = {profile.id for profile in deps.service.search_profiles(search, limit)}
                catalog = tuple(profile for profile in catalog if profile.id in found)
        if not catalog:
            rprint("[yellow]No role profiles available[/yellow]")
            raise typer.Exit(code=1)
        table = Table(title=f"Role catalog ({len(catalog)} profiles)")
        table.add_column("ID")
        table.add_column("Name")
        table.add_column("Category")
        table.add_column("Level")
        table.add_column("Required skills", justify="right")
        for profile in catalog:
            table.add_row(
                profile.id,
                profile.name,
                profile.category,
                str(profile.experience_level),
                str(len(profile.required_skills)),
            )
        Console().print(table)

    @app.command(name="show-config")
    def show_config(ctx: typer.Context) -> None:
        """Print the effective detection config as JSON."""
        state = _get_context(ctx)
        with _open_dependencies(state) as deps:
            try:
                config = state.resolve_config(deps.fs).validate()
            except RoleDetectionError as exc:
                raise _fail(exc) from exc
        typer.echo(json.dumps(asdict(config), indent=2))

    _ = (main, detect, profiles, show_config)

    return app
