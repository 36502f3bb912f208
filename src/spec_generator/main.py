"""
Specification Generator - Main Entry Point

Command-line interface for generating epics and user stories for a project
from its title and description.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .config.settings import get_settings
from .core.exceptions import SpecGeneratorError
from .core.generator import GenerationService
from .models.project import Epic, ProjectContent
from .storage.json_store import JsonFileProjectStore
from .utils.diagnostics import DiagnosticsSink, FileDiagnosticsSink
from .utils.logger import get_logger, setup_logging

console = Console()
logger = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="spec-generator",
        description="Generate epics and user stories for a project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Epics and stories for a project
  spec-generator project --title "Portail RH" --description "Portail self-service pour les employés"

  # Description from a file, epics only, JSON written to a file
  spec-generator project --title "Portail RH" --description-file brief.txt --epics-only -o epics.json

  # Stories for a single epic
  spec-generator stories --project-title "Portail RH" --epic-title "Gestion des congés" \\
      --epic-objective "Permettre aux employés de poser leurs congés en ligne"
        """
    )

    # Options shared by every command
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase verbosity (use -vv for debug)"
    )
    common.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress all output except results"
    )
    common.add_argument(
        "--dump-responses",
        type=Path,
        metavar="DIR",
        help="Write every raw service response to DIR"
    )
    common.add_argument(
        "--output", "-o",
        type=Path,
        help="Output JSON file path (default: stdout)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # project
    project = subparsers.add_parser("project", parents=[common], help="Generate epics and their stories")
    project.add_argument("--title", "-t", required=True, help="Project title")
    description_group = project.add_mutually_exclusive_group(required=True)
    description_group.add_argument("--description", "-d", help="Project description")
    description_group.add_argument(
        "--description-file",
        type=Path,
        help="Path to a text file holding the project description"
    )
    project.add_argument(
        "--epics-only",
        action="store_true",
        help="Skip story generation"
    )
    project.add_argument(
        "--project-id",
        help="Save the generated epics under this project id"
    )
    project.add_argument(
        "--store-dir",
        type=Path,
        default=Path("projects"),
        help="Directory of the project store (default: ./projects)"
    )

    # stories
    stories = subparsers.add_parser("stories", parents=[common], help="Generate the stories of one epic")
    stories.add_argument("--project-title", required=True, help="Project title")
    stories.add_argument("--epic-title", required=True, help="Epic title")
    stories.add_argument("--epic-objective", default="", help="Epic objective")

    return parser.parse_args(argv)


def read_description(args: argparse.Namespace) -> str:
    """Project description from the command line or a file."""
    if args.description_file:
        try:
            return args.description_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise SpecGeneratorError(
                f"Cannot read description file {args.description_file}: {e}",
                code="INVALID_INPUT",
            ) from e
    return args.description.strip()


def render_summary(epics: list[Epic]) -> Table:
    """Summary table: one row per epic."""
    table = Table(title="Generated content")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Epic", style="bold")
    table.add_column("Objective")
    table.add_column("Stories", justify="right")
    table.add_column("Criteria", justify="right")

    for i, epic in enumerate(epics, 1):
        criteria = sum(len(story.acceptance_criteria) for story in epic.stories)
        table.add_row(str(i), epic.title, epic.objective or "-", str(len(epic.stories)), str(criteria))
    return table


def write_output(content: str, output_path: Optional[Path]) -> None:
    """Write JSON output to a file or stdout."""
    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        console.print(f"[green]✓[/green] Output written to {output_path}")
    else:
        print(content)


async def run_project(args: argparse.Namespace, service: GenerationService) -> int:
    """Generate a whole project."""
    description = read_description(args)

    if not args.quiet:
        console.print(Panel(
            f"[bold]Project:[/bold] {args.title}\n"
            f"[bold]Description:[/bold] {description[:200]}{'...' if len(description) > 200 else ''}\n"
            f"[bold]Stories:[/bold] {'no' if args.epics_only else 'yes'}",
            title="Generation Request",
            border_style="blue"
        ))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=args.quiet
    ) as progress:
        task = progress.add_task("Generating epics...", total=None)
        epics = await service.generate_epics(args.title, description)
        progress.update(task, description=f"[green]✓[/green] {len(epics)} epics generated")

        if epics and not args.epics_only:
            progress.update(task, description=f"Generating stories for {len(epics)} epics...")
            story_lists = await service.generate_stories_for_epics(epics, args.title)
            for epic, stories in zip(epics, story_lists):
                epic.stories = stories
            progress.update(task, description="[green]✓[/green] Generation complete")

    if args.project_id:
        store = JsonFileProjectStore(args.store_dir)
        epics = await store.save_project_epics(args.project_id, epics)
        if not args.quiet:
            console.print(f"[green]✓[/green] Saved under project {args.project_id} in {args.store_dir}")

    content = ProjectContent(epics=epics)
    write_output(content.model_dump_json(by_alias=True, indent=2), args.output)

    if not args.quiet:
        console.print(render_summary(content.epics))
        if not content.epics:
            console.print("[yellow]No epics were recognized in the response[/yellow]")

    return 0


async def run_stories(args: argparse.Namespace, service: GenerationService) -> int:
    """Generate the stories of a single epic."""
    epic = Epic(title=args.epic_title, objective=args.epic_objective)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        disable=args.quiet
    ) as progress:
        task = progress.add_task(f"Generating stories for '{epic.title}'...", total=None)
        epic.stories = await service.generate_stories(epic, args.project_title)
        progress.update(task, description=f"[green]✓[/green] {len(epic.stories)} stories generated")

    payload = [story.model_dump(mode="json", by_alias=True) for story in epic.stories]
    write_output(json.dumps(payload, ensure_ascii=False, indent=2), args.output)

    if not args.quiet:
        console.print(render_summary([epic]))

    return 0


async def run(args: argparse.Namespace) -> int:
    """Run the selected command."""
    settings = get_settings()
    diagnostics: Optional[DiagnosticsSink] = None
    if args.dump_responses:
        diagnostics = FileDiagnosticsSink(args.dump_responses)

    try:
        service = GenerationService.from_settings(settings, diagnostics=diagnostics)
    except SpecGeneratorError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        return 1

    try:
        if args.command == "project":
            return await run_project(args, service)
        return await run_stories(args, service)

    except SpecGeneratorError as e:
        logger.debug(f"Error details: {e.to_dict()}")
        console.print(f"[red]Error:[/red] {e.message or 'generation failed'}")
        return 1

    except Exception as e:
        logger.exception("Generation failed")
        console.print(f"[red]Error:[/red] generation failed: {e}")
        return 1

    finally:
        await service.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Setup logging based on verbosity
    if args.verbose >= 2:
        setup_logging("DEBUG")
    elif args.verbose >= 1:
        setup_logging("INFO")
    elif args.quiet:
        setup_logging("ERROR")
    else:
        setup_logging(get_settings().log_level)

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
