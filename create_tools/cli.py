"""CLI entrypoint for create-tools.

Scaffolds a new project from a template published in the package
registry.
"""

import logging
from typing import Optional

import typer

from create_tools import __version__
from create_tools.config import get_config
from create_tools.output import print_error
from orchestrator.runner import ScaffoldRunner
from scaffolding.errors import OperationCancelled, ScaffoldError

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="create-tools",
    help="Scaffold a new project from a registry template.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"create-tools v{__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def create(
    target_dir: Optional[str] = typer.Argument(
        None,
        help="Directory to create the project in (asked for when omitted)",
        show_default=False,
    ),
    template: Optional[str] = typer.Option(
        None,
        "--template",
        "-t",
        help="Template package, name[@version] (skips the template search)",
    ),
    registry: Optional[str] = typer.Option(
        None,
        "--registry",
        help="Registry URL (default: npm registry or $npm_config_registry)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Create a new project from a template.

    Examples:
        create-tools
        create-tools my-app
        create-tools . --template @any-tools/react-starter
        create-tools my-app -t @any-tools/vue-starter@1.2.0
    """
    config = get_config()
    if registry:
        config.registry.url = registry

    configure_logging("DEBUG" if verbose else config.logging.level)

    runner = ScaffoldRunner(config=config)
    try:
        runner.run(target_dir=target_dir, template=template)
    except OperationCancelled as e:
        print_error(str(e))
        raise typer.Exit(1)
    except ScaffoldError as e:
        logger.debug("Scaffolding failed", exc_info=True)
        print_error(str(e))
        raise typer.Exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
