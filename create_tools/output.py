"""Rich console output utilities for the create-tools CLI."""

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree


console = Console()
error_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]✖[/red] {escape(message)}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]→[/blue] {message}")


def print_file_tree(paths: list[str]) -> None:
    """Print relative paths as a tree structure."""
    if not paths:
        print_info("No files generated.")
        return

    tree = Tree("[bold].[/bold]")
    nodes: dict[str, Any] = {}

    for path in sorted(paths):
        parts = path.split("/")
        current = tree

        for i, part in enumerate(parts[:-1]):
            path_so_far = "/".join(parts[: i + 1])
            if path_so_far not in nodes:
                nodes[path_so_far] = current.add(f"[blue]{part}/[/blue]")
            current = nodes[path_so_far]

        if path not in nodes:
            nodes[path] = current.add(f"[green]{parts[-1]}[/green]")

    console.print(tree)


def print_next_steps(root: str, target_dir: str, package_manager: str) -> None:
    """Print the usage hint shown after scaffolding."""
    console.print(f"\nScaffolding project in {root}...")
    console.print("\n[bold green]Done.[/bold green] Now run:\n")
    for line in usage_lines(target_dir, package_manager):
        console.print(f"  {line}")
    console.print()


def usage_lines(target_dir: str, package_manager: str) -> list[str]:
    """Commands a user runs to start the new project."""
    lines = []
    if target_dir != ".":
        lines.append(f"cd {_quote(target_dir)}")
    if package_manager == "yarn":
        lines += ["yarn", "yarn dev"]
    else:
        lines += [f"{package_manager} install", f"{package_manager} run dev"]
    return lines


def _quote(path: str) -> str:
    return f'"{path}"' if " " in path else path
