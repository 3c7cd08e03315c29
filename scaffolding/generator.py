"""Project generator for instantiating downloaded templates."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from rich.console import Console

from .errors import InstantiationError
from .templates import is_binary, render, target_path


console = Console()
logger = logging.getLogger(__name__)

# Subdirectory of the template package holding the files to copy
PAYLOAD_DIR = "boilerplate"


class FileKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True)
class FileEntry:
    """One item of the template file tree."""

    relative_path: str
    kind: FileKind


def walk_template(root: Path) -> list[FileEntry]:
    """List every entry below root, dotfiles included.

    Symbolic links are reported as leaves and never followed. Entries are
    sorted per directory and listed top-down, so a directory always comes
    before its children.

    Args:
        root: Directory to walk

    Returns:
        Entries with POSIX paths relative to root
    """
    entries: list[FileEntry] = []

    def _walk(directory: Path, prefix: str) -> None:
        with os.scandir(directory) as it:
            children = sorted(it, key=lambda e: e.name)
        for child in children:
            relative = f"{prefix}{child.name}"
            if child.is_symlink():
                entries.append(FileEntry(relative, FileKind.SYMLINK))
            elif child.is_dir(follow_symlinks=False):
                entries.append(FileEntry(relative, FileKind.DIRECTORY))
                _walk(Path(child.path), f"{relative}/")
            elif child.is_file(follow_symlinks=False):
                entries.append(FileEntry(relative, FileKind.FILE))
            else:
                entries.append(FileEntry(relative, FileKind.OTHER))

    _walk(Path(root), "")
    return entries


class TemplateGenerator:
    """Generates a project from an extracted template.

    Copies:
    - Directories (created idempotently)
    - Text files (placeholders substituted)
    - Binary files (byte for byte)
    - Symbolic links (same, unsubstituted link target)
    """

    def __init__(
        self,
        template_dir: Path,
        target_dir: Path,
        variables: Mapping[str, Any] | None = None,
        payload_dir: str = PAYLOAD_DIR,
        quiet: bool = False,
    ):
        """Initialize project generator.

        Args:
            template_dir: Extracted template package root
            target_dir: Directory the project is written to
            variables: Substitution scope (answers to template questions)
            payload_dir: Subdirectory of template_dir that gets copied
            quiet: Suppress per-file console output
        """
        self.template_dir = Path(template_dir)
        self.source_dir = self.template_dir / payload_dir
        self.target_dir = Path(target_dir)
        self.variables = dict(variables or {})
        self.quiet = quiet

    def generate(self) -> list[str]:
        """Copy the payload into the target directory.

        Returns:
            Relative paths of the processed template entries

        Raises:
            InstantiationError: If an entry cannot be written or renders
                to a path outside the target directory
        """
        if not self.source_dir.is_dir():
            logger.warning("Template has no %s directory: %s", self.source_dir.name, self.template_dir)
            return []

        try:
            self.target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstantiationError(f"Cannot create {self.target_dir}: {e}") from e

        processed: list[str] = []
        for entry in walk_template(self.source_dir):
            if self._process(entry):
                processed.append(entry.relative_path)
        return processed

    def _process(self, entry: FileEntry) -> bool:
        source = self.source_dir / entry.relative_path
        relative_dest = target_path(entry.relative_path, self.variables)
        dest = self.target_dir / relative_dest

        if entry.kind == FileKind.OTHER:
            logger.warning("Skipping unsupported file type: %s", entry.relative_path)
            console.print(f"[yellow]Warning:[/yellow] Skipped {entry.relative_path} (unsupported file type)")
            return False

        try:
            if entry.kind == FileKind.SYMLINK:
                self._copy_symlink(source, dest)
            elif entry.kind == FileKind.DIRECTORY:
                dest.mkdir(parents=True, exist_ok=True)
            else:
                self._write_file(source, dest, relative_dest)
        except OSError as e:
            raise InstantiationError(f"Cannot write {relative_dest}: {e}") from e

        if not self.quiet:
            suffix = "/" if entry.kind == FileKind.DIRECTORY else ""
            console.print(f"[green]Created:[/green] {relative_dest}{suffix}")
        return True

    def _copy_symlink(self, source: Path, dest: Path) -> None:
        """Recreate a link pointing at the original target."""
        link_target = os.readlink(source)
        dest.parent.mkdir(parents=True, exist_ok=True)
        if dest.is_symlink() or dest.is_file():
            dest.unlink()
        os.symlink(link_target, dest)

    def _write_file(self, source: Path, dest: Path, relative_dest: str) -> None:
        """Write a file, rendering placeholders when it is text."""
        content = source.read_bytes()
        dest.parent.mkdir(parents=True, exist_ok=True)
        if dest.is_symlink():
            dest.unlink()

        if is_binary(relative_dest, content):
            dest.write_bytes(content)
            return

        rendered = render(content.decode("utf-8"), self.variables)
        dest.write_bytes(rendered.encode("utf-8"))
