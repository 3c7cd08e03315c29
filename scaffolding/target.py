"""Target directory resolution.

Normalizes the directory the project is written to, detects existing
content and applies the user's overwrite decision.
"""

import logging
import re
import shutil
from enum import Enum
from pathlib import Path

from schemas.template import TargetSpec

from .errors import OperationCancelled, TargetError


logger = logging.getLogger(__name__)

DEFAULT_TARGET_DIR = "new-project"

# Version-control directory that never counts as content and is never removed
VCS_MARKER = ".git"

_PACKAGE_NAME_RE = re.compile(r"^(?:@[a-z\d\-*~][a-z\d\-*._~]*/)?[a-z\d\-~][a-z\d\-._~]*$")


class OverwriteDecision(str, Enum):
    """How to proceed when the target directory is not empty."""

    REMOVE = "yes"
    CANCEL = "no"
    IGNORE = "ignore"

    @property
    def title(self) -> str:
        return {
            OverwriteDecision.REMOVE: "Remove existing files and continue",
            OverwriteDecision.CANCEL: "Cancel operation",
            OverwriteDecision.IGNORE: "Ignore files and continue",
        }[self]


def format_target_dir(target_dir: str | None) -> str | None:
    """Strip surrounding whitespace and trailing slashes."""
    if target_dir is None:
        return None
    formatted = re.sub(r"/+$", "", target_dir.strip())
    return formatted or None


def is_empty(path: Path) -> bool:
    """Check whether a directory has no entries besides the VCS marker."""
    entries = [entry.name for entry in Path(path).iterdir()]
    return len(entries) == 0 or entries == [VCS_MARKER]


def resolve_target(
    raw_input: str | None,
    default: str = DEFAULT_TARGET_DIR,
    cwd: Path | None = None,
) -> TargetSpec:
    """Describe the target directory for user input.

    Args:
        raw_input: Directory as typed or passed on the command line
        default: Project name used when no input was given
        cwd: Base directory for relative targets (default: current dir)

    Returns:
        TargetSpec describing the directory

    Raises:
        TargetError: If the path exists but is not a directory
    """
    normalized = format_target_dir(raw_input) or default
    path = (cwd or Path.cwd()) / normalized

    if (path.exists() or path.is_symlink()) and not path.is_dir():
        raise TargetError(f'Target "{normalized}" exists and is not a directory')

    exists = path.is_dir()
    return TargetSpec(
        raw_input=raw_input,
        normalized_path=normalized,
        exists=exists,
        is_empty=is_empty(path) if exists else True,
    )


def describe_target(target: TargetSpec | str) -> str:
    """Name the target directory for user-facing messages."""
    name = target.normalized_path if isinstance(target, TargetSpec) else target
    if name == ".":
        return "Current directory"
    return f'Target directory "{name}"'


def conflict_message(target: TargetSpec | str) -> str:
    """Question shown when the target directory already has content."""
    return f"{describe_target(target)} is not empty. Please choose how to proceed:"


def empty_dir(path: Path) -> None:
    """Remove everything inside a directory except the VCS marker."""
    path = Path(path)
    if not path.exists():
        return

    for entry in path.iterdir():
        if entry.name == VCS_MARKER:
            continue
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
        logger.debug("Removed %s", entry)


def prepare_target(
    root: Path,
    decision: OverwriteDecision | None = None,
) -> Path:
    """Apply the overwrite decision and make sure the directory exists.

    Args:
        root: Absolute project directory
        decision: Overwrite decision, None when there was no conflict

    Returns:
        The project directory

    Raises:
        OperationCancelled: If the user chose to cancel
        TargetError: If the directory cannot be emptied or created
    """
    if decision == OverwriteDecision.CANCEL:
        raise OperationCancelled()

    try:
        if decision == OverwriteDecision.REMOVE:
            empty_dir(root)
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TargetError(f"Cannot prepare target directory {root}: {e}") from e
    return root


def validate_project_name(name: str) -> bool:
    """Check that a name is usable as a package name."""
    return bool(_PACKAGE_NAME_RE.match(name))


def to_valid_project_name(name: str) -> str:
    """Convert a directory name into a valid package name."""
    slug = name.strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"^[._]", "", slug)
    slug = re.sub(r"[^a-z\d\-~]+", "-", slug)
    return slug
