"""Template text handling.

Defines:
- Placeholder substitution ({{ key }} with \\{{ key }} as escape)
- Filename aliases for files a package cannot ship under their real name
- Binary file detection
"""

import re
from pathlib import PurePosixPath
from typing import Any, Mapping

from .errors import InstantiationError


# Published packages drop or rewrite these files, so templates ship them
# under an alias and they are renamed on write.
FILE_NAME_ALIASES: dict[str, str] = {
    "_gitignore": ".gitignore",
    "_npmrc": ".npmrc",
    "_package.json": "package.json",
}

PLACEHOLDER_RE = re.compile(r"(\\?)\{\{\s*([A-Za-z_$][\w$.-]*)\s*\}\}")

BINARY_EXTENSIONS = frozenset(
    {
        # images
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".icns", ".webp",
        ".tif", ".tiff", ".psd", ".avif",
        # fonts
        ".woff", ".woff2", ".ttf", ".otf", ".eot",
        # archives
        ".zip", ".gz", ".tgz", ".bz2", ".xz", ".7z", ".rar", ".tar", ".jar",
        # media
        ".mp3", ".mp4", ".wav", ".ogg", ".webm", ".mov", ".avi", ".flac",
        # documents and binaries
        ".pdf", ".exe", ".dll", ".so", ".dylib", ".wasm", ".class", ".pyc",
        ".node", ".bin", ".db", ".sqlite",
    }
)

# Bytes inspected when sniffing content
SNIFF_SIZE = 8000


def render(text: str, variables: Mapping[str, Any]) -> str:
    """Substitute {{ key }} placeholders.

    Unknown keys are left as they are. An escaped placeholder is emitted
    without its backslash and is never substituted.

    Args:
        text: Template text
        variables: Substitution scope

    Returns:
        Rendered text
    """

    def _replace(match: re.Match) -> str:
        escaped, key = match.group(1), match.group(2)
        token = match.group(0)
        if escaped:
            return token[1:]
        if key not in variables:
            return token
        return _to_text(variables[key])

    return PLACEHOLDER_RE.sub(_replace, text)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (list, tuple)):
        return ",".join(_to_text(item) for item in value)
    return str(value)


def map_file_name(name: str) -> str:
    """Resolve a filename alias to the real name."""
    return FILE_NAME_ALIASES.get(name, name)


def target_path(relative_path: str, variables: Mapping[str, Any]) -> str:
    """Compute where a template entry is written.

    The base name goes through the alias table, then both the directory
    portion and the base name are rendered.

    Args:
        relative_path: POSIX path relative to the payload directory
        variables: Substitution scope

    Returns:
        POSIX path relative to the target directory

    Raises:
        InstantiationError: If the rendered path is absolute or climbs
            out of the target directory
    """
    path = PurePosixPath(relative_path)
    name = render(map_file_name(path.name), variables)
    parent = str(path.parent)
    rendered = name if parent == "." else f"{render(parent, variables)}/{name}"

    result = PurePosixPath(rendered)
    if result.is_absolute() or ".." in result.parts:
        raise InstantiationError(f"Template path {relative_path} renders outside the target: {rendered}")
    return rendered


def is_binary(path: str, content: bytes) -> bool:
    """Classify a file as binary from its name and content.

    Args:
        path: File path (only the suffix is used)
        content: Raw file content

    Returns:
        True when the file must be copied byte for byte
    """
    if PurePosixPath(path).suffix.lower() in BINARY_EXTENSIONS:
        return True

    sample = content[:SNIFF_SIZE]
    if b"\x00" in sample:
        return True

    try:
        content.decode("utf-8")
    except UnicodeDecodeError:
        return True
    return False
