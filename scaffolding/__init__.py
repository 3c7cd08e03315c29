"""Project scaffolding from registry templates.

Creates new projects from published template packages:
- Target directory resolution and overwrite handling
- Template search, download and extraction
- Template questions (variables)
- File tree instantiation with placeholder substitution
"""

from .errors import (
    DownloadError,
    InstantiationError,
    NoTemplatesFound,
    OperationCancelled,
    PackageDetailError,
    RegistryError,
    ScaffoldError,
    SearchError,
    TargetError,
)
from .generator import FileEntry, FileKind, TemplateGenerator, walk_template
from .prompter import Prompter
from .questions import (
    ManifestLoad,
    ManifestStatus,
    ask_for_variables,
    load_questions,
    resolve_questions,
)
from .registry import (
    DEFAULT_REGISTRY_URL,
    RegistryClient,
    ScratchDirectory,
    parse_template_spec,
)
from .target import (
    DEFAULT_TARGET_DIR,
    OverwriteDecision,
    conflict_message,
    describe_target,
    empty_dir,
    format_target_dir,
    is_empty,
    prepare_target,
    resolve_target,
)
from .templates import FILE_NAME_ALIASES, is_binary, render, target_path

__all__ = [
    # Errors
    "ScaffoldError",
    "OperationCancelled",
    "RegistryError",
    "PackageDetailError",
    "DownloadError",
    "SearchError",
    "NoTemplatesFound",
    "TargetError",
    "InstantiationError",
    # Target
    "DEFAULT_TARGET_DIR",
    "OverwriteDecision",
    "format_target_dir",
    "is_empty",
    "resolve_target",
    "describe_target",
    "conflict_message",
    "empty_dir",
    "prepare_target",
    # Registry
    "DEFAULT_REGISTRY_URL",
    "RegistryClient",
    "ScratchDirectory",
    "parse_template_spec",
    # Questions
    "Prompter",
    "ManifestLoad",
    "ManifestStatus",
    "load_questions",
    "resolve_questions",
    "ask_for_variables",
    # Generator
    "FILE_NAME_ALIASES",
    "FileEntry",
    "FileKind",
    "TemplateGenerator",
    "walk_template",
    "render",
    "target_path",
    "is_binary",
]
