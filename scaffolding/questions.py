"""Template question manifests.

A template may ship an ``index.py`` exposing ``questions`` (a mapping of
variable key to question, or a function returning one), or a declarative
``questions.yaml``. Answers to these questions become the substitution
scope of the instantiated files.
"""

import importlib.util
import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError
from rich.console import Console

from schemas.template import Question, QuestionType

from .prompter import Prompter
from .target import to_valid_project_name, validate_project_name


logger = logging.getLogger(__name__)
console = Console()

MODULE_ENTRY_POINT = "index.py"
YAML_ENTRY_POINT = "questions.yaml"
QUESTIONS_ATTR = "questions"

# Variable that holds the project's human-readable name
PROJECT_NAME_KEY = "name"


class ManifestLoadError(Exception):
    """Error loading a question manifest."""

    pass


class ManifestStatus(str, Enum):
    ABSENT = "absent"
    MALFORMED = "malformed"
    LOADED = "loaded"


@dataclass
class ManifestLoad:
    """Outcome of loading a template's question manifest."""

    status: ManifestStatus
    questions: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    source: Path | None = None

    @classmethod
    def absent(cls) -> "ManifestLoad":
        return cls(ManifestStatus.ABSENT)


def load_questions(template_dir: Path) -> ManifestLoad:
    """Load the question manifest of an extracted template.

    A missing manifest is not an error. A manifest that fails to load is
    reported as a warning and treated as empty.

    Args:
        template_dir: Extracted template package root

    Returns:
        ManifestLoad with the raw question mapping
    """
    template_dir = Path(template_dir)
    module_file = template_dir / MODULE_ENTRY_POINT
    yaml_file = template_dir / YAML_ENTRY_POINT

    if module_file.exists():
        source, loader = module_file, _load_module_questions
    elif yaml_file.exists():
        source, loader = yaml_file, _load_yaml_questions
    else:
        logger.debug("No question manifest in %s", template_dir)
        return ManifestLoad.absent()

    try:
        raw = loader(source)
        if raw is None:
            return ManifestLoad.absent()
        if callable(raw):
            raw = raw()
        if not isinstance(raw, Mapping):
            raise ManifestLoadError(f"expected a mapping of questions, got {type(raw).__name__}")
    except (Exception, SystemExit) as e:
        logger.warning("Failed to load question manifest %s: %r", source, e)
        console.print(
            f"[yellow]Load boilerplate config got trouble, skip and use defaults: {e}[/yellow]"
        )
        return ManifestLoad(ManifestStatus.MALFORMED, error=str(e) or repr(e), source=source)

    return ManifestLoad(ManifestStatus.LOADED, questions=dict(raw), source=source)


def _load_module_questions(module_file: Path) -> Any:
    """Import index.py from the template and return its questions."""
    # Unique module name so repeated runs never reuse a cached module
    unique_module_name = f"_template_manifest_{abs(hash(module_file.resolve()))}"

    spec = importlib.util.spec_from_file_location(unique_module_name, module_file)
    if spec is None or spec.loader is None:
        raise ManifestLoadError(f"Cannot load module spec: {module_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[unique_module_name] = module
    try:
        spec.loader.exec_module(module)
    finally:
        sys.modules.pop(unique_module_name, None)

    return getattr(module, QUESTIONS_ATTR, None)


def _load_yaml_questions(yaml_file: Path) -> Any:
    """Read a declarative questions.yaml."""
    with open(yaml_file) as f:
        data = yaml.safe_load(f)
    if isinstance(data, Mapping) and QUESTIONS_ATTR in data:
        return data[QUESTIONS_ATTR]
    return data


def resolve_questions(raw: Mapping[str, Any], target_dir: str) -> list[Question]:
    """Turn a raw manifest into validated questions.

    The mapping key is the variable name unless the entry names one. The
    project-name variable defaults to the target directory's base name,
    normalized when it is not a valid package name.

    Args:
        raw: Question mapping as loaded from the manifest
        target_dir: Target directory as given by the user

    Returns:
        Questions in manifest order

    Raises:
        ManifestLoadError: If an entry is not a valid question
    """
    questions: list[Question] = []
    for key, entry in raw.items():
        if entry is None:
            entry = {}
        if not isinstance(entry, Mapping):
            raise ManifestLoadError(f"Question '{key}' must be a mapping")

        data = dict(entry)
        data.setdefault("name", key)
        data["type"] = QuestionType.parse(data.get("type"))
        try:
            question = Question.model_validate(data)
        except ValidationError as e:
            raise ManifestLoadError(f"Invalid question '{key}': {e}")

        if question.type == QuestionType.NUMBER:
            question.initial = _number_default(key, question.initial)
        elif question.type == QuestionType.CONFIRM:
            question.initial = _confirm_default(key, question.initial)

        if question.name == PROJECT_NAME_KEY and question.initial is None:
            base_name = Path(target_dir).resolve().name if target_dir == "." else Path(target_dir).name
            if not validate_project_name(base_name):
                base_name = to_valid_project_name(base_name)
            question.initial = base_name

        questions.append(question)
    return questions


_TRUE_WORDS = {"true", "yes", "y", "on", "1"}
_FALSE_WORDS = {"false", "no", "n", "off", "0", ""}


def _number_default(key: str, value: Any) -> int | float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ManifestLoadError(f"Question '{key}' has a non-numeric default: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ManifestLoadError(f"Question '{key}' has a non-numeric default: {value!r}")
    return int(number) if number.is_integer() else number


def _confirm_default(key: str, value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ManifestLoadError(f"Question '{key}' has a non-boolean default: {value!r}")


def ask_question(question: Question, prompter: Prompter) -> Any:
    """Ask a single question and return the answer."""
    message = question.prompt_message

    if question.type == QuestionType.CONFIRM:
        return prompter.confirm(message, default=question.initial)
    if question.type == QuestionType.NUMBER:
        return prompter.number(message, default=question.initial)
    if question.type == QuestionType.SELECT and question.choices:
        choices = [_as_choice(choice) for choice in question.choices]
        values = [value for _, value in choices]
        initial = values.index(question.initial) if question.initial in values else 0
        return prompter.select(message, choices, initial=initial)
    if question.type == QuestionType.LIST:
        answer = prompter.text(message, default=question.initial)
        return [item.strip() for item in answer.split(",") if item.strip()]
    return prompter.text(
        message,
        default=question.initial,
        password=question.type == QuestionType.PASSWORD,
    )


def _as_choice(choice: Any) -> tuple[str, Any]:
    if isinstance(choice, Mapping):
        value = choice.get("value", choice.get("title"))
        return str(choice.get("title", value)), value
    return str(choice), choice


def ask_for_variables(
    target_dir: str,
    template_dir: Path,
    prompter: Prompter | None = None,
) -> dict[str, Any]:
    """Collect the variables a template needs.

    Args:
        target_dir: Target directory as given by the user
        template_dir: Extracted template package root
        prompter: Interactive prompter (default: rich console prompts)

    Returns:
        Mapping of variable name to answer

    Raises:
        OperationCancelled: If the user cancels any question
    """
    loaded = load_questions(template_dir)
    if loaded.status != ManifestStatus.LOADED:
        return {}

    try:
        questions = resolve_questions(loaded.questions, target_dir)
    except ManifestLoadError as e:
        logger.warning("Invalid question manifest %s: %s", loaded.source, e)
        console.print(f"[yellow]Load boilerplate config got trouble, skip and use defaults: {e}[/yellow]")
        return {}

    prompter = prompter or Prompter()
    answers: dict[str, Any] = {}
    for question in questions:
        answers[question.name] = ask_question(question, prompter)
    return answers
