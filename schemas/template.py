"""Template schemas.

Identity of a registry template, the resolved target directory, and
the questions a template asks before it is instantiated.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TemplateRef(BaseModel):
    """A template package published in the registry."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Package name, possibly scoped (@scope/name)")
    version: str = Field(..., description="Exact version or dist-tag")

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


class TargetSpec(BaseModel):
    """Target directory derived once per invocation."""

    raw_input: str | None = Field(None, description="Value as typed or passed on the command line")
    normalized_path: str = Field(..., description="Trimmed path without trailing slashes")
    exists: bool = Field(False, description="Whether the directory already exists")
    is_empty: bool = Field(True, description="No entries, or only the .git directory")

    @property
    def is_current_dir(self) -> bool:
        return self.normalized_path == "."

    @property
    def has_conflict(self) -> bool:
        """True when existing content needs an overwrite decision."""
        return self.exists and not self.is_empty


class QuestionType(str, Enum):
    """Supported interactive question kinds."""

    TEXT = "text"
    PASSWORD = "password"
    CONFIRM = "confirm"
    NUMBER = "number"
    SELECT = "select"
    LIST = "list"

    @classmethod
    def parse(cls, value: str | None) -> "QuestionType":
        """Map a manifest type to a question kind, defaulting to text."""
        try:
            return cls(value or cls.TEXT.value)
        except ValueError:
            return cls.TEXT


class Question(BaseModel):
    """One entry of a template question manifest."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Variable name used as substitution key")
    type: QuestionType = Field(QuestionType.TEXT, description="Prompt kind")
    message: str = Field("", description="Prompt text shown to the user")
    initial: Any = Field(None, alias="default", description="Default answer")
    choices: list[Any] = Field(default_factory=list, description="Options for select questions")

    @property
    def prompt_message(self) -> str:
        return self.message or f"{self.name}:"
