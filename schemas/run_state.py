"""Scaffold run state schema.

State machine representation for a single scaffolding invocation.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .template import TargetSpec, TemplateRef


class RunStatus(str, Enum):
    """Overall run status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Stage(str, Enum):
    """Scaffolding stages, in execution order."""

    INIT = "init"
    RESOLVING_TARGET = "resolving_target"
    SEARCHING_TEMPLATES = "searching_templates"
    SELECTING_TEMPLATE = "selecting_template"
    AWAITING_OVERWRITE_DECISION = "awaiting_overwrite_decision"
    FETCHING_ARCHIVE = "fetching_archive"
    COLLECTING_VARIABLES = "collecting_variables"
    INSTANTIATING = "instantiating"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


class RunState(BaseModel):
    """Everything a run knows, threaded from stage to stage."""

    status: RunStatus = Field(RunStatus.PENDING, description="Overall status")
    current_stage: Stage = Field(Stage.INIT, description="Current stage")
    visited: list[Stage] = Field(default_factory=list, description="Stages entered so far")

    started_at: datetime | None = Field(None, description="When the run started")
    completed_at: datetime | None = Field(None, description="When the run ended")

    target: TargetSpec | None = Field(None, description="Resolved target directory")
    project_root: str | None = Field(None, description="Absolute project directory")
    candidates: list[TemplateRef] = Field(default_factory=list, description="Search results")
    template: TemplateRef | None = Field(None, description="Selected template")
    overwrite: str | None = Field(None, description="Overwrite decision, if one was needed")
    template_dir: str | None = Field(None, description="Extracted template root")
    locals: dict[str, Any] = Field(default_factory=dict, description="Answered variables")
    files: list[str] = Field(default_factory=list, description="Processed relative paths")

    error: str | None = Field(None, description="Failure or cancellation message")

    def mark_stage_started(self, stage: Stage) -> None:
        """Enter a stage."""
        self.current_stage = stage
        self.visited.append(stage)
