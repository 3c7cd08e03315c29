"""Schemas module for structured scaffold state.

Provides Pydantic models for:
- Template references and target directories
- Template questions
- Run state and stages
"""

from .run_state import RunState, RunStatus, Stage
from .template import Question, QuestionType, TargetSpec, TemplateRef

__all__ = [
    # Template
    "TemplateRef",
    "TargetSpec",
    "Question",
    "QuestionType",
    # Run state
    "RunState",
    "RunStatus",
    "Stage",
]
