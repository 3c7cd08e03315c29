"""Orchestrator module for create-tools.

State machine-based scaffold orchestration with:
- Strictly sequential stages
- Overwrite decision only on conflicting targets
- Cancellation at any interactive prompt
"""

from .state_machine import InvalidTransition, StateMachine, Transition
from .runner import PackageManagerInfo, ScaffoldRunner, pkg_from_user_agent

__all__ = [
    "InvalidTransition",
    "StateMachine",
    "Transition",
    "ScaffoldRunner",
    "PackageManagerInfo",
    "pkg_from_user_agent",
]
