"""Scaffold runner - executes the template materialization pipeline."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from rich.console import Console

from create_tools.config import Config, get_config
from create_tools.output import print_file_tree, print_next_steps
from schemas.run_state import RunState, Stage
from schemas.template import TargetSpec, TemplateRef
from scaffolding.errors import NoTemplatesFound, OperationCancelled, ScaffoldError
from scaffolding.generator import TemplateGenerator
from scaffolding.prompter import Prompter
from scaffolding.questions import ask_for_variables
from scaffolding.registry import RegistryClient, ScratchDirectory
from scaffolding.target import (
    OverwriteDecision,
    conflict_message,
    format_target_dir,
    prepare_target,
    resolve_target,
)

from .state_machine import StateMachine

logger = logging.getLogger(__name__)

USER_AGENT_ENV = "npm_config_user_agent"


@dataclass(frozen=True)
class PackageManagerInfo:
    name: str
    version: str | None = None


def pkg_from_user_agent(user_agent: str | None) -> PackageManagerInfo | None:
    """Parse the invoking package manager from its user agent.

    Example:
        >>> pkg_from_user_agent("pnpm/8.6.0 npm/? node/v18.16.0 darwin x64")
        PackageManagerInfo(name='pnpm', version='8.6.0')
    """
    if not user_agent:
        return None
    pkg_spec = user_agent.split(" ")[0]
    name, _, version = pkg_spec.partition("/")
    return PackageManagerInfo(name=name, version=version or None)


class ScaffoldRunner:
    """Runs one scaffolding invocation.

    Handles:
    - Target directory resolution and overwrite decision
    - Template search and selection
    - Archive download into the scratch directory
    - Template questions
    - Instantiation and the final usage hint
    """

    def __init__(
        self,
        config: Config | None = None,
        client: RegistryClient | None = None,
        prompter: Prompter | None = None,
        console: Console | None = None,
        cwd: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Configuration (default: global config)
            client: Registry client (default: built from config)
            prompter: Interactive prompter (default: rich prompts)
            console: Rich console for output
            cwd: Directory relative targets resolve against
            environ: Environment used to detect the package manager
        """
        self.config = config or get_config()
        self.console = console or Console()
        self.client = client or RegistryClient(
            registry_url=self.config.registry.url,
            timeout=self.config.registry.timeout,
        )
        self.prompter = prompter or Prompter(self.console)
        self.cwd = Path(cwd or Path.cwd())
        self.environ = os.environ if environ is None else environ
        self.state_machine = StateMachine()

    @property
    def state(self) -> RunState:
        return self.state_machine.state

    def run(self, target_dir: str | None = None, template: str | None = None) -> RunState:
        """Execute the pipeline.

        Args:
            target_dir: Target directory argument, None to ask for it
            template: Template name[@version], None to search and select

        Returns:
            Final run state

        Raises:
            OperationCancelled: If the user cancelled
            ScaffoldError: If a registry or pipeline step failed
        """
        sm = self.state_machine
        try:
            target = self._resolve_target(target_dir)
            selected = self._choose_template(template)
            decision = self._decide_overwrite(target)

            root = self.cwd / target.normalized_path
            prepare_target(root, decision)
            self.state.project_root = str(root)

            scratch = ScratchDirectory(self.config.scratch_path, keep=self.config.scaffold.keep_scratch)
            with scratch as scratch_dir:
                sm.transition(Stage.FETCHING_ARCHIVE)
                template_dir = self.client.download(selected, scratch_dir)
                self.state.template_dir = str(template_dir)

                sm.transition(Stage.COLLECTING_VARIABLES)
                self.state.locals = ask_for_variables(str(root), template_dir, self.prompter)

                sm.transition(Stage.INSTANTIATING)
                generator = TemplateGenerator(
                    template_dir,
                    root,
                    self.state.locals,
                    payload_dir=self.config.scaffold.payload_dir,
                )
                self.state.files = generator.generate()
                logger.info("Instantiated %d entries into %s", len(self.state.files), root)

            sm.transition(Stage.DONE)
            self._print_completion(target, root)
            return self.state

        except OperationCancelled as e:
            logger.info("Cancelled during %s", self.state.current_stage.value)
            sm.cancel(str(e))
            raise
        except ScaffoldError as e:
            logger.debug("Failed during %s", self.state.current_stage.value, exc_info=True)
            if not sm.is_finished():
                sm.fail(str(e))
            raise

    def _resolve_target(self, target_dir: str | None) -> TargetSpec:
        self.state_machine.transition(Stage.RESOLVING_TARGET)

        default = self.config.scaffold.default_target_dir
        raw_input = target_dir
        if format_target_dir(target_dir) is None:
            raw_input = self.prompter.text("Project name:", default=default)

        target = resolve_target(raw_input, default=default, cwd=self.cwd)
        self.state.target = target
        logger.debug("Target directory: %s", target.normalized_path)
        return target

    def _choose_template(self, template: str | None) -> TemplateRef:
        sm = self.state_machine
        sm.transition(Stage.SEARCHING_TEMPLATES)

        if template:
            selected = self.client.resolve(template)
        else:
            registry = self.config.registry
            candidates = self.client.search(registry.search_text, registry.search_size)
            self.state.candidates = candidates

            sm.transition(Stage.SELECTING_TEMPLATE)
            if not candidates:
                raise NoTemplatesFound(f"No templates found for '{registry.search_text}'")
            selected = self.prompter.select(
                "Select a framework:",
                [(str(candidate), candidate) for candidate in candidates],
            )

        self.state.template = selected
        return selected

    def _decide_overwrite(self, target: TargetSpec) -> OverwriteDecision | None:
        if not target.has_conflict:
            return None

        self.state_machine.transition(Stage.AWAITING_OVERWRITE_DECISION)
        decision = self.prompter.select(
            conflict_message(target),
            [(choice.title, choice) for choice in OverwriteDecision],
        )
        self.state.overwrite = decision.value
        if decision == OverwriteDecision.CANCEL:
            raise OperationCancelled()
        return decision

    def _print_completion(self, target: TargetSpec, root: Path) -> None:
        pkg_info = pkg_from_user_agent(self.environ.get(USER_AGENT_ENV))
        package_manager = pkg_info.name if pkg_info else "npm"
        if logger.isEnabledFor(logging.DEBUG):
            print_file_tree(self.state.files)
        print_next_steps(str(root), target.normalized_path, package_manager)
