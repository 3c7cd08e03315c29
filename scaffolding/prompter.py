"""Interactive prompts for the scaffolding pipeline.

Thin layer over rich.prompt. Every question raises OperationCancelled
when the user interrupts input, so a cancelled run never continues with
partial answers.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from rich.console import Console
from rich.prompt import Confirm, FloatPrompt, Prompt

from .errors import OperationCancelled


Choice = tuple[str, Any]


class Prompter:
    """Ask questions on a rich console.

    Example:
        >>> prompter = Prompter()
        >>> name = prompter.text("Project name:", default="new-project")
        >>> decision = prompter.select("Proceed?", [("Yes", "yes"), ("No", "no")])
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def text(self, message: str, default: Any = None, password: bool = False) -> str:
        """Ask for free text."""
        with _cancel_on_interrupt():
            if default is None:
                return Prompt.ask(message, console=self.console, password=password)
            return Prompt.ask(message, console=self.console, password=password, default=str(default))

    def confirm(self, message: str, default: Any = None) -> bool:
        """Ask a yes/no question."""
        with _cancel_on_interrupt():
            return Confirm.ask(message, console=self.console, default=bool(default))

    def number(self, message: str, default: Any = None) -> int | float:
        """Ask for a number; whole numbers come back as int."""
        with _cancel_on_interrupt():
            if default is None:
                value = FloatPrompt.ask(message, console=self.console)
            else:
                value = FloatPrompt.ask(message, console=self.console, default=float(default))
        return int(value) if float(value).is_integer() else value

    def select(self, message: str, choices: Sequence[Choice], initial: int = 0) -> Any:
        """Pick one option from a numbered list.

        Args:
            message: Question text
            choices: (title, value) pairs
            initial: Index of the default choice

        Returns:
            The value of the chosen option
        """
        if not choices:
            raise ValueError("select() needs at least one choice")

        self.console.print(f"[bold]{message}[/bold]")
        for index, (title, _) in enumerate(choices, start=1):
            self.console.print(f"  [cyan]{index}[/cyan]) {title}")

        keys = [str(i) for i in range(1, len(choices) + 1)]
        default = keys[initial] if 0 <= initial < len(keys) else keys[0]
        with _cancel_on_interrupt():
            answer = Prompt.ask(
                "Your choice",
                console=self.console,
                choices=keys,
                default=default,
                show_choices=False,
            )
        return choices[int(answer) - 1][1]


@contextmanager
def _cancel_on_interrupt() -> Iterator[None]:
    """Turn Ctrl-C / Ctrl-D during input into OperationCancelled."""
    try:
        yield
    except (KeyboardInterrupt, EOFError) as e:
        raise OperationCancelled() from e
