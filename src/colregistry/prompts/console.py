"""Terminal implementation of the confirmation port."""

from typing import Callable, Optional

from .base import ConfirmationPort


class ConsolePrompt(ConfirmationPort):
    """Asks the operator on stdin/stdout."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ):
        self._input = input_func
        self._output = output_func

    def _ask(self, prompt: str) -> Optional[str]:
        try:
            return self._input(prompt)
        except (EOFError, KeyboardInterrupt):
            return None

    def prompt_choice(self, title: str, message: str, default: str) -> Optional[str]:
        self._output(f"\n{title}")
        self._output("=" * len(title))
        self._output(message)
        answer = self._ask(f"[{default}]: " if default else "> ")
        if answer is None:
            return None
        answer = answer.strip()
        return answer or default

    def confirm_list(self, message: str, items: list[str]) -> bool:
        self._output(f"\n{message}")
        for item in items:
            self._output(f"  • {item}")
        answer = self._ask("Proceed? [y/N]: ")
        return answer is not None and answer.strip().lower() in ("y", "yes")

    def notify(self, message: str) -> None:
        self._output(message)
