"""Operator confirmation interface."""

from abc import ABC, abstractmethod
from typing import Optional


class ConfirmationPort(ABC):
    """
    Abstract interactive surface for asking an operator.

    Headless execution is expressed by passing no port at all, not by a
    port that refuses every question.
    """

    @abstractmethod
    def prompt_choice(self, title: str, message: str, default: str) -> Optional[str]:
        """Ask for free text with a pre-filled default. None means cancelled."""
        pass

    @abstractmethod
    def confirm_list(self, message: str, items: list[str]) -> bool:
        """Present a list of items for a single yes/no decision."""
        pass

    @abstractmethod
    def notify(self, message: str) -> None:
        """Report something to the operator without waiting for an answer."""
        pass
