"""Operator confirmation surfaces."""

from .base import ConfirmationPort
from .console import ConsolePrompt

__all__ = ["ConfirmationPort", "ConsolePrompt"]
