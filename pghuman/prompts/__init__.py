"""Prompt contracts for the completion stage."""

from .contracts import ChatTurn, Role
from .builder import PromptBuilder

__all__ = [
    "ChatTurn",
    "Role",
    "PromptBuilder",
]
