"""Prompt assembly for narrative and overview generation."""

from .builder import PromptBuilder, PromptRequest
from .constants import SYSTEM_PROMPTS, PromptMode
from .table import format_commit_table

__all__ = ["PromptBuilder", "PromptMode", "PromptRequest", "SYSTEM_PROMPTS", "format_commit_table"]
