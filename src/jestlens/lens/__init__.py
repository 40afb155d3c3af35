#
# src/jestlens/lens/__init__.py
#
"""
Lens sub-package: per-declaration run/debug affordances.
"""
from .action_source import ActionEntry, ActionSource, find_actions_file, load_action_entries
from .enumerator import LensEnumerator
from .models import (
    ACTION_DEBUG,
    ACTION_RUN,
    ACTION_RUN_PREVIOUS,
    ACTION_RUN_WITH_OPTIONS,
    ActionDescriptor,
    ActionGroup,
    ExternalAction,
    FixedAction,
    FixedActionKind,
    SourceRange,
)

__all__ = [
    "ACTION_DEBUG",
    "ACTION_RUN",
    "ACTION_RUN_PREVIOUS",
    "ACTION_RUN_WITH_OPTIONS",
    "ActionDescriptor",
    "ActionEntry",
    "ActionGroup",
    "ActionSource",
    "ExternalAction",
    "FixedAction",
    "FixedActionKind",
    "LensEnumerator",
    "SourceRange",
    "find_actions_file",
    "load_action_entries",
]

# 🔼⚙️
