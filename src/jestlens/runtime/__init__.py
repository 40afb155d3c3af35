#
# src/jestlens/runtime/__init__.py
#
"""
Runtime sub-package: host protocols, execution surfaces and the dispatcher.

Import the dispatcher from `jestlens.runtime.dispatcher`; the lens package
depends on these protocols, so this module must not import it.
"""
from .protocols import (
    ActiveDocument,
    DebugLaunch,
    DebugSpecification,
    EditorHost,
    ExecutionSurface,
    HostCapabilities,
    RunnerArgs,
    RunnerContext,
)

__all__ = [
    "ActiveDocument",
    "DebugLaunch",
    "DebugSpecification",
    "EditorHost",
    "ExecutionSurface",
    "HostCapabilities",
    "RunnerArgs",
    "RunnerContext",
]

# 🔼⚙️
