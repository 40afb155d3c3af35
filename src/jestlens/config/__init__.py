#
# config/__init__.py
#
"""
Configuration handling sub-package for jestlens.

Exports the loading function and core configuration models.
"""

from .loader import DEFAULT_CONFIG_FILE_NAME, load_config
from .models import GlobalConfig, JestLensConfig, RunnerConfig

__all__ = [
    "DEFAULT_CONFIG_FILE_NAME",
    "GlobalConfig",
    "JestLensConfig",
    "RunnerConfig",
    "load_config",
]

# 🔼⚙️
