#
# src/jestlens/telemetry/__init__.py
#
"""
Telemetry sub-package: structured logging.
"""

from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
