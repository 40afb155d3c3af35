#
# src/jestlens/exceptions.py
#
"""
Custom exceptions for jestlens.
"""


class JestLensError(Exception):
    """Base class for all jestlens errors."""

    pass


class ConfigurationError(JestLensError):
    """Raised when jestlens.toml or an environment override is invalid."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        full_message = message
        if path:
            full_message += f" (Config: '{path}')"
        super().__init__(full_message)


class ParseError(JestLensError):
    """Raised by a parser adapter when a test file cannot be turned into a tree."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        line: int | None = None,
    ):
        self.file_path = file_path
        self.line = line
        full_message = f"[Parser] {message}"
        if file_path:
            location = file_path if line is None else f"{file_path}:{line}"
            full_message += f" ({location})"
        super().__init__(full_message)


class ActionSourceError(JestLensError):
    """Raised when the project actions file is missing, malformed or throws."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: Exception | None = None,
    ):
        self.path = path
        self.details = details
        full_message = f"[Actions] {message}"
        if path:
            full_message += f" (File: '{path}')"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


# 🔼⚙️
