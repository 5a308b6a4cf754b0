"""Exceptions raised by brewpkg.

Every failure surfaces to the caller as a ``BrewError`` subclass; nothing is
retried internally.
"""
from __future__ import annotations

from typing import Optional, Sequence


class BrewError(Exception):
    """Base class for all brewpkg errors."""


class ExecutionError(BrewError):
    """brew could not be launched (missing binary, permission denied, ...)."""

    def __init__(self, message: str, args: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.command = list(args) if args is not None else []


class ToolError(BrewError):
    """brew ran but exited with a non-zero status."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: int,
        stderr: str = "",
        stdout: str = "",
    ):
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        detail = stderr.strip() or "no diagnostic output"
        super().__init__(
            f"brew {' '.join(self.command)} exited with status {returncode}: {detail}"
        )


class ParseError(BrewError):
    """brew output could not be mapped to the expected JSON schema.

    A schema mismatch usually means an incompatible brew version.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class PackageNotFoundError(BrewError):
    """brew answered a single-package lookup with no package."""

    def __init__(self, name: str):
        super().__init__(f"No formula named {name!r}")
        self.name = name
