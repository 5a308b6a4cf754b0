"""brewpkg - typed access to Homebrew formulae through brew's JSON output."""

from brewpkg.brew import (
    all_installed,
    all_packages,
    install,
    package,
    packages_by_name,
    reinstall,
    uninstall,
    update,
)
from brewpkg.errors import (
    BrewError,
    ExecutionError,
    PackageNotFoundError,
    ParseError,
    ToolError,
)
from brewpkg.models import Package, Version
from brewpkg.options import EnvMode, InstallOptions
from brewpkg.runner import CommandRunner, ProcessResult, SubprocessRunner

__version__ = "0.1.0"

__all__ = [
    "BrewError",
    "CommandRunner",
    "EnvMode",
    "ExecutionError",
    "InstallOptions",
    "Package",
    "PackageNotFoundError",
    "ParseError",
    "ProcessResult",
    "SubprocessRunner",
    "ToolError",
    "Version",
    "all_installed",
    "all_packages",
    "install",
    "package",
    "packages_by_name",
    "reinstall",
    "uninstall",
    "update",
]
