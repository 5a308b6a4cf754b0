"""Public operations: query, install and update formulae through brew.

Each function performs one blocking brew invocation (install-style calls add
a follow-up ``brew info`` to return the refreshed record). ``runner`` defaults
to ``brewpkg.runner.get_default_runner()``.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from brewpkg.common.logging_utils import Timer, extra_context, is_debug_enabled
from brewpkg.constants import Constants, Subcommands
from brewpkg.errors import ToolError
from brewpkg.models import Package
from brewpkg.options import InstallOptions
from brewpkg.parser import parse_package_json, parse_packages
from brewpkg.runner import CommandRunner, run_tool

logger = logging.getLogger(__name__)


def _info_args(*extra: str) -> List[str]:
    return [Subcommands.INFO.value, Constants.JSON_FLAG, Constants.ANALYTICS_FLAG, *extra]


def update(runner: Optional[CommandRunner] = None) -> None:
    """Run ``brew update``.

    Raises:
        ExecutionError: brew could not be launched.
        ToolError: brew exited non-zero.
    """
    logger.info("Updating Homebrew")
    run_tool([Subcommands.UPDATE.value], runner)


def package(name: str, runner: Optional[CommandRunner] = None) -> Package:
    """Fetch one formula by name.

    Raises:
        ToolError: brew does not know ``name``.
        PackageNotFoundError: brew succeeded but returned no formula.
        ParseError: the payload does not match the expected schema.
    """
    output = run_tool(_info_args(name), runner, strict=True)
    return parse_package_json(output, name=name)


def _listing(flag: str, runner: Optional[CommandRunner]) -> List[Package]:
    with Timer() as t:
        output = run_tool(_info_args(flag), runner, strict=True)
        packages = parse_packages(output)
    if is_debug_enabled(logger):
        logger.debug(
            "Parsed %d packages from brew info %s",
            len(packages),
            flag,
            extra=extra_context(
                event="listing",
                component="brew",
                action=flag,
                outcome="success",
                duration_ms=t.duration_ms(),
            ),
        )
    return packages


def all_installed(runner: Optional[CommandRunner] = None) -> List[Package]:
    """Return every installed formula, in brew's order."""
    return _listing(Constants.INSTALLED_FLAG, runner)


def all_packages(runner: Optional[CommandRunner] = None) -> List[Package]:
    """Return the whole formula catalog, in brew's order.

    The complete response is buffered before parsing.
    """
    return _listing(Constants.ALL_FLAG, runner)


def packages_by_name(packages: Iterable[Package]) -> Dict[str, Package]:
    """Index a listing by formula name; later duplicates win."""
    return {pkg.name: pkg for pkg in packages}


def _install_style(
    subcommand: Subcommands,
    name: str,
    options: Optional[InstallOptions],
    runner: Optional[CommandRunner],
) -> Package:
    flags = (options or InstallOptions()).to_args()
    args = [subcommand.value, *flags, name]
    logger.info("Running brew %s", " ".join(args))
    try:
        run_tool(args, runner)
    except ToolError as exc:
        logger.error("brew %s %s failed: %s", subcommand.value, name, exc.stderr.strip())
        raise
    return package(name, runner)


def install(
    name: str,
    options: Optional[InstallOptions] = None,
    runner: Optional[CommandRunner] = None,
) -> Package:
    """Run ``brew install [flags] <name>`` and return the refreshed record."""
    return _install_style(Subcommands.INSTALL, name, options, runner)


def reinstall(
    name: str,
    options: Optional[InstallOptions] = None,
    runner: Optional[CommandRunner] = None,
) -> Package:
    """Run ``brew reinstall [flags] <name>`` and return the refreshed record."""
    return _install_style(Subcommands.REINSTALL, name, options, runner)


def uninstall(name: str, runner: Optional[CommandRunner] = None) -> Package:
    """Run ``brew uninstall <name>`` and return the refreshed record."""
    logger.info("Uninstalling %s", name)
    run_tool([Subcommands.UNINSTALL.value, name], runner)
    return package(name, runner)
