"""Process invocation for brew.

Everything that touches a real ``brew`` process goes through a
``CommandRunner``. ``SubprocessRunner`` is the production implementation;
tests substitute any object with a compatible ``run`` method.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

from brewpkg.common.logging_utils import (
    Timer,
    extra_context,
    format_command,
    is_debug_enabled,
)
from brewpkg.config import BrewConfig, load_config
from brewpkg.constants import Constants
from brewpkg.errors import ExecutionError, ParseError, ToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Captured outcome of one brew invocation."""

    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    # undecoded stdout, when the runner captured bytes
    raw_stdout: Optional[bytes] = field(default=None, compare=False, repr=False)

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    """Anything able to run brew with arguments and capture its output."""

    def run(self, args: Sequence[str]) -> ProcessResult:
        """Run brew with ``args`` and return the captured result.

        Raises:
            ExecutionError: brew could not be launched.
        """
        ...


@dataclass
class SubprocessRunner:
    """Run brew as a child process and block until it exits."""

    brew_path: str = Constants.BREW_BINARY
    auto_update: bool = False
    env: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: BrewConfig) -> "SubprocessRunner":
        return cls(
            brew_path=config.brew_path,
            auto_update=config.auto_update,
            env=dict(config.env),
        )

    def _environment(self) -> Dict[str, str]:
        env = os.environ.copy()
        env.update(self.env)
        if not self.auto_update:
            env[Constants.ENV_NO_AUTO_UPDATE] = "1"
        return env

    def run(self, args: Sequence[str]) -> ProcessResult:
        argv = [self.brew_path, *args]
        with Timer() as t:
            try:
                completed = subprocess.run(  # noqa: S603
                    argv,
                    capture_output=True,
                    env=self._environment(),
                    check=False,
                )
            except OSError as exc:
                logger.debug(
                    "brew launch failed",
                    extra=extra_context(
                        event="process_launch",
                        component="runner",
                        action=format_command(argv),
                        outcome="error",
                    ),
                )
                raise ExecutionError(
                    f"Unable to run {self.brew_path!r}: {exc}", args=argv
                ) from exc

        if is_debug_enabled(logger):
            logger.debug(
                "brew exited with %s: %s",
                completed.returncode,
                format_command(argv),
                extra=extra_context(
                    event="process_exit",
                    component="runner",
                    action=format_command(argv),
                    outcome="success" if completed.returncode == 0 else "failure",
                    duration_ms=t.duration_ms(),
                ),
            )

        # strict decoding happens only where stdout is parsed, see run_tool
        return ProcessResult(
            args=list(args),
            returncode=completed.returncode,
            stdout=completed.stdout.decode("utf-8", errors="replace"),
            stderr=completed.stderr.decode("utf-8", errors="replace"),
            raw_stdout=completed.stdout,
        )


_default_runner: Optional[CommandRunner] = None


def get_default_runner() -> CommandRunner:
    """Return the process-wide runner, building it from config on first use."""
    global _default_runner  # pylint: disable=global-statement
    if _default_runner is None:
        _default_runner = SubprocessRunner.from_config(load_config())
    return _default_runner


def set_default_runner(runner: Optional[CommandRunner]) -> None:
    """Replace the process-wide runner; ``None`` resets to lazy construction."""
    global _default_runner  # pylint: disable=global-statement
    _default_runner = runner


def run_tool(
    args: Sequence[str],
    runner: Optional[CommandRunner] = None,
    strict: bool = False,
) -> str:
    """Run brew and return its standard output.

    With ``strict``, stdout of a successful run must be valid UTF-8; callers
    that parse the output set it. Without it, undecodable bytes are replaced.

    Raises:
        ExecutionError: brew could not be launched.
        ToolError: brew exited non-zero; carries the captured stderr.
        ParseError: ``strict`` is set and stdout is not valid UTF-8.
    """
    active = runner if runner is not None else get_default_runner()
    result = active.run(list(args))
    if not result.success:
        logger.debug("brew %s failed: %s", " ".join(args), result.stderr.strip())
        raise ToolError(args, result.returncode, stderr=result.stderr, stdout=result.stdout)
    if strict and result.raw_stdout is not None:
        try:
            return result.raw_stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(
                f"brew {' '.join(args)} wrote non-UTF-8 output", cause=exc
            ) from exc
    return result.stdout


def brew_version(runner: Optional[CommandRunner] = None) -> str:
    """Return the first line of ``brew --version``."""
    try:
        output = run_tool([Constants.VERSION_FLAG], runner)
    except ToolError as exc:
        raise ExecutionError(f"brew is not usable: {exc}", args=exc.command) from exc
    lines = output.strip().splitlines()
    return lines[0] if lines else ""


def check_brew_installed(runner: Optional[CommandRunner] = None) -> None:
    """Raise ``ExecutionError`` unless ``brew --version`` runs successfully."""
    version = brew_version(runner)
    logger.debug("Found %s", version or "brew")
