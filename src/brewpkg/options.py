"""Install flags for ``brew install`` / ``brew reinstall``."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple


class EnvMode(Enum):
    """Build environment selected with ``--env``."""

    STD = "std"
    SUPER = "super"


@dataclass(frozen=True)
class InstallOptions:
    """Immutable set of install flags.

    Each ``with_*`` method returns a new value, so options chain::

        InstallOptions().with_head().with_force().with_env(EnvMode.STD)

    Combinations are not validated here; brew decides what it accepts.
    """

    head: bool = False
    force: bool = False
    env: Optional[EnvMode] = None
    build_from_source: bool = False
    ignore_dependencies: bool = False
    only_dependencies: bool = False
    keep_tmp: bool = False
    verbose: bool = False
    debug: bool = False
    formula_options: Tuple[str, ...] = ()

    def with_head(self, enabled: bool = True) -> "InstallOptions":
        return replace(self, head=enabled)

    def with_force(self, enabled: bool = True) -> "InstallOptions":
        return replace(self, force=enabled)

    def with_env(self, mode: Optional[EnvMode]) -> "InstallOptions":
        if mode is not None and not isinstance(mode, EnvMode):
            mode = EnvMode(mode)
        return replace(self, env=mode)

    def with_env_std(self) -> "InstallOptions":
        return self.with_env(EnvMode.STD)

    def with_build_from_source(self, enabled: bool = True) -> "InstallOptions":
        return replace(self, build_from_source=enabled)

    def with_ignore_dependencies(self, enabled: bool = True) -> "InstallOptions":
        return replace(self, ignore_dependencies=enabled)

    def with_only_dependencies(self, enabled: bool = True) -> "InstallOptions":
        return replace(self, only_dependencies=enabled)

    def with_keep_tmp(self, enabled: bool = True) -> "InstallOptions":
        return replace(self, keep_tmp=enabled)

    def with_verbose(self, enabled: bool = True) -> "InstallOptions":
        return replace(self, verbose=enabled)

    def with_debug(self, enabled: bool = True) -> "InstallOptions":
        return replace(self, debug=enabled)

    def with_formula_option(self, *flags: str) -> "InstallOptions":
        """Append formula-specific flags such as ``--with-foo``."""
        return replace(self, formula_options=self.formula_options + tuple(flags))

    def to_args(self) -> List[str]:
        """Render the flags in brew's spelling, in a fixed order."""
        args: List[str] = []
        if self.head:
            args.append("--HEAD")
        if self.force:
            args.append("--force")
        if self.env is not None:
            args.append(f"--env={self.env.value}")
        if self.build_from_source:
            args.append("--build-from-source")
        if self.ignore_dependencies:
            args.append("--ignore-dependencies")
        if self.only_dependencies:
            args.append("--only-dependencies")
        if self.keep_tmp:
            args.append("--keep-tmp")
        if self.verbose:
            args.append("--verbose")
        if self.debug:
            args.append("--debug")
        args.extend(self.formula_options)
        return args
