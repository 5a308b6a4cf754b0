"""Typed records for ``brew info --json=v1`` output.

All records are frozen snapshots of one brew invocation. Mapping fields are
read-only ``MappingProxyType`` views and records stay hashable. Optional scalar
fields use ``None`` for "absent", so a missing description (``None``) is distinct from
an empty one (``""``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple, Union

from packaging.version import InvalidVersion
from packaging.version import Version as _PkgVersion

if TYPE_CHECKING:
    from brewpkg.options import InstallOptions
    from brewpkg.runner import CommandRunner

_REVISION_SUFFIX = re.compile(r"_\d+$")



def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


def freeze_json(value: Any) -> Any:
    """Return decoded JSON with objects as read-only mappings and arrays as tuples."""
    if isinstance(value, dict):
        return MappingProxyType({k: freeze_json(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(freeze_json(v) for v in value)
    return value


def thaw_json(value: Any) -> Any:
    """Inverse of ``freeze_json``: plain dicts and lists, safe to mutate or dump."""
    if isinstance(value, Mapping):
        return {k: thaw_json(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw_json(v) for v in value]
    return value


def _mapping_key(value: Optional[Mapping[str, Any]]) -> Optional[Tuple[Tuple[str, Any], ...]]:
    return None if value is None else tuple(sorted(value.items()))


@dataclass(frozen=True)
class Version:
    """A version string exactly as brew reported it."""

    original: str

    def parse(self) -> Optional[_PkgVersion]:
        """Return a comparable version, or None when brew's string is not one.

        A trailing ``_N`` formula revision is ignored.
        """
        text = _REVISION_SUFFIX.sub("", self.original.strip())
        try:
            return _PkgVersion(text)
        except InvalidVersion:
            return None

    def __str__(self) -> str:
        return self.original


@dataclass(frozen=True)
class Versions:
    stable: Optional[Version]
    devel: Optional[Version] = None
    head: Optional[str] = None
    bottle: bool = False


@dataclass(frozen=True)
class SourceUrl:
    url: str
    tag: Optional[str] = None
    # brew reports either a commit hash or a numeric svn revision
    revision: Union[int, str, None] = None
    checksum: Optional[str] = None


@dataclass(frozen=True)
class BottleFile:
    url: str
    sha256: str
    cellar: Optional[str] = None


@dataclass(frozen=True)
class Bottle:
    rebuild: int
    root_url: str
    cellar: Optional[str] = None
    prefix: Optional[str] = None
    files: Mapping[str, BottleFile] = field(default_factory=_empty_mapping)

    def __hash__(self) -> int:
        return hash((self.rebuild, self.root_url, self.cellar, self.prefix, _mapping_key(self.files)))


@dataclass(frozen=True)
class BrewOption:
    option: str
    description: str = ""


@dataclass(frozen=True)
class Requirement:
    name: str
    cask: Optional[str] = None
    download: Optional[str] = None
    version: Optional[Version] = None
    contexts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Dependency:
    """A runtime dependency recorded for an installed keg."""

    full_name: str
    version: Version


@dataclass(frozen=True)
class Installed:
    """One installed keg of a formula."""

    version: Version
    used_options: Tuple[str, ...] = ()
    built_as_bottle: bool = False
    poured_from_bottle: bool = False
    runtime_dependencies: Tuple[Dependency, ...] = ()
    installed_as_dependency: bool = False
    installed_on_request: bool = False


@dataclass(frozen=True)
class Analytic:
    """Install counts per window; each window maps a name to a count."""

    d30: Optional[Mapping[str, int]] = None
    d90: Optional[Mapping[str, int]] = None
    d365: Optional[Mapping[str, int]] = None

    def __hash__(self) -> int:
        return hash((_mapping_key(self.d30), _mapping_key(self.d90), _mapping_key(self.d365)))


@dataclass(frozen=True)
class Analytics:
    install: Analytic
    install_on_request: Analytic
    build_error: Analytic


UsesFromMacos = Union[str, Mapping[str, Any]]


@dataclass(frozen=True)
class Package:
    """One formula as described by ``brew info --json=v1``.

    ``raw`` keeps the decoded JSON object, frozen, so keys not modelled here
    stay reachable; it takes no part in equality. Hashing uses the identity
    and install state only.
    """

    name: str
    full_name: str
    versions: Versions
    installed: Tuple[Installed, ...]
    aliases: Tuple[str, ...] = ()
    oldname: Optional[str] = None
    desc: Optional[str] = None
    homepage: Optional[str] = None
    urls: Mapping[str, SourceUrl] = field(default_factory=_empty_mapping)
    revision: int = 0
    version_scheme: int = 0
    bottle: Mapping[str, Bottle] = field(default_factory=_empty_mapping)
    keg_only: bool = False
    bottle_disabled: bool = False
    options: Tuple[BrewOption, ...] = ()
    build_dependencies: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    recommended_dependencies: Tuple[str, ...] = ()
    optional_dependencies: Tuple[str, ...] = ()
    uses_from_macos: Tuple[UsesFromMacos, ...] = ()
    requirements: Tuple[Requirement, ...] = ()
    conflicts_with: Tuple[str, ...] = ()
    caveats: Optional[str] = None
    linked_keg: Optional[str] = None
    pinned: bool = False
    outdated: bool = False
    analytics: Optional[Analytics] = None
    raw: Mapping[str, Any] = field(default_factory=_empty_mapping, compare=False, repr=False)

    def __hash__(self) -> int:
        return hash((self.name, self.full_name, self.versions, self.installed))

    @classmethod
    def fetch(cls, name: str, runner: Optional["CommandRunner"] = None) -> "Package":
        """Look up ``name`` with ``brew info``.

        Raises:
            ToolError: brew does not know ``name``.
            ParseError: brew's output does not match the expected schema.
        """
        from brewpkg import brew  # pylint: disable=import-outside-toplevel

        return brew.package(name, runner=runner)

    def is_installed(self) -> bool:
        return len(self.installed) != 0

    def install_options(self) -> Optional[Tuple[str, ...]]:
        """Options the first installed keg was built with, or None if not installed."""
        if not self.installed:
            return None
        return self.installed[0].used_options

    def installed_versions(self) -> List[Version]:
        return [keg.version for keg in self.installed]

    def install(
        self,
        options: Optional["InstallOptions"] = None,
        runner: Optional["CommandRunner"] = None,
    ) -> "Package":
        """Run ``brew install`` for this formula and return the refreshed record."""
        from brewpkg import brew  # pylint: disable=import-outside-toplevel

        return brew.install(self.name, options, runner=runner)

    def reinstall(
        self,
        options: Optional["InstallOptions"] = None,
        runner: Optional["CommandRunner"] = None,
    ) -> "Package":
        from brewpkg import brew  # pylint: disable=import-outside-toplevel

        return brew.reinstall(self.name, options, runner=runner)

    def uninstall(self, runner: Optional["CommandRunner"] = None) -> "Package":
        """Run ``brew uninstall`` for this formula and return the refreshed record."""
        from brewpkg import brew  # pylint: disable=import-outside-toplevel

        return brew.uninstall(self.name, runner=runner)

    def refresh(self, runner: Optional["CommandRunner"] = None) -> "Package":
        return Package.fetch(self.name, runner=runner)

    def to_dict(self) -> Dict[str, Any]:
        """Return a mutable copy of the JSON object this record was parsed from."""
        return thaw_json(self.raw)
