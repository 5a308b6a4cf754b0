"""Map ``brew info --json=v1`` payloads onto the records in ``brewpkg.models``.

Mapping is all-or-nothing: any missing required key, wrong JSON type or
undecodable text raises ``ParseError`` and no record is returned.
"""

from __future__ import annotations

import json
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from brewpkg.errors import PackageNotFoundError, ParseError
from brewpkg.models import (
    Analytic,
    Analytics,
    Bottle,
    BottleFile,
    BrewOption,
    Dependency,
    Installed,
    Package,
    Requirement,
    SourceUrl,
    Version,
    Versions,
    freeze_json,
)

_MISSING = object()

_TYPE_NAMES = {
    str: "string",
    bool: "boolean",
    int: "integer",
    dict: "object",
    list: "array",
}


def _type_name(types: Tuple[type, ...]) -> str:
    return " or ".join(_TYPE_NAMES.get(t, t.__name__) for t in types)


def _check_type(value: Any, types: Tuple[type, ...], where: str) -> Any:
    # JSON booleans decode to bool, which is also an int
    if isinstance(value, bool) and bool not in types:
        ok = False
    else:
        ok = isinstance(value, types)
    if not ok:
        raise ParseError(
            f"{where}: expected {_type_name(types)}, got {type(value).__name__}"
        )
    return value


def _required(obj: Mapping[str, Any], key: str, types: Tuple[type, ...], where: str) -> Any:
    value = obj.get(key, _MISSING)
    if value is _MISSING or value is None:
        raise ParseError(f"{where}: missing required key {key!r}")
    return _check_type(value, types, f"{where}.{key}")


def _optional(obj: Mapping[str, Any], key: str, types: Tuple[type, ...], where: str) -> Any:
    value = obj.get(key)
    if value is None:
        return None
    return _check_type(value, types, f"{where}.{key}")


def _flag(obj: Mapping[str, Any], key: str, where: str) -> bool:
    value = _optional(obj, key, (bool,), where)
    return bool(value)


def _count(obj: Mapping[str, Any], key: str, where: str) -> int:
    value = _optional(obj, key, (int,), where)
    return 0 if value is None else value


def _array(obj: Mapping[str, Any], key: str, where: str, required: bool = False) -> List[Any]:
    if required:
        return _required(obj, key, (list,), where)
    value = _optional(obj, key, (list,), where)
    return [] if value is None else value


def _strings(obj: Mapping[str, Any], key: str, where: str) -> Tuple[str, ...]:
    items = _array(obj, key, where)
    return tuple(_check_type(item, (str,), f"{where}.{key}[{i}]") for i, item in enumerate(items))


def _object(obj: Mapping[str, Any], key: str, where: str) -> Dict[str, Any]:
    value = _optional(obj, key, (dict,), where)
    return {} if value is None else value


def _version(value: Any, where: str) -> Version:
    return Version(_check_type(value, (str,), where))


def _optional_version(obj: Mapping[str, Any], key: str, where: str) -> Optional[Version]:
    value = _optional(obj, key, (str,), where)
    return None if value is None else Version(value)


def _parse_versions(obj: Mapping[str, Any], where: str) -> Versions:
    return Versions(
        stable=_optional_version(obj, "stable", where),
        devel=_optional_version(obj, "devel", where),
        head=_optional(obj, "head", (str,), where),
        bottle=_flag(obj, "bottle", where),
    )


def _parse_url(obj: Mapping[str, Any], where: str) -> SourceUrl:
    return SourceUrl(
        url=_required(obj, "url", (str,), where),
        tag=_optional(obj, "tag", (str,), where),
        revision=_optional(obj, "revision", (int, str), where),
        checksum=_optional(obj, "checksum", (str,), where),
    )


def _parse_bottle(obj: Mapping[str, Any], where: str) -> Bottle:
    files = {}
    for tag, spec in _object(obj, "files", where).items():
        file_where = f"{where}.files.{tag}"
        _check_type(spec, (dict,), file_where)
        files[tag] = BottleFile(
            url=_required(spec, "url", (str,), file_where),
            sha256=_required(spec, "sha256", (str,), file_where),
            cellar=_optional(spec, "cellar", (str,), file_where),
        )
    return Bottle(
        rebuild=_count(obj, "rebuild", where),
        root_url=_required(obj, "root_url", (str,), where),
        cellar=_optional(obj, "cellar", (str,), where),
        prefix=_optional(obj, "prefix", (str,), where),
        files=MappingProxyType(files),
    )


def _parse_option(obj: Any, where: str) -> BrewOption:
    _check_type(obj, (dict,), where)
    return BrewOption(
        option=_required(obj, "option", (str,), where),
        description=_optional(obj, "description", (str,), where) or "",
    )


def _parse_requirement(obj: Any, where: str) -> Requirement:
    _check_type(obj, (dict,), where)
    return Requirement(
        name=_required(obj, "name", (str,), where),
        cask=_optional(obj, "cask", (str,), where),
        download=_optional(obj, "download", (str,), where),
        version=_optional_version(obj, "version", where),
        contexts=_strings(obj, "contexts", where),
    )


def _parse_dependency(obj: Any, where: str) -> Dependency:
    _check_type(obj, (dict,), where)
    return Dependency(
        full_name=_required(obj, "full_name", (str,), where),
        version=_version(_required(obj, "version", (str,), where), f"{where}.version"),
    )


def _parse_installed(obj: Any, where: str) -> Installed:
    _check_type(obj, (dict,), where)
    deps = _array(obj, "runtime_dependencies", where)
    return Installed(
        version=_version(_required(obj, "version", (str,), where), f"{where}.version"),
        used_options=_strings(obj, "used_options", where),
        built_as_bottle=_flag(obj, "built_as_bottle", where),
        poured_from_bottle=_flag(obj, "poured_from_bottle", where),
        runtime_dependencies=tuple(
            _parse_dependency(d, f"{where}.runtime_dependencies[{i}]") for i, d in enumerate(deps)
        ),
        installed_as_dependency=_flag(obj, "installed_as_dependency", where),
        installed_on_request=_flag(obj, "installed_on_request", where),
    )


def _parse_window(obj: Mapping[str, Any], key: str, where: str) -> Optional[Mapping[str, int]]:
    value = _optional(obj, key, (dict,), where)
    if value is None:
        return None
    for name, count in value.items():
        _check_type(count, (int,), f"{where}.{key}.{name}")
    return MappingProxyType(dict(value))


def _parse_analytic(obj: Any, where: str) -> Analytic:
    _check_type(obj, (dict,), where)
    return Analytic(
        d30=_parse_window(obj, "30d", where),
        d90=_parse_window(obj, "90d", where),
        d365=_parse_window(obj, "365d", where),
    )


def _parse_analytics(obj: Mapping[str, Any], where: str) -> Analytics:
    return Analytics(
        install=_parse_analytic(_required(obj, "install", (dict,), where), f"{where}.install"),
        install_on_request=_parse_analytic(
            _required(obj, "install_on_request", (dict,), where), f"{where}.install_on_request"
        ),
        build_error=_parse_analytic(
            _required(obj, "build_error", (dict,), where), f"{where}.build_error"
        ),
    )


def _parse_uses_from_macos(obj: Mapping[str, Any], where: str) -> tuple:
    entries = _array(obj, "uses_from_macos", where)
    return tuple(
        freeze_json(_check_type(e, (str, dict), f"{where}.uses_from_macos[{i}]"))
        for i, e in enumerate(entries)
    )


def parse_package(obj: Any, where: str = "package") -> Package:
    """Map one decoded JSON object onto a ``Package``.

    Raises:
        ParseError: required keys are missing or any key has the wrong type.
    """
    _check_type(obj, (dict,), where)
    name = _required(obj, "name", (str,), where)
    where = f"{where}({name})"

    urls = {
        key: _parse_url(_check_type(spec, (dict,), f"{where}.urls.{key}"), f"{where}.urls.{key}")
        for key, spec in _object(obj, "urls", where).items()
    }
    bottles = {
        key: _parse_bottle(
            _check_type(spec, (dict,), f"{where}.bottle.{key}"), f"{where}.bottle.{key}"
        )
        for key, spec in _object(obj, "bottle", where).items()
    }
    analytics = _optional(obj, "analytics", (dict,), where)
    try:
        raw = freeze_json(obj)
    except RecursionError as exc:
        raise ParseError(f"{where}: nested too deeply", cause=exc) from exc

    return Package(
        name=name,
        full_name=_required(obj, "full_name", (str,), where),
        versions=_parse_versions(_required(obj, "versions", (dict,), where), f"{where}.versions"),
        installed=tuple(
            _parse_installed(item, f"{where}.installed[{i}]")
            for i, item in enumerate(_array(obj, "installed", where, required=True))
        ),
        aliases=_strings(obj, "aliases", where),
        oldname=_optional(obj, "oldname", (str,), where),
        desc=_optional(obj, "desc", (str,), where),
        homepage=_optional(obj, "homepage", (str,), where),
        urls=MappingProxyType(urls),
        revision=_count(obj, "revision", where),
        version_scheme=_count(obj, "version_scheme", where),
        bottle=MappingProxyType(bottles),
        keg_only=_flag(obj, "keg_only", where),
        bottle_disabled=_flag(obj, "bottle_disabled", where),
        options=tuple(
            _parse_option(o, f"{where}.options[{i}]")
            for i, o in enumerate(_array(obj, "options", where))
        ),
        build_dependencies=_strings(obj, "build_dependencies", where),
        dependencies=_strings(obj, "dependencies", where),
        recommended_dependencies=_strings(obj, "recommended_dependencies", where),
        optional_dependencies=_strings(obj, "optional_dependencies", where),
        uses_from_macos=_parse_uses_from_macos(obj, where),
        requirements=tuple(
            _parse_requirement(r, f"{where}.requirements[{i}]")
            for i, r in enumerate(_array(obj, "requirements", where))
        ),
        conflicts_with=_strings(obj, "conflicts_with", where),
        caveats=_optional(obj, "caveats", (str,), where),
        linked_keg=_optional(obj, "linked_keg", (str,), where),
        pinned=_flag(obj, "pinned", where),
        outdated=_flag(obj, "outdated", where),
        analytics=None if analytics is None else _parse_analytics(analytics, f"{where}.analytics"),
        raw=raw,
    )


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise ParseError(f"brew output is not valid JSON: {exc}", cause=exc) from exc


def parse_packages(text: str) -> List[Package]:
    """Parse a JSON array of formulae, preserving order."""
    data = _decode(text)
    if not isinstance(data, list):
        raise ParseError(f"expected a JSON array of packages, got {type(data).__name__}")
    return [parse_package(item, f"package[{i}]") for i, item in enumerate(data)]


def parse_package_json(text: str, name: Optional[str] = None) -> Package:
    """Parse the payload of a single-package lookup.

    Accepts a bare object or the one-element array brew actually prints.

    Raises:
        PackageNotFoundError: the payload is an empty array.
        ParseError: the payload does not describe exactly one package.
    """
    data = _decode(text)
    if isinstance(data, dict):
        return parse_package(data)
    if not isinstance(data, list):
        raise ParseError(f"expected a JSON object or array, got {type(data).__name__}")
    if not data:
        raise PackageNotFoundError(name or "<unknown>")
    if len(data) > 1:
        raise ParseError(f"expected a single package, got {len(data)}")
    return parse_package(data[0])
