"""Shared fixtures: canned brew payloads and a fake CommandRunner."""

import copy
import json

import pytest

from brewpkg import runner as runner_mod
from brewpkg.runner import ProcessResult


EXA = {
    "name": "exa",
    "full_name": "exa",
    "tap": "homebrew/core",
    "oldname": None,
    "aliases": [],
    "desc": "Modern replacement for 'ls'",
    "license": "MIT",
    "homepage": "https://the.exa.website",
    "versions": {"stable": "0.10.1", "head": "HEAD", "bottle": True},
    "urls": {
        "stable": {
            "url": "https://github.com/ogham/exa/archive/v0.10.1.tar.gz",
            "tag": None,
            "revision": None,
            "checksum": "ff0fa0bfc4edef8bdbbb3cabe6fdbd5481a71abbbcc2159f402dea515353ae7c",
        }
    },
    "revision": 0,
    "version_scheme": 0,
    "bottle": {
        "stable": {
            "rebuild": 0,
            "root_url": "https://ghcr.io/v2/homebrew/core",
            "files": {
                "arm64_monterey": {
                    "cellar": ":any",
                    "url": "https://ghcr.io/v2/homebrew/core/exa/blobs/sha256:abc",
                    "sha256": "abc",
                }
            },
        }
    },
    "keg_only": False,
    "bottle_disabled": False,
    "options": [],
    "build_dependencies": ["pandoc", "rust"],
    "dependencies": ["libgit2"],
    "recommended_dependencies": [],
    "optional_dependencies": [],
    "uses_from_macos": ["zlib", {"ruby": "build"}],
    "requirements": [],
    "conflicts_with": [],
    "caveats": None,
    "installed": [],
    "linked_keg": None,
    "pinned": False,
    "outdated": False,
    "analytics": {
        "install": {"30d": {"exa": 3456}, "90d": {"exa": 10000}, "365d": {"exa": 40000}},
        "install_on_request": {"30d": {"exa": 3400}, "90d": {"exa": 9900}, "365d": {"exa": 39000}},
        "build_error": {"30d": {"exa": 0}},
    },
}

INSTALLED_KEG = {
    "version": "0.10.1_1",
    "used_options": ["--with-git"],
    "built_as_bottle": True,
    "poured_from_bottle": True,
    "runtime_dependencies": [{"full_name": "libgit2", "version": "1.5.0"}],
    "installed_as_dependency": False,
    "installed_on_request": True,
}


def make_formula(name="exa", **overrides):
    """Return a fresh formula JSON object based on EXA."""
    data = copy.deepcopy(EXA)
    data["name"] = name
    data["full_name"] = name
    data.update(overrides)
    return data


class FakeRunner:
    """CommandRunner returning canned results keyed by argument tuple."""

    brew_path = "/fake/bin/brew"

    def __init__(self):
        self.calls = []
        self._responses = {}
        self._default = None

    def respond(self, args, stdout="", stderr="", returncode=0):
        self._responses[tuple(args)] = ProcessResult(
            args=list(args), returncode=returncode, stdout=stdout, stderr=stderr
        )
        return self

    def respond_json(self, args, payload):
        return self.respond(args, stdout=json.dumps(payload))

    def default(self, stdout="", stderr="", returncode=0):
        self._default = (stdout, stderr, returncode)
        return self

    def run(self, args):
        args = list(args)
        self.calls.append(args)
        result = self._responses.get(tuple(args))
        if result is not None:
            return result
        if self._default is not None:
            stdout, stderr, code = self._default
            return ProcessResult(args=args, returncode=code, stdout=stdout, stderr=stderr)
        raise AssertionError(f"unexpected brew call: {args}")


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture(autouse=True)
def _isolated_default_runner(monkeypatch):
    """Never let a test fall through to a real brew binary."""
    monkeypatch.setattr(runner_mod, "_default_runner", None)
    monkeypatch.delenv("BREWPKG_CONFIG", raising=False)
    monkeypatch.delenv("BREWPKG_BREW_PATH", raising=False)
    monkeypatch.delenv("BREWPKG_LOG_LEVEL", raising=False)
    yield
