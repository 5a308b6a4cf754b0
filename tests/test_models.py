"""Tests for record helpers that need no brew call."""

import pytest
from packaging.version import Version as PkgVersion

from brewpkg.models import Version
from brewpkg.parser import parse_package

from conftest import INSTALLED_KEG, make_formula


class TestVersion:
    """Version wrapper."""

    def test_parse_plain(self):
        assert Version("0.10.1").parse() == PkgVersion("0.10.1")

    def test_parse_strips_formula_revision(self):
        assert Version("1.2.3_2").parse() == PkgVersion("1.2.3")

    def test_parse_comparable(self):
        assert Version("0.10.1").parse() >= PkgVersion("0.9")

    def test_unparseable_returns_none(self):
        assert Version("HEAD-1a2b3c").parse() is None

    def test_original_kept(self):
        v = Version("2023c")
        assert v.original == "2023c"
        assert str(v) == "2023c"


class TestPackagePredicates:
    """is_installed and install_options."""

    def test_not_installed(self):
        pkg = parse_package(make_formula())
        assert pkg.is_installed() is False
        assert pkg.install_options() is None
        assert pkg.installed_versions() == []

    def test_installed(self):
        pkg = parse_package(make_formula(installed=[INSTALLED_KEG]))
        assert pkg.is_installed() is True
        assert pkg.install_options() == ("--with-git",)
        assert pkg.installed_versions() == [Version("0.10.1_1")]

    def test_equality_ignores_raw(self):
        a = parse_package(make_formula())
        data = make_formula()
        data["license"] = "Apache-2.0"
        b = parse_package(data)
        assert a == b


class TestPackageImmutability:
    """Frozen records stay frozen all the way down."""

    def test_hashable_and_consistent_with_equality(self):
        a = parse_package(make_formula(installed=[INSTALLED_KEG]))
        b = parse_package(make_formula(installed=[INSTALLED_KEG]))
        assert hash(a) == hash(b)
        assert len({a, b}) == 1
        assert hash(a.bottle["stable"]) == hash(b.bottle["stable"])
        assert hash(a.analytics) == hash(b.analytics)

    def test_mappings_are_read_only(self):
        pkg = parse_package(make_formula())
        with pytest.raises(TypeError):
            pkg.urls["stable"] = None
        with pytest.raises(TypeError):
            pkg.bottle["stable"].files["arm64_monterey"] = None
        with pytest.raises(TypeError):
            pkg.analytics.install.d30["exa"] = 0
        with pytest.raises(TypeError):
            pkg.raw["versions"]["stable"] = "9.9"

    def test_to_dict_is_a_mutable_copy(self):
        data = make_formula()
        pkg = parse_package(data)
        out = pkg.to_dict()
        assert out == data
        out["versions"]["stable"] = "9.9"
        out["aliases"].append("x")
        assert pkg.raw["versions"]["stable"] == data["versions"]["stable"]
        assert pkg.to_dict() == data

    def test_source_dict_changes_do_not_leak(self):
        data = make_formula()
        pkg = parse_package(data)
        data["versions"]["stable"] = "9.9"
        assert pkg.raw["versions"]["stable"] != "9.9"
