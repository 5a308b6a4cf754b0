"""Tests for installing Homebrew from the upstream tarball."""

import io
import os
import tarfile
from unittest.mock import MagicMock, patch

import pytest
import requests

from brewpkg.bootstrap import (
    download_tarball,
    extract_tarball,
    install_homebrew,
    install_homebrew_at,
)
from brewpkg.errors import ExecutionError


def _tarball(entries, links=()):
    """Build a gzip tarball; entries maps path -> bytes, links is (name, target) symlinks."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
        for name, target in links:
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)
    return buf.getvalue()


def _ordered_tarball(members):
    """Build a gzip tarball from (name, data) files and (name, None, target) symlinks, in order."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, data, *link in members:
            info = tarfile.TarInfo(name)
            if link:
                info.type = tarfile.SYMTYPE
                info.linkname = link[0]
                tar.addfile(info)
            else:
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def _response(body, status=200):
    res = MagicMock()
    res.status_code = status
    res.iter_content.return_value = [body[i:i + 7] for i in range(0, len(body), 7)]
    return res


TARBALL = _tarball({
    "Homebrew-brew-1a2b/bin/brew": b"#!/bin/bash\necho Homebrew 4.1.0\n",
    "Homebrew-brew-1a2b/README.md": b"readme",
})


class TestDownloadTarball:
    """Streaming download."""

    @patch("brewpkg.bootstrap.requests.get")
    def test_writes_all_chunks(self, mock_get):
        mock_get.return_value = _response(b"0123456789abcdef")
        dest = io.BytesIO()
        assert download_tarball("https://example.invalid/t.tgz", dest) == 16
        assert dest.getvalue() == b"0123456789abcdef"
        assert mock_get.call_args[1]["stream"] is True

    @patch("brewpkg.bootstrap.requests.get")
    def test_http_error_status(self, mock_get):
        mock_get.return_value = _response(b"", status=404)
        with pytest.raises(ExecutionError):
            download_tarball("https://example.invalid/t.tgz", io.BytesIO())

    @patch("brewpkg.bootstrap.requests.get", side_effect=requests.Timeout())
    def test_timeout(self, mock_get):
        with pytest.raises(ExecutionError) as exc_info:
            download_tarball("https://example.invalid/t.tgz", io.BytesIO())
        assert "timed out" in str(exc_info.value)

    @patch("brewpkg.bootstrap.requests.get", side_effect=requests.ConnectionError("refused"))
    def test_connection_error(self, mock_get):
        with pytest.raises(ExecutionError):
            download_tarball("https://example.invalid/t.tgz", io.BytesIO())


class TestExtractTarball:
    """Extraction with the leading directory stripped."""

    def test_strips_top_directory(self, tmp_path):
        count = extract_tarball(io.BytesIO(TARBALL), str(tmp_path / "homebrew"))
        assert count == 2
        assert (tmp_path / "homebrew" / "bin" / "brew").read_bytes().startswith(b"#!/bin/bash")
        assert (tmp_path / "homebrew" / "README.md").read_bytes() == b"readme"

    def test_rejects_parent_traversal(self, tmp_path):
        data = _tarball({"top/../../evil": b"x"})
        with pytest.raises(ExecutionError):
            extract_tarball(io.BytesIO(data), str(tmp_path / "out"))
        assert not (tmp_path / "evil").exists()

    def test_rejects_escaping_symlink(self, tmp_path):
        data = _tarball({"top/a": b"x"}, links=[("top/link", "../../etc/passwd")])
        with pytest.raises(ExecutionError):
            extract_tarball(io.BytesIO(data), str(tmp_path / "out"))

    def test_rejects_symlink_chain_escape(self, tmp_path):
        data = _ordered_tarball([
            ("top/d1/l", None, ".."),
            ("top/d2", None, "d1/l/.."),
            ("top/d2/escaped", b"x"),
        ])
        with pytest.raises(ExecutionError):
            extract_tarball(io.BytesIO(data), str(tmp_path / "out"))
        assert not (tmp_path / "escaped").exists()
        assert not (tmp_path / "out" / "d2").exists()

    def test_keeps_internal_symlink(self, tmp_path):
        data = _tarball({"top/bin/real": b"x"}, links=[("top/bin/alias", "real")])
        extract_tarball(io.BytesIO(data), str(tmp_path / "out"))
        assert os.readlink(tmp_path / "out" / "bin" / "alias") == "real"


class TestInstallHomebrew:
    """End-to-end bootstrap with network and brew faked."""

    @patch("brewpkg.bootstrap.requests.get")
    def test_install_at_prefix(self, mock_get, tmp_path, fake_runner):
        mock_get.return_value = _response(TARBALL)
        fake_runner.respond(["--version"], stdout="Homebrew 4.1.0\n")

        brew_path = install_homebrew_at(str(tmp_path), runner=fake_runner)

        assert brew_path == os.path.join(str(tmp_path), "homebrew", "bin", "brew")
        assert os.path.isfile(brew_path)
        assert fake_runner.calls == [["--version"]]

    @patch("brewpkg.bootstrap.requests.get")
    def test_failed_check(self, mock_get, tmp_path, fake_runner):
        mock_get.return_value = _response(TARBALL)
        fake_runner.respond(["--version"], returncode=1, stderr="broken")
        with pytest.raises(ExecutionError):
            install_homebrew_at(str(tmp_path), runner=fake_runner)

    @patch("brewpkg.bootstrap.requests.get")
    def test_corrupt_archive(self, mock_get, tmp_path, fake_runner):
        mock_get.return_value = _response(b"definitely not gzip")
        with pytest.raises(ExecutionError):
            install_homebrew_at(str(tmp_path), runner=fake_runner)
        assert fake_runner.calls == []

    @patch("brewpkg.bootstrap.install_homebrew_at", return_value="/usr/local/homebrew/bin/brew")
    def test_default_prefix(self, mock_install):
        assert install_homebrew() == "/usr/local/homebrew/bin/brew"
        assert mock_install.call_args[0][0] == "/usr/local"
