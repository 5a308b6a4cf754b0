"""Install Homebrew itself from the upstream tarball.

Downloads ``Constants.HOMEBREW_TARBALL_URL``, unpacks it into
``<prefix>/homebrew`` with the tarball's top-level directory stripped, then
checks that the resulting ``bin/brew`` runs.
"""
from __future__ import annotations

import logging
import os
import posixpath
import tarfile
import tempfile
from typing import IO, Optional

import requests

from brewpkg.common.logging_utils import Timer, extra_context
from brewpkg.constants import Constants
from brewpkg.errors import ExecutionError
from brewpkg.runner import CommandRunner, SubprocessRunner, check_brew_installed

logger = logging.getLogger(__name__)


def download_tarball(url: str, dest: IO[bytes]) -> int:
    """Stream ``url`` into ``dest`` and return the number of bytes written.

    Raises:
        ExecutionError: the download failed or returned a non-200 status.
    """
    with Timer() as t:
        try:
            res = requests.get(url, stream=True, timeout=Constants.REQUEST_TIMEOUT)
        except requests.Timeout as exc:
            raise ExecutionError(
                f"Download of {url} timed out after {Constants.REQUEST_TIMEOUT} seconds"
            ) from exc
        except requests.RequestException as exc:
            raise ExecutionError(f"Download of {url} failed: {exc}") from exc

        with res:
            if res.status_code != 200:
                raise ExecutionError(f"Download of {url} returned HTTP {res.status_code}")
            written = 0
            for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    dest.write(chunk)
                    written += len(chunk)

    logger.debug(
        "Downloaded %d bytes",
        written,
        extra=extra_context(
            event="http_response",
            component="bootstrap",
            action="GET",
            outcome="success",
            duration_ms=t.duration_ms(),
        ),
    )
    return written


def _stripped_name(name: str, components: int) -> Optional[str]:
    if posixpath.isabs(name):
        raise ExecutionError(f"Refusing to extract absolute path {name!r}")
    parts = [p for p in posixpath.normpath(name).split("/") if p not in ("", ".")]
    if ".." in parts:
        raise ExecutionError(f"Refusing to extract unsafe path {name!r}")
    if len(parts) <= components:
        return None
    stripped = parts[components:]
    return "/".join(stripped)


def _inside(root: str, path: str) -> bool:
    return os.path.commonpath([root, os.path.realpath(path)]) == root


def extract_tarball(archive: IO[bytes], target_dir: str, strip_components: int = 1) -> int:
    """Extract a gzip tarball into ``target_dir``, dropping leading path parts.

    Returns the number of members extracted. Absolute paths and any member or
    link that resolves outside the target, following links already extracted,
    are rejected.
    """
    os.makedirs(target_dir, exist_ok=True)
    root = os.path.realpath(target_dir)
    extract_kwargs = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}
    count = 0
    with tarfile.open(fileobj=archive, mode="r:gz") as tar:
        for member in tar.getmembers():
            new_name = _stripped_name(member.name, strip_components)
            if new_name is None:
                continue
            dest = os.path.join(root, new_name)
            if not _inside(root, dest):
                raise ExecutionError(f"Refusing to extract {member.name!r} outside {target_dir}")
            if member.issym():
                if posixpath.isabs(member.linkname) or not _inside(
                    root, os.path.join(os.path.dirname(dest), member.linkname)
                ):
                    raise ExecutionError(f"Refusing to extract unsafe link {member.name!r}")
            elif member.islnk():
                # hard link targets are archive paths, stripped like member names
                link_target = _stripped_name(member.linkname, strip_components)
                if link_target is None or not _inside(root, os.path.join(root, link_target)):
                    raise ExecutionError(f"Refusing to extract unsafe link {member.name!r}")
                member.linkname = link_target
            member.name = new_name
            try:
                tar.extract(member, root, **extract_kwargs)
            except tarfile.TarError as exc:
                raise ExecutionError(f"Refusing to extract {member.name!r}: {exc}") from exc
            count += 1
    return count


def install_homebrew_at(prefix: str, runner: Optional[CommandRunner] = None) -> str:
    """Install Homebrew under ``<prefix>/homebrew`` and return the brew path.

    ``runner`` is used for the final ``brew --version`` check; by default a
    runner pointing at the freshly unpacked binary.

    Raises:
        ExecutionError: download, extraction or the final check failed.
    """
    target = os.path.join(prefix, Constants.HOMEBREW_DIR_NAME)
    brew_path = os.path.join(target, "bin", Constants.BREW_BINARY)
    logger.info("Installing Homebrew into %s", target)

    with tempfile.TemporaryFile() as archive:
        download_tarball(Constants.HOMEBREW_TARBALL_URL, archive)
        archive.seek(0)
        try:
            extracted = extract_tarball(archive, target)
        except (tarfile.TarError, OSError) as exc:
            raise ExecutionError(f"Failed to unpack Homebrew into {target}: {exc}") from exc
    logger.debug("Extracted %d entries into %s", extracted, target)

    check_brew_installed(runner if runner is not None else SubprocessRunner(brew_path=brew_path))
    return brew_path


def install_homebrew(runner: Optional[CommandRunner] = None) -> str:
    """Install Homebrew under the default prefix."""
    return install_homebrew_at(Constants.HOMEBREW_DEFAULT_PREFIX, runner)
