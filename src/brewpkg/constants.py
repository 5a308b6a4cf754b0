"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    TOOL_ERROR = 1
    NOT_INSTALLED = 3
    PARSE_ERROR = 4
    NOT_FOUND = 5


class Subcommands(Enum):
    """brew subcommands invoked by the library.

    Args:
        Enum (string): brew subcommands.
    """

    UPDATE = "update"
    INFO = "info"
    INSTALL = "install"
    REINSTALL = "reinstall"
    UNINSTALL = "uninstall"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    BREW_BINARY = "brew"
    JSON_FLAG = "--json=v1"
    ANALYTICS_FLAG = "--analytics"
    INSTALLED_FLAG = "--installed"
    ALL_FLAG = "--all"
    VERSION_FLAG = "--version"

    ENV_NO_AUTO_UPDATE = "HOMEBREW_NO_AUTO_UPDATE"
    ENV_CONFIG = "BREWPKG_CONFIG"
    ENV_BREW_PATH = "BREWPKG_BREW_PATH"
    ENV_LOG_LEVEL = "BREWPKG_LOG_LEVEL"

    DEFAULT_CONFIG_PATHS = [
        "~/.config/brewpkg/config.yml",
        "~/.config/brewpkg/config.yaml",
        "~/.config/brewpkg/config.json",
    ]

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

    HOMEBREW_TARBALL_URL = "https://github.com/Homebrew/brew/tarball/master"
    HOMEBREW_DEFAULT_PREFIX = "/usr/local"
    HOMEBREW_DIR_NAME = "homebrew"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for HTTP requests
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
