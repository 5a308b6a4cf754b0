"""Argument parsing functionality for the brewpkg CLI."""

import argparse

from brewpkg.constants import Constants
from brewpkg.options import EnvMode


def _add_install_flags(parser):
    parser.add_argument("NAME",
                        help="Formula name")
    parser.add_argument("--head",
                        dest="HEAD",
                        help="Install the HEAD version (--HEAD)",
                        action="store_true")
    parser.add_argument("--force",
                        dest="FORCE",
                        help="Pass --force to brew",
                        action="store_true")
    parser.add_argument("--env",
                        dest="ENV",
                        help="Build environment (--env=std or --env=super)",
                        action="store",
                        type=str.lower,
                        choices=[m.value for m in EnvMode])
    parser.add_argument("--build-from-source",
                        dest="BUILD_FROM_SOURCE",
                        action="store_true")
    parser.add_argument("--ignore-dependencies",
                        dest="IGNORE_DEPENDENCIES",
                        action="store_true")
    parser.add_argument("--only-dependencies",
                        dest="ONLY_DEPENDENCIES",
                        action="store_true")
    parser.add_argument("--keep-tmp",
                        dest="KEEP_TMP",
                        action="store_true")
    parser.add_argument("--verbose-brew",
                        dest="BREW_VERBOSE",
                        help="Pass --verbose to brew",
                        action="store_true")
    parser.add_argument("--debug-brew",
                        dest="BREW_DEBUG",
                        help="Pass --debug to brew",
                        action="store_true")
    parser.add_argument("-O", "--option",
                        dest="FORMULA_OPTIONS",
                        help="Formula-specific flag, e.g. -O=--with-foo (repeatable)",
                        action="append",
                        type=str,
                        default=[])


def build_parser():
    """Build the top-level parser with one subparser per action."""
    parser = argparse.ArgumentParser(
        prog="brewpkg",
        description="Query and install Homebrew formulae through brew's JSON output",
        add_help=True,
    )

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS,
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--brew-path",
                        dest="BREW_PATH",
                        help="brew executable to run (default: brew on PATH)",
                        action="store",
                        type=str)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Write JSON output to this file instead of stdout",
                        action="store",
                        type=str)
    parser.add_argument("--names-only",
                        dest="NAMES_ONLY",
                        help="Print formula names instead of full records",
                        action="store_true")

    sub = parser.add_subparsers(dest="action", metavar="ACTION")
    sub.required = True

    info = sub.add_parser("info", help="Show one formula")
    info.add_argument("NAME", help="Formula name")

    sub.add_parser("installed", help="List installed formulae")
    sub.add_parser("all", help="List every formula in the catalog")
    sub.add_parser("update", help="Run brew update")
    sub.add_parser("doctor", help="Check that brew can be run")

    install = sub.add_parser("install", help="Install a formula")
    _add_install_flags(install)
    reinstall = sub.add_parser("reinstall", help="Reinstall a formula")
    _add_install_flags(reinstall)

    uninstall = sub.add_parser("uninstall", help="Uninstall a formula")
    uninstall.add_argument("NAME", help="Formula name")

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
