"""brewpkg command line entry point.

    Returns:
        int: Exit code (see ``ExitCodes``)
"""
import json
import logging
import sys

from brewpkg import brew
from brewpkg.args import parse_args
from brewpkg.common.logging_utils import add_file_handler, configure_logging
from brewpkg.config import load_config
from brewpkg.constants import ExitCodes
from brewpkg.errors import ExecutionError, PackageNotFoundError, ParseError, ToolError
from brewpkg.options import EnvMode, InstallOptions
from brewpkg.runner import SubprocessRunner, brew_version

logger = logging.getLogger(__name__)


def options_from_args(args):
    """Build InstallOptions from parsed install/reinstall arguments."""
    opts = InstallOptions()
    if args.HEAD:
        opts = opts.with_head()
    if args.FORCE:
        opts = opts.with_force()
    if args.ENV:
        opts = opts.with_env(EnvMode(args.ENV))
    if args.BUILD_FROM_SOURCE:
        opts = opts.with_build_from_source()
    if args.IGNORE_DEPENDENCIES:
        opts = opts.with_ignore_dependencies()
    if args.ONLY_DEPENDENCIES:
        opts = opts.with_only_dependencies()
    if args.KEEP_TMP:
        opts = opts.with_keep_tmp()
    if args.BREW_VERBOSE:
        opts = opts.with_verbose()
    if args.BREW_DEBUG:
        opts = opts.with_debug()
    if args.FORMULA_OPTIONS:
        opts = opts.with_formula_option(*args.FORMULA_OPTIONS)
    return opts


def _render(result, names_only):
    if isinstance(result, list):
        if names_only:
            return [pkg.name for pkg in result]
        return [pkg.to_dict() for pkg in result]
    if names_only:
        return result.name
    return result.to_dict()


def export_json(data, path=None):
    """Write data as JSON to path, or to stdout when path is None."""
    if path is None:
        json.dump(data, sys.stdout, indent=2, sort_keys=True)
        sys.stdout.write("\n")
        return
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(data, file, indent=2, sort_keys=True)
    except OSError as e:
        logger.error("Error writing to JSON file: %s", e)
        raise
    logger.info("JSON file saved successfully.")


def dispatch(args, runner):
    """Run the selected action; return data to print, or None."""
    if args.action == "info":
        return brew.package(args.NAME, runner=runner)
    if args.action == "installed":
        return brew.all_installed(runner=runner)
    if args.action == "all":
        return brew.all_packages(runner=runner)
    if args.action == "update":
        brew.update(runner=runner)
        return None
    if args.action == "doctor":
        return {"brew": runner.brew_path, "version": brew_version(runner)}
    if args.action == "install":
        return brew.install(args.NAME, options_from_args(args), runner=runner)
    if args.action == "reinstall":
        return brew.reinstall(args.NAME, options_from_args(args), runner=runner)
    if args.action == "uninstall":
        return brew.uninstall(args.NAME, runner=runner)
    raise ValueError(f"Unknown action {args.action!r}")


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)

    config = load_config(args.CONFIG).with_overrides(
        brew_path=args.BREW_PATH,
        log_level=args.LOG_LEVEL,
    )
    configure_logging(config.log_level)
    if args.LOG_FILE:
        add_file_handler(args.LOG_FILE)
        logger.info("Logging to file: %s", args.LOG_FILE)
    if config.source:
        logger.debug("Using config from %s", config.source)

    runner = SubprocessRunner.from_config(config)

    try:
        result = dispatch(args, runner)
    except ExecutionError as e:
        logger.error("%s", e)
        return ExitCodes.NOT_INSTALLED.value
    except PackageNotFoundError as e:
        logger.error("%s", e)
        return ExitCodes.NOT_FOUND.value
    except ToolError as e:
        logger.error("%s", e)
        return ExitCodes.TOOL_ERROR.value
    except ParseError as e:
        logger.error("Unexpected brew output: %s", e)
        return ExitCodes.PARSE_ERROR.value

    if result is not None:
        data = result if isinstance(result, dict) else _render(result, args.NAMES_ONLY)
        try:
            export_json(data, args.OUTPUT)
        except OSError:
            return ExitCodes.TOOL_ERROR.value
    return ExitCodes.SUCCESS.value


def run():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
