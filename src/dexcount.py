"""dexcount - For counting methods. For Dex files.

Counts the dex methods and fields a dependency and all of its transitive
dependencies would add to an Android application.

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from cli_config import apply_cli_overrides, load_config, setup_logging
from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants, ExitCodes, OutputFormats
from counting.errors import (
    CountFailedError,
    DependencyFormatError,
    ProvisioningError,
    ResolutionError,
    ToolNotFoundError,
)
from counting.counters import DexToolCounter, locate_dex_tool
from counting.models import Dependency
from counting.resolvers import GradleResolver, ensure_gradle_workspace
from counting.service import CountingService
from report import export_csv, export_json, print_report
from ui.console import ConsoleProgress, NullProgress

logger = logging.getLogger(__name__)


def build_service(max_workers=None):
    """Create a CountingService that combines the Gradle resolver and the dex tool counter.

    Raises:
        ToolNotFoundError: If no dex tool can be located.
        ProvisioningError: If the Gradle workspace cannot be set up.
    """
    tool = locate_dex_tool(Constants.DX_PATH)
    workspace = ensure_gradle_workspace()
    return CountingService(
        GradleResolver(workspace),
        DexToolCounter(tool),
        max_workers=max_workers,
    )


def output_format(args):
    """Pick the export format from --format or the --output extension; json by default."""
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT.lower()
    if args.OUTPUT.lower().endswith(".csv"):
        return OutputFormats.CSV.value
    return OutputFormats.JSON.value


def write_output(args, root):
    """Export the counted tree when --output was given.

    Returns:
        bool: False if the file could not be written.
    """
    if not getattr(args, "OUTPUT", None):
        return True
    try:
        if output_format(args) == OutputFormats.CSV.value:
            export_csv(root, args.OUTPUT)
        else:
            export_json(root, args.OUTPUT)
    except OSError as e:
        logging.error("Output file couldn't be written to disk: %s", e)
        return False
    return True


def run(args, service=None, stream=None):
    """Run one count for parsed arguments.

    Args:
        args: Parsed CLI arguments.
        service (CountingService, optional): Injected service; built from
            the configured tools when omitted.
        stream: Report output stream. Defaults to stdout.

    Returns:
        int: Exit code
    """
    try:
        dependency = Dependency.parse(args.dependency)
    except DependencyFormatError as e:
        logging.error("%s", e)
        return ExitCodes.USAGE_ERROR.value

    if Constants.MAX_WORKERS is not None and Constants.MAX_WORKERS < 1:
        logging.error("--max-workers must be at least 1")
        return ExitCodes.USAGE_ERROR.value

    if service is None:
        try:
            service = build_service(Constants.MAX_WORKERS)
        except ToolNotFoundError as e:
            logging.error("%s", e)
            return ExitCodes.TOOL_NOT_FOUND.value
        except ProvisioningError as e:
            logging.error("Unable to set up the Gradle workspace: %s", e)
            return ExitCodes.CONNECTION_ERROR.value

    observer = NullProgress() if getattr(args, "QUIET", False) else ConsoleProgress()
    try:
        root = service.run(dependency, observer)
    except ResolutionError as e:
        logging.error("%s", e)
        return ExitCodes.RESOLUTION_ERROR.value
    except CountFailedError as e:
        for dep, err in e.failures.items():
            logging.error("Error checking %s: %s", dep, err)
        print_report(e.root, stream)
        write_output(args, e.root)
        return ExitCodes.COUNTING_ERROR.value

    print_report(root, stream)
    if not write_output(args, root):
        return ExitCodes.FILE_ERROR.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    setup_logging(args)
    load_config(args)
    apply_cli_overrides(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main", target=args.dependency)
        )

    code = run(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome=str(code))
        )
    sys.exit(code)


if __name__ == "__main__":
    main()
