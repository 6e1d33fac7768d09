"""Argument parsing functionality for dexcount."""

import argparse

from constants import VERSION, OutputFormats


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dexcount",
        description=(
            "dexcount - count the dex methods and fields a dependency "
            "and its transitive dependencies add to an Android app"
        ),
        add_help=True,
    )

    parser.add_argument("dependency",
                        metavar="DEPENDENCY",
                        help="Dependency to count, in group:artifact:version format",
                        type=str)
    parser.add_argument("--dx",
                        dest="DX_PATH",
                        help="Path to the dx (or d8) executable; required if $ANDROID_HOME is not set",
                        action="store",
                        type=str)
    parser.add_argument("--gradle-dir",
                        dest="GRADLE_DIR",
                        help="Use an existing Gradle workspace instead of the managed one",
                        action="store",
                        type=str)
    parser.add_argument("--max-workers",
                        dest="MAX_WORKERS",
                        help="Maximum number of dependencies counted at once (default: all)",
                        action="store",
                        type=int)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=[f.value for f in OutputFormats])

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not show progress on the console.",
                        action="store_true")
    parser.add_argument("--version",
                        action="version",
                        version=f"dexcount version {VERSION}")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
