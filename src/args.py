"""Argument parsing functionality for depqueue."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="depqueue",
        description=(
            "depqueue - Resolve dependency requests into one flattened, ordered dependency set"
        ),
        add_help=True,
    )

    parser.add_argument("packages",
                        metavar="ATOM",
                        help="Dependency request, e.g. 'foo >= 1.2'",
                        nargs="*",
                        default=[])
    parser.add_argument("-l", "--load_list",
                        dest="LIST_FROM_FILE",
                        help="Load dependency requests from a file, one per line",
                        action="append", type=str,
                        default=[])
    parser.add_argument("-c", "--catalog",
                        dest="CATALOG",
                        help="Path to package catalog (YAML or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--maxdepth",
                        dest="MAXDEPTH",
                        help="Maximum traversal depth; 0 means unlimited",
                        action="store",
                        type=int)
    parser.add_argument("--static",
                        dest="STATIC",
                        help="Also walk private (static linking) dependencies",
                        action="store_true")
    parser.add_argument("--validate",
                        dest="VALIDATE",
                        help="Only check that the requests resolve; print nothing",
                        action="store_true")
    parser.add_argument("--print-requires",
                        dest="PRINT_REQUIRES",
                        help="Print the flattened public dependencies",
                        action="store_true")
    parser.add_argument("--print-requires-private",
                        dest="PRINT_REQUIRES_PRIVATE",
                        help="Print the flattened private dependencies",
                        action="store_true")

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (text or json). If not specified, inferred from --output extension; defaults to text.",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_FORMATS)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
