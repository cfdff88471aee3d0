"""Argument parsing functionality for yarn-dedupe."""

import argparse

from constants import Constants


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="yarn-dedupe",
        description="Deduplicate entries of a yarn.lock file",
        usage="%(prog)s [options] [yarn.lock path (default: yarn.lock)]",
        add_help=True,
    )

    parser.add_argument("LOCKFILE",
                        help="Path to the lockfile (default: yarn.lock)",
                        nargs="?",
                        default=None)
    parser.add_argument("-s", "--strategy",
                        dest="STRATEGY",
                        help=("deduplication strategy. Valid values: "
                              + ", ".join(Constants.STRATEGIES)
                              + f'. Default is "{Constants.DEFAULT_STRATEGY}"'),
                        action="store",
                        type=str,
                        default=None)
    parser.add_argument("-l", "--list",
                        dest="LIST",
                        help="do not change yarn.lock, just output the diagnosis",
                        action="store_true")
    parser.add_argument("-f", "--fail",
                        dest="FAIL",
                        help="if there are duplicates in yarn.lock, terminate the script with exit status 1",
                        action="store_true")

    parser.add_argument("--scopes",
                        dest="SCOPES",
                        help="a list of scopes to deduplicate. Defaults to all packages.",
                        nargs="+",
                        metavar="SCOPE")
    parser.add_argument("--packages",
                        dest="PACKAGES",
                        help="a list of packages to deduplicate. Defaults to all packages.",
                        nargs="+",
                        metavar="PACKAGE")
    parser.add_argument("--exclude",
                        dest="EXCLUDE",
                        help="a list of packages not to deduplicate.",
                        nargs="+",
                        metavar="PACKAGE")
    parser.add_argument("--exclude-scopes",
                        dest="EXCLUDE_SCOPES",
                        help="a list of scopes not to deduplicate.",
                        nargs="+",
                        metavar="SCOPE")
    parser.add_argument("--print",
                        dest="PRINT",
                        help="instead of saving the deduplicated yarn.lock, print the result in stdout",
                        action="store_true")
    parser.add_argument("--includePrerelease", "--include-prerelease",
                        dest="INCLUDE_PRERELEASE",
                        help="Include prereleases in version comparisons, e.g. ^1.0.0 will be satisfied by 1.0.1-alpha",
                        action="store_true",
                        default=None)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
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
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Only log errors.",
                        action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
