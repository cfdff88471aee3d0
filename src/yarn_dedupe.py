"""yarn-dedupe - collapse compatible yarn.lock entries onto shared versions

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from cli_config import build_options, load_config_file
from common.errors import InvalidConfiguration, MalformedLockfile, UnparsableDescriptor, UnparsableVersion
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from dedupe import fix_duplicates, list_duplicates


def _setup_logging(args):
    """Configure logging based on CLI arguments."""
    configure_logging(level=args.LOG_LEVEL, quiet=args.QUIET)
    if getattr(args, "LOG_FILE", None):
        add_file_handler(args.LOG_FILE)


def read_lockfile(file_name):
    """Reads the lockfile text.

    Args:
        file_name (str): Path of the lockfile.

    Returns:
        str: File contents, line endings untouched.
    """
    try:
        with open(file_name, encoding="utf-8", newline="") as file:
            return file.read()
    except FileNotFoundError as e:
        logging.error("File not found: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except IOError as e:
        logging.error("IO error: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def write_lockfile(file_name, text):
    """Writes the lockfile text without translating line endings."""
    try:
        with open(file_name, "w", encoding="utf-8", newline="") as file:
            file.write(text)
    except IOError as e:
        logging.error("Lockfile couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def run_list(lock_text, options, fail):
    """List mode: print diagnostics, return the exit code."""
    duplicates = list_duplicates(lock_text, options)
    for line in duplicates:
        print(line)
    if fail and duplicates:
        print(Constants.FAIL_MESSAGE, file=sys.stderr)
        return ExitCodes.DUPLICATES_FOUND.value
    if not duplicates:
        print(Constants.NO_DUPLICATES_LIST)
    return ExitCodes.SUCCESS.value


def run_fix(file_name, lock_text, options, fail, print_only):
    """Fix mode: write or print the deduplicated lockfile, return the exit code."""
    deduped = fix_duplicates(lock_text, options)

    if print_only:
        sys.stdout.write(deduped)
    elif deduped == lock_text:
        print(Constants.NO_DUPLICATES_FIX)
    else:
        print(Constants.DUPLICATES_FIXED)
        write_lockfile(file_name, deduped)
        logging.info("Lockfile written to %s", file_name)

    if fail and deduped != lock_text:
        print(Constants.FAIL_MESSAGE, file=sys.stderr)
        return ExitCodes.DUPLICATES_FOUND.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main"),
        )

    try:
        options = build_options(args, load_config_file(args.CONFIG))
    except InvalidConfiguration as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    file_name = args.LOCKFILE or Constants.DEFAULT_LOCKFILE
    lock_text = read_lockfile(file_name)
    logging.debug("Read %d bytes from %s", len(lock_text), file_name)

    try:
        if args.LIST:
            code = run_list(lock_text, options, args.FAIL)
        else:
            code = run_fix(file_name, lock_text, options, args.FAIL, args.PRINT)
    except (MalformedLockfile, UnparsableDescriptor, UnparsableVersion) as e:
        logging.error("Cannot process %s: %s", file_name, e)
        sys.exit(ExitCodes.LOCKFILE_ERROR.value)

    sys.exit(code)


if __name__ == "__main__":
    main()
