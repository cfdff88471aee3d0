"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    DUPLICATES_FOUND = 1
    FILE_ERROR = 2
    CONFIG_ERROR = 3
    LOCKFILE_ERROR = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    DEFAULT_LOCKFILE = "yarn.lock"
    DEFAULT_STRATEGY = "fewerHighest"
    STRATEGIES = ["highest", "fewer", "fewerHighest", "mostCommon"]
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    ENV_LOG_LEVEL = "YARN_DEDUPE_LOG_LEVEL"
    CONFIG_SECTION = "dedupe"

    FAIL_MESSAGE = "\nFound duplicated entries. Run yarn-dedupe to deduplicate them."
    NO_DUPLICATES_LIST = "No duplicates found!"
    NO_DUPLICATES_FIX = "No duplicates found, yarn.lock identical"
    DUPLICATES_FIXED = "Found duplicates, yarn.lock changed"

    # Tree-based lockfile dialect marker; handled by a different grammar.
    BERRY_METADATA_KEY = "__metadata"
