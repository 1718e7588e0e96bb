"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    RESOLUTION_ERROR = 2
    INTERNAL_ERROR = 3


class OutputFormats(Enum):
    """Output formats supported by the program.

    Args:
        Enum (string): Output formats supported by the program.
    """

    TEXT = "text"
    JSON = "json"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    WORLD_ID = "virtual:world"
    WORLD_REALNAME = "virtual world package"
    UNLIMITED_DEPTH = -1
    SUPPORTED_FORMATS = [
        OutputFormats.TEXT.value,
        OutputFormats.JSON.value,
    ]
    CATALOG_FILE = "depqueue-catalog.yml"
    CONFIG_SECTION = "depqueue"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    FILE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

    # Environment overrides
    ENV_LOG_LEVEL = "DEPQUEUE_LOG_LEVEL"
    ENV_CATALOG = "DEPQUEUE_CATALOG"
    ENV_MAXDEPTH = "DEPQUEUE_MAXDEPTH"
    ENV_STATIC = "DEPQUEUE_STATIC"
