"""
The main pyupdeps package.
"""
import logging
import sys

# Default format for logs
LOG_FORMAT = '%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

__version__ = "0.1.0"

def setup_logging(verbose: int = 0) -> None:
    """Setup logging with appropriate level based on verbosity.

    Args:
        verbose: Verbosity level
            0 = INFO and above (shows package manager and github calls)
            1 = same as 0
            2 = DEBUG and above, package manager output included
    """
    if verbose >= 2:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove any existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logger.addHandler(handler)
