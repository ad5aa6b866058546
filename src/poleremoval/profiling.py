"""Stage timing helpers."""

import logging
import time
from contextlib import contextmanager


@contextmanager
def timed_stage(name: str, logger: logging.Logger):
    """Log the wall-clock duration of a pipeline stage at DEBUG level.

    The duration is logged even if the stage raises.

    Args:
        name: Stage name (e.g., "alignment").
        logger: Logger of the calling module.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("Stage %s took %.3f s", name, time.perf_counter() - start)
