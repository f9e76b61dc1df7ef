"""Process-wide worker pool shared by the parallel strategies."""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)

_pool: ThreadPoolExecutor | None = None
_pool_lock = threading.Lock()


def default_workers() -> int:
    return os.cpu_count() or 4


def get_pool() -> ThreadPoolExecutor:
    """Return the shared pool, creating it on first use."""
    global _pool
    with _pool_lock:
        if _pool is None:
            workers = default_workers()
            _pool = ThreadPoolExecutor(
                max_workers=workers, thread_name_prefix="tile-mosaic",
            )
            logger.debug("Started worker pool with %d threads", workers)
        return _pool


def shutdown_pool() -> None:
    """Stop the shared pool; the next :func:`get_pool` starts a fresh one."""
    global _pool
    with _pool_lock:
        if _pool is not None:
            _pool.shutdown(wait=True)
            _pool = None
