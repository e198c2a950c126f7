from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from filestore.config import settings

logger = logging.getLogger(__name__)

_executor: ThreadPoolExecutor | None = None
_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    """Shared pool running the blocking read/write work of async calls."""
    global _executor
    with _lock:
        if _executor is None:
            workers = max(1, settings.FILESTORE_MAX_WORKERS)
            _executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="filestore")
            logger.debug("started background pool with %d worker(s)", workers)
        return _executor


def shutdown(wait: bool = True) -> None:
    global _executor
    with _lock:
        pool, _executor = _executor, None
    if pool is not None:
        pool.shutdown(wait=wait)
        logger.debug("background pool shut down")
