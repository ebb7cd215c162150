"""Worker pool that keeps ledger calls off the event loop.

The pool is created on first use and can be shut down when the app stops; the
next call after a shutdown starts a fresh pool.
"""

from __future__ import annotations

import asyncio
import os
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any

__all__ = ["THREAD_PREFIX", "run_blocking", "shutdown_executor"]

THREAD_PREFIX = "league-round"

# the manager lock serialises writers, so a few threads are enough
_MAX_WORKERS = max(1, min(8, os.cpu_count() or 1))

_pool: ThreadPoolExecutor | None = None
_pool_lock = threading.Lock()


def _executor() -> ThreadPoolExecutor:
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = ThreadPoolExecutor(max_workers=_MAX_WORKERS, thread_name_prefix=THREAD_PREFIX)
        return _pool


def shutdown_executor(*, wait: bool = True) -> None:
    global _pool
    with _pool_lock:
        pool, _pool = _pool, None
    if pool is not None:
        pool.shutdown(wait=wait)


async def run_blocking(func: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_executor(), partial(func, *args, **kwargs))
