from __future__ import annotations

import asyncio
import threading

import pytest
from fastapi.testclient import TestClient

from pokerleague.features.round import concurrency
from pokerleague.web.app import create_app


def _thread_name() -> str:
    return threading.current_thread().name


def test_run_blocking_uses_worker_pool() -> None:
    name = asyncio.run(concurrency.run_blocking(_thread_name))

    assert name.startswith(concurrency.THREAD_PREFIX)


def test_run_blocking_forwards_arguments_and_errors() -> None:
    def combine(a: int, b: int, *, scale: int = 1) -> int:
        if scale < 0:
            raise ValueError("negative scale")
        return (a + b) * scale

    assert asyncio.run(concurrency.run_blocking(combine, 2, 3, scale=4)) == 20
    with pytest.raises(ValueError, match="negative scale"):
        asyncio.run(concurrency.run_blocking(combine, 1, 1, scale=-1))


def test_pool_restarts_after_shutdown() -> None:
    concurrency.shutdown_executor()
    concurrency.shutdown_executor()

    assert asyncio.run(concurrency.run_blocking(_thread_name)).startswith(concurrency.THREAD_PREFIX)


def test_app_shutdown_releases_pool() -> None:
    with TestClient(create_app()) as client:
        assert client.get("/api/v1/players").status_code == 200
        assert concurrency._pool is not None

    assert concurrency._pool is None
    assert asyncio.run(concurrency.run_blocking(_thread_name)).startswith(concurrency.THREAD_PREFIX)
