"""Tests for async utilities used by the Celery tasks."""

import asyncio
import pytest

from src.shared.async_utils import (
    AsyncExecutionError,
    safe_async_run,
    is_event_loop_running,
)


async def _answer(value=42, delay=0):
    if delay:
        await asyncio.sleep(delay)
    return value


async def _explode():
    raise ValueError("broken coroutine")


class TestEventLoopDetection:

    def test_is_event_loop_running_outside_loop(self):
        assert is_event_loop_running() is False

    @pytest.mark.asyncio
    async def test_is_event_loop_running_inside_loop(self):
        assert is_event_loop_running() is True


class TestSafeAsyncRun:

    def test_runs_without_running_loop(self):
        assert safe_async_run(_answer()) == 42

    @pytest.mark.asyncio
    async def test_runs_inside_running_loop(self):
        # Called from async code, the coroutine is moved to a worker thread
        assert safe_async_run(_answer(7)) == 7

    def test_failure_returns_fallback(self):
        assert safe_async_run(_explode(), fallback_result={"status": "failed"}) == {"status": "failed"}

    def test_failure_without_fallback_raises(self):
        with pytest.raises(AsyncExecutionError) as exc_info:
            safe_async_run(_explode())

        assert isinstance(exc_info.value.original_error, ValueError)

    def test_timeout_returns_fallback(self):
        result = safe_async_run(_answer(delay=1), timeout=0.05, fallback_result="timed out")

        assert result == "timed out"

    @pytest.mark.asyncio
    async def test_timeout_inside_running_loop_returns_fallback(self):
        result = safe_async_run(_answer(delay=1), timeout=0.05, fallback_result="timed out")

        assert result == "timed out"
