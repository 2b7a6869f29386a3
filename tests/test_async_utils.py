"""
Tests for async utilities - Tests for async task management and subprocess execution
"""

import os
import sys
import asyncio
import threading
import time
import subprocess
import pytest

# Add parent directory to path to import modules
parent_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

from utils.async_utils import (
    run_subprocess_async,
    run_in_executor,
    ImprovedAsyncTaskManager,
)
from utils.async_base import AsyncResult, ProcessError


class TestRunSubprocessAsync:
    """Test cases for run_subprocess_async"""

    @pytest.mark.asyncio
    async def test_run_simple_command(self):
        """Test running a simple command"""
        result = await run_subprocess_async([sys.executable, "-c", "print('hello')"])

        assert result.returncode == 0
        assert "hello" in result.stdout

    @pytest.mark.asyncio
    async def test_merged_output(self):
        """stderr can be folded into stdout"""
        result = await run_subprocess_async(
            [sys.executable, "-c", "import sys; sys.stderr.write('err')"],
            capture_output=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )

        assert result.stdout == "err"

    @pytest.mark.asyncio
    async def test_timeout(self):
        with pytest.raises(subprocess.TimeoutExpired):
            await run_subprocess_async(
                [sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2
            )


class TestRunInExecutor:
    """Test cases for run_in_executor"""

    @pytest.mark.asyncio
    async def test_runs_in_worker_thread(self):
        main_thread = threading.get_ident()

        worker_thread = await run_in_executor(threading.get_ident)

        assert worker_thread != main_thread

    @pytest.mark.asyncio
    async def test_passes_arguments(self):
        assert await run_in_executor(pow, 2, 5) == 32

    def test_requires_running_loop(self):
        coro = run_in_executor(time.time)
        with pytest.raises(RuntimeError, match="No async event loop"):
            coro.send(None)


class TestImprovedAsyncTaskManager:
    """Test cases for ImprovedAsyncTaskManager"""

    def test_run_task_sync(self, async_task_manager):
        async def add(a, b):
            await asyncio.sleep(0.01)
            return a + b

        assert async_task_manager.run_task_sync(add(2, 3), timeout=5) == 5

    def test_callback_receives_error(self, async_task_manager):
        received = []
        done = threading.Event()

        async def fail():
            raise ValueError("bad")

        def callback(result, error):
            received.append((result, error))
            done.set()

        async_task_manager.run_task(fail(), callback=callback)

        assert done.wait(timeout=5)
        result, error = received[0]
        assert result is None
        assert isinstance(error, ValueError)

    def test_tasks_share_one_loop(self, async_task_manager):
        async def current_loop():
            return asyncio.get_running_loop()

        first = async_task_manager.run_task_sync(current_loop(), timeout=5)
        second = async_task_manager.run_task_sync(current_loop(), timeout=5)

        assert first is second is async_task_manager.loop

    def test_cancel_all_tasks(self, async_task_manager):
        async def forever():
            await asyncio.sleep(60)

        future = async_task_manager.run_task(forever())
        async_task_manager.cancel_all_tasks(timeout=2)

        assert future.cancelled()

    def test_no_tasks_after_shutdown(self):
        manager = ImprovedAsyncTaskManager()
        manager.setup_event_loop()
        manager.shutdown(timeout=2)

        async def noop():
            return None

        with pytest.raises(RuntimeError, match="shutting down"):
            manager.run_task(noop())


class TestAsyncResult:
    """Test cases for AsyncResult"""

    def test_success_to_dict(self):
        result = AsyncResult.success_result({"document": "web.logs"}, message="ok")

        assert result.to_dict() == {
            "success": True,
            "message": "ok",
            "data": {"document": "web.logs"},
            "error": None,
            "metadata": {},
        }

    def test_error_to_dict(self):
        result = AsyncResult.error_result(ProcessError("failed", return_code=2))

        data = result.to_dict()
        assert result.is_error
        assert data["message"] == "failed"
        assert data["error"]["error_code"] == "PROCESS_ERROR"
        assert data["error"]["details"] == {"return_code": 2}
