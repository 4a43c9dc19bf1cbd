"""Bounded asynchronous work submission.

Every orchestration step is submitted as a separate unit of work instead
of being awaited recursively, so long delegation chains do not grow the
call stack. At most ``max_workers`` units run at the same time.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from ..utils import get_logger

logger = get_logger(__name__)

ErrorHandler = Callable[[str, Exception], None]


class TaskDispatcher:
    """Runs submitted coroutines with a concurrency limit.

    Failures of a unit are logged and forwarded to the registered error
    handlers; they never affect other units.
    """

    def __init__(self, max_workers: int = 8) -> None:
        """Initialize the dispatcher.

        Args:
            max_workers: Maximum number of units running concurrently
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers
        self._semaphore = asyncio.Semaphore(max_workers)
        self._tasks: set[asyncio.Task[Any]] = set()
        self._error_handlers: list[ErrorHandler] = []
        self._running = 0

    def add_error_handler(self, handler: ErrorHandler) -> None:
        self._error_handlers.append(handler)

    @property
    def pending(self) -> int:
        """Units submitted and not finished yet."""
        return len(self._tasks)

    @property
    def running(self) -> int:
        """Units currently holding a worker slot."""
        return self._running

    def submit(self, factory: Callable[[], Awaitable[Any]], name: Optional[str] = None) -> asyncio.Task[Any]:
        """Schedule a unit of work. Must be called from a running event loop.

        Args:
            factory: Zero-argument callable returning the coroutine to run
            name: Task name used in logs

        Returns:
            The scheduled task
        """
        task = asyncio.get_running_loop().create_task(self._run(factory, name or "unit"), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def join(self) -> None:
        """Wait until no unit is pending, including units submitted meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel pending units and wait for them to finish."""
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, factory: Callable[[], Awaitable[Any]], name: str) -> Any:
        async with self._semaphore:
            self._running += 1
            try:
                return await factory()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Unit of work '{name}' failed: {e}", exc_info=True)
                self._notify(name, e)
                return None
            finally:
                self._running -= 1

    def _notify(self, name: str, error: Exception) -> None:
        for handler in self._error_handlers:
            try:
                handler(name, error)
            except Exception as e:
                logger.error(f"Error handler failed for '{name}': {e}")
