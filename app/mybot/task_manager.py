# -*- coding: utf-8 -*-
"""
Centralized task management system for non-blocking bot operations
"""
import asyncio
import functools
from typing import Set, Callable, Coroutine, Any
from contextlib import suppress

from loguru import logger


class TaskRegistry:
    """Keeps strong references to background tasks and logs their failures."""

    def __init__(self, name: str = "background"):
        self._name = name
        self._tasks: Set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        # Add task to set to prevent garbage collection
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        if err := task.exception():
            logger.opt(exception=err).error(f"Background task {task.get_name()} failed: {err}")

    async def wait_all(self, timeout: float = 30.0) -> bool:
        """
        Wait for all active tasks to complete, with timeout.
        Useful for graceful shutdown.

        Returns:
            True if all tasks completed, False if timeout occurred
        """
        if not self._tasks:
            return True

        logger.info(f"Waiting for {len(self._tasks)} active {self._name} tasks to complete...")

        try:
            await asyncio.wait_for(
                asyncio.gather(*self._tasks, return_exceptions=True), timeout=timeout
            )
            return True
        except asyncio.TimeoutError:
            logger.warning(
                f"Timeout waiting for tasks to complete, {len(self._tasks)} tasks still running"
            )
            return False

    def cancel_all(self) -> None:
        """Cancel all active tasks. Use with caution."""
        if not self._tasks:
            return

        logger.warning(f"Cancelling {len(self._tasks)} active {self._name} tasks...")

        for task in self._tasks.copy():
            if not task.done():
                task.cancel()

        self._tasks.clear()


# Global task registry for all bot handlers
handler_tasks = TaskRegistry("handler")


def non_blocking_handler(handler_name: str = "unknown"):
    """
    Decorator to make any bot handler non-blocking by running it as a background task.

    Args:
        handler_name: Name of the handler for logging purposes

    Usage:
        @non_blocking_handler("handle_message")
        async def handle_message(update, context):
            # This will run in background without blocking other handlers
            pass
    """

    def decorator(handler_func: Callable):
        @functools.wraps(handler_func)
        async def wrapper(update, context):
            handler_tasks.spawn(
                _execute_handler_task(handler_func, update, context, handler_name),
                name=handler_name,
            )
            logger.debug(
                f"Started non-blocking {handler_name} task (Active tasks: {len(handler_tasks)})"
            )

        return wrapper

    return decorator


async def _execute_handler_task(handler_func: Callable, update, context, handler_name: str):
    """Execute handler function as a background task"""
    try:
        await handler_func(update, context)
        logger.debug(f"Completed {handler_name} task")

    except Exception as e:
        logger.exception(f"Error in {handler_name} handler: {e}")

        # Try to send error message to user if possible
        with suppress(Exception):
            if update and update.effective_chat:
                await context.bot.send_message(
                    chat_id=update.effective_chat.id,
                    text="❌ 处理请求时发生错误，请稍后重试",
                    reply_to_message_id=(
                        update.effective_message.message_id if update.effective_message else None
                    ),
                )
