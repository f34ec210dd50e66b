# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 The qaympy contributors
# This file is part of qaympy, distributed under the terms of the GNU GPLv3.
"""
Several directory lookups can be sent at once, e.g. the reviews, images and
votes of a restaurant. This module provides a small task runner that sends
such requests in parallel on a thread pool, plus the log entry recorded for
every response received.
"""

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, ParamSpec, TypeVar

import arrow

from qaympy.logger import logger


@dataclass
class RequestLogEntry:
    """
    Log entry for a sent request.
    """

    status_code: int
    """The HTTP status code of the response."""

    timestamp: arrow.Arrow
    """The timestamp of when the response was received."""

    url: str | None
    """The URL of the request."""


P = ParamSpec("P")
R = TypeVar("R")


class TaskRunner:
    """
    Manage and execute asynchronous tasks using a thread pool executor with a specified number of worker threads.
    """

    def __init__(self, max_workers: int) -> None:
        self.max_workers: int = max_workers
        """The maximum number of worker threads to use in the thread pool."""

        self.loop: asyncio.AbstractEventLoop = asyncio.new_event_loop()
        """The event loop used to manage asynchronous tasks."""

        self.tasks: set[asyncio.Task[Any]] = set()
        """A set of scheduled asyncio tasks."""

        self.loop.set_default_executor(ThreadPoolExecutor(max_workers=self.max_workers))

    def schedule(
        self,
        func: Callable[P, R],
        *args: P.args,
        _task_name: str | None = None,  # type: ignore
        **kwargs: P.kwargs,
    ) -> None:
        """
        Schedule a function to be run in the thread pool.

        Parameters
        ----------
        func
            The function to be executed.
        _task_name
            Optional name for the task. If not provided, a name will be
            generated, similar to `task-xxxxxxxxxx`.
        *args
            Positional arguments to pass to the function.
        **kwargs
            Keyword arguments to pass to the function.
        """
        logger.trace(
            f"Scheduling task: {func.__name__} with args: {args} and kwargs: {kwargs}"
        )
        task = self.loop.create_task(asyncio.to_thread(func, *args, **kwargs))
        task.set_name(_task_name or f"task-{id(task)}")
        self.tasks.add(task)

    def run(self) -> dict[str, Any]:
        """
        Run all scheduled tasks and return their results.

        Returns
        -------
        dict[str, Any]
            A dictionary where each key is the name of a task and the value is
            the result of that task.

        Raises
        ------
        Exception
            The exception of a failed task, once all tasks have finished.
        """
        results = {}

        if len(self.tasks) > 0:
            self.loop.run_until_complete(
                asyncio.gather(*self.tasks, return_exceptions=True)
            )
            tasks = list(self.tasks)
            self.tasks.clear()
            results = {task.get_name(): task.result() for task in tasks}

        return results

    def close(self) -> None:
        """
        Cancel any pending tasks and close the event loop.
        """
        if self.loop.is_closed():
            return

        if len(self.tasks) > 0:
            for task in self.tasks:
                task.cancel()
            self.loop.run_until_complete(
                asyncio.gather(*self.tasks, return_exceptions=True)
            )
            self.tasks.clear()

        self.loop.run_until_complete(self.loop.shutdown_default_executor())
        self.loop.close()
