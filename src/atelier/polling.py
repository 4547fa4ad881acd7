"""Supervised polling of long-running generation jobs."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
)

from .errors import GenerationError, GenerationTimeout

logger = logging.getLogger(__name__)


def _pending(operation: Any) -> bool:
    return not operation.done


class JobPoller:
    """Drive a job handle until it reports ``done``.

    Each attempt sleeps ``interval`` seconds and then re-fetches the job.
    The loop gives up after ``timeout`` seconds or ``max_attempts`` fetches,
    whichever comes first.
    """

    def __init__(
        self,
        fetch: Callable[[Any], Awaitable[Any]],
        interval: float = 5.0,
        timeout: float = 600.0,
        max_attempts: int = 240,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.fetch = fetch
        self.interval = interval
        self.timeout = timeout
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def wait(self, operation: Any) -> Any:
        """Return the finished job record.

        Raises:
            GenerationTimeout: If the job is still running at the deadline.
            GenerationError: If the finished job carries an error.

        """
        if operation.done:
            return self._finished(operation)

        current = operation

        async def _advance() -> Any:
            nonlocal current
            await self._sleep(self.interval)
            current = await self.fetch(current)
            logger.debug("Job %s done=%s", getattr(current, "name", "?"), current.done)
            return current

        retryer = AsyncRetrying(
            retry=retry_if_result(_pending),
            stop=stop_after_delay(self.timeout) | stop_after_attempt(self.max_attempts),
        )
        try:
            finished = await retryer(_advance)
        except RetryError as e:
            msg = (
                f"Job {getattr(current, 'name', '')} still running after "
                f"{e.last_attempt.attempt_number} checks."
            )
            raise GenerationTimeout(msg) from e
        return self._finished(finished)

    @staticmethod
    def _finished(operation: Any) -> Any:
        error = getattr(operation, "error", None)
        if error:
            msg = f"Job failed: {error}"
            raise GenerationError(msg)
        return operation
