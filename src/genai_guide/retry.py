# Copyright 2026 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Retry with exponential backoff for transient API failures.

Only errors whose status is retryable (rate limits, server errors,
timeouts) are retried::

    attempt:   0      1      2      3
    delay:     -     1s     2s     4s   (capped at max_delay, +/- jitter)

Usage::

    policy = RetryPolicy(max_retries=3)
    response = await with_retries(lambda: client.aio.models.generate_content(...), policy)
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

import structlog

from genai_guide.errors import GuideError, from_exception

if TYPE_CHECKING:
    from genai_guide.config import Settings

logger = structlog.get_logger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class RetryPolicy:
    """How many times, and how far apart, to retry a failed call."""

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    multiplier: float = 2.0
    jitter: float = 0.1

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f'max_retries must be >= 0, got {self.max_retries}')
        if self.initial_delay <= 0 or self.max_delay <= 0:
            raise ValueError('retry delays must be positive')
        if not 0 <= self.jitter < 1:
            raise ValueError(f'jitter must be in [0, 1), got {self.jitter}')

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        """Build a policy from :class:`genai_guide.config.Settings`."""
        return cls(
            max_retries=settings.max_retries,
            initial_delay=settings.retry_initial_delay,
            max_delay=settings.retry_max_delay,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based), without jitter."""
        return min(self.initial_delay * self.multiplier ** (attempt - 1), self.max_delay)

    def _jittered(self, attempt: int) -> float:
        delay = self.delay_for(attempt)
        if self.jitter:
            delay *= 1 + random.uniform(-self.jitter, self.jitter)
        return max(delay, 0.0)


NO_RETRY = RetryPolicy(max_retries=0)


async def with_retries(
    call: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``call()``, retrying transient failures.

    Args:
        call: Zero-argument factory returning a fresh awaitable per attempt.
        policy: Retry policy; ``None`` means no retries.
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        The result of the first successful attempt.

    Raises:
        GuideError: The translated error of the last attempt, or the first
            non-retryable one.
    """
    policy = policy or NO_RETRY
    attempt = 0
    while True:
        try:
            return await call()
        except Exception as e:
            error = from_exception(e)
            if not error.retryable or attempt >= policy.max_retries:
                if error is e:
                    raise
                raise error from e
            attempt += 1
            delay = policy._jittered(attempt)
            await logger.awarning(
                'retrying after transient error',
                attempt=attempt,
                max_retries=policy.max_retries,
                delay=round(delay, 3),
                status=error.status,
                http_code=error.http_code,
            )
            await sleep(delay)
