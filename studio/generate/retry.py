from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .errors import GenerationFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    max_attempts: int = 3
    backoff_factor: float = 2.0
    initial_delay: float = 0.5
    max_delay: float = 8.0


class RetryManager:
    """
    Re-runs a gateway call while it fails with a retryable GenerationFailure.

    - Exponential backoff with jitter, capped at ``max_delay``
    - Respects a provider-supplied retry-after hint
    - Non-retryable failures and any other exception propagate immediately
    - When attempts run out the last failure is re-raised with
      ``retries_exhausted`` set
    """

    def __init__(self, config: Optional[RetryConfig] = None, sleep: Callable[[float], None] = time.sleep):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def execute(self, func: Callable[[], T]) -> T:
        config = self.config
        attempt = 0
        delay = config.initial_delay

        while True:
            try:
                return func()
            except GenerationFailure as e:
                attempt += 1
                if not e.retryable:
                    raise
                if attempt >= config.max_attempts:
                    if config.max_attempts > 1:
                        e.retries_exhausted = True
                        logger.error("Giving up on mode=%s after %d attempts", e.mode, attempt)
                    raise

                wait = self._calculate_delay(e, delay)
                logger.warning(
                    "Retrying mode=%s in %.2fs (attempt %d/%d): %s",
                    e.mode, wait, attempt + 1, config.max_attempts, e.message,
                )
                self._sleep(wait)
                delay = min(delay * config.backoff_factor, config.max_delay)

    def _calculate_delay(self, error: GenerationFailure, base_delay: float) -> float:
        if error.retry_after:
            return min(error.retry_after, self.config.max_delay)
        jitter = random.uniform(0, 0.1 * base_delay)
        return min(base_delay + jitter, self.config.max_delay)
