"""
Retry policy for model calls

Walks an ordered list of model candidates. A rate-limited call waits a
fixed interval and retries the same model once; any other failure moves
on to the next candidate straight away.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from .errors import ModelCallError, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_HTTP_429 = re.compile(r"\b429\b")


def is_rate_limit_error(error: BaseException) -> bool:
    if isinstance(error, RateLimitError):
        return True
    message = str(error)
    return bool(_HTTP_429.search(message)) or "RESOURCE_EXHAUSTED" in message


def fixed_backoff(seconds: float) -> Callable[[int, BaseException], float]:
    def backoff(attempt: int, error: BaseException) -> float:
        return seconds
    return backoff


@dataclass(frozen=True)
class ModelRetryPolicy:
    """
    Ordered model candidates plus the rate-limit backoff rule

    Attributes:
        models: Candidate model identifiers, tried in order
        rate_limit_retries: Extra attempts on the same model after a rate limit
        backoff: (attempt, error) -> seconds to wait before the retry
        is_retryable: Predicate selecting errors that earn a same-model retry
        sleep: Injected for tests
    """

    models: Tuple[str, ...]
    rate_limit_retries: int = 1
    backoff: Callable[[int, BaseException], float] = field(default_factory=lambda: fixed_backoff(2.0))
    is_retryable: Callable[[BaseException], bool] = is_rate_limit_error
    sleep: Callable[[float], None] = time.sleep

    def __post_init__(self):
        if not self.models:
            raise ValueError("ModelRetryPolicy needs at least one model")
        object.__setattr__(self, "models", tuple(self.models))

    @classmethod
    def from_models(cls, models: Sequence[str], backoff_seconds: float = 2.0, **kwargs) -> "ModelRetryPolicy":
        return cls(models=tuple(models), backoff=fixed_backoff(backoff_seconds), **kwargs)

    def run(self, call: Callable[[str], T]) -> T:
        """
        Invoke call(model) until one candidate succeeds

        Raises:
            ModelCallError: once every candidate is exhausted
        """
        last_error: Optional[BaseException] = None

        for model in self.models:
            attempt = 0
            while True:
                try:
                    return call(model)
                except Exception as e:
                    last_error = e
                    if self.is_retryable(e) and attempt < self.rate_limit_retries:
                        attempt += 1
                        delay = self.backoff(attempt, e)
                        logger.warning(
                            "Model %s rate limited, retrying in %.1fs (server suggested %s)",
                            model, delay, getattr(e, "retry_after", None),
                        )
                        self.sleep(delay)
                        continue
                    logger.warning("Model %s failed: %s", model, e)
                    break

        logger.error("All %d model candidates failed", len(self.models))
        raise ModelCallError(
            f"All AI models failed. Last error: {last_error}",
            last_error=last_error,
        )
