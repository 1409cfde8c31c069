import time
import logging
import functools
import random
from typing import Callable, Any, Optional

logger = logging.getLogger(__name__)

class RetryError(Exception):
    """Raised when every attempt of a retried call has failed."""

    def __init__(self, func_name: str, attempts: int):
        super().__init__(f"{func_name} failed after {attempts} attempts")
        self.func_name = func_name
        self.attempts = attempts

def with_retry(
    max_attempts: int = 3,
    retry_delay: float = 0.5,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    exceptions_to_retry: tuple = (Exception,),
    should_retry: Optional[Callable[[Exception], bool]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable:
    """
    Retry a call that may hit a transient failure, such as a dropped
    database connection during a bulk insert.

    Args:
        max_attempts: Total number of attempts, including the first one.
        retry_delay: Delay before the second attempt, in seconds.
        backoff_factor: Multiplier applied to the delay after each failure.
        jitter: Randomize each delay between 50% and 150%.
        exceptions_to_retry: Exception types that trigger another attempt.
            Anything else propagates immediately.
        should_retry: Optional predicate to veto a retry for a given error.
        sleep: Wait function, replaceable in tests.

    Raises:
        RetryError: All attempts failed; chained to the last error.

    Example:
        @with_retry(max_attempts=3, exceptions_to_retry=(OperationalError,))
        def insert_batch(rows):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            last_exception = None

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions_to_retry as e:
                    last_exception = e

                    if should_retry and not should_retry(e):
                        logger.warning(f"Not retrying {func.__name__}: {str(e)}")
                        break

                    if attempt == max_attempts:
                        logger.warning(f"Final attempt {attempt}/{max_attempts} for {func.__name__} failed: {str(e)}")
                        break

                    delay = retry_delay * (backoff_factor ** (attempt - 1))
                    if jitter:
                        delay = delay * (0.5 + random.random())

                    logger.warning(f"Attempt {attempt}/{max_attempts} for {func.__name__} failed: {str(e)}. "
                                   f"Retrying in {delay:.2f} seconds...")
                    sleep(delay)

            logger.error(f"All attempts for {func.__name__} failed.")
            raise RetryError(func.__name__, attempt) from last_exception

        return wrapper
    return decorator
