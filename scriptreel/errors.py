import logging
import time
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


class ScriptReelError(Exception):
    """base exception for scriptreel-specific errors"""
    pass


class ConfigurationError(ScriptReelError):
    """raised when a credential or provider setting is missing"""
    pass


class DependencyUnavailable(ScriptReelError):
    """raised when an upstream prerequisite (text-to-speech) cannot run"""
    pass


class ProviderError(ScriptReelError):
    """raised when a video provider rejects a request"""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None, body: str = ""):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        detail = f"{provider} API error"
        if status_code is not None:
            detail += f": {status_code}"
        detail += f" - {message}" if message else ""
        super().__init__(detail)


class JobFailed(ProviderError):
    """raised when a provider reports the job itself as failed"""

    def __init__(self, provider: str, message: str = ""):
        super().__init__(provider, message or "Video generation failed")


class AlreadyInProgress(ScriptReelError):
    """raised when a video job is already pending or generating for a script"""
    pass


class Timeout(ScriptReelError):
    """raised when polling runs out of attempts before a terminal state"""
    pass


class NotFound(ScriptReelError):
    """raised when a script does not exist"""
    pass


class ScriptGenerationError(ScriptReelError):
    """raised when the language model returns nothing usable"""
    pass


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
):
    """
    decorator to retry a function with exponential backoff

    only exceptions listed in retry_on are retried, anything else is raised at once

    usage:
        @retry_with_backoff(max_retries=5, initial_delay=2.0, retry_on=(RateLimited,))
        def call_model(prompt):
            # ... code that might be rate limited ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            delay = initial_delay

            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except retry_on as e:
                    if attempt == max_retries - 1:
                        logger.error(f"{func.__name__} failed after {max_retries} attempts: {e}")
                        raise
                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt + 1}/{max_retries}): {e}. "
                        f"retrying in {delay}s..."
                    )
                    time.sleep(delay)
                    delay = min(delay * backoff_factor, max_delay)

        return wrapper
    return decorator
