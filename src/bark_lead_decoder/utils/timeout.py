"""Timeout utility for the Bark Lead Decoder.

This module provides a timeout decorator that can be used to limit the execution time
of functions and methods.
"""

import functools
import signal
import threading
from typing import Any, Callable, TypeVar, cast, Optional

from bark_lead_decoder.exceptions import DecodeTimeoutError

T = TypeVar('T')


def timeout_handler(timeout_sec: int) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator that raises a DecodeTimeoutError if a function takes longer than timeout_sec seconds.

    A timeout of 0 disables the limit. SIGALRM is only available on the main
    thread, so calls from other threads run unguarded.

    Args:
        timeout_sec: Maximum execution time in seconds

    Returns:
        Decorated function that will raise DecodeTimeoutError if execution exceeds timeout_sec

    Example:
        @timeout_handler(timeout_sec=5)
        def decode_page(html):
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            if timeout_sec <= 0 or threading.current_thread() is not threading.main_thread():
                return func(*args, **kwargs)

            def handle_timeout(signum: int, frame: Optional[Any]) -> None:
                raise DecodeTimeoutError(f"Function {func.__name__} timed out after {timeout_sec} seconds")

            original_handler = signal.signal(signal.SIGALRM, handle_timeout)
            signal.alarm(timeout_sec)

            try:
                result = func(*args, **kwargs)
            finally:
                signal.alarm(0)
                signal.signal(signal.SIGALRM, original_handler)

            return result
        return cast(Callable[..., T], wrapper)
    return decorator
