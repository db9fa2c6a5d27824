import logging
import time
import functools
from typing import Any, Callable, TypeVar
from typing_extensions import ParamSpec
from lume.kernel.system.logging import get_logger

logger = get_logger("perf")

P = ParamSpec("P")
R = TypeVar("R")


def _find_shape(args: Any, kwargs: Any) -> Any:
    for arg in args:
        if hasattr(arg, "shape"):
            return getattr(arg, "shape")
    for val in kwargs.values():
        if hasattr(val, "shape"):
            return getattr(val, "shape")
    return "N/A"


def time_function(func: Callable[P, R]) -> Callable[P, R]:
    """
    Logs the wall time of an operator together with the shape of the image it ran on.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start = time.perf_counter()
        result = func(*args, **kwargs)
        duration_ms = (time.perf_counter() - start) * 1000

        if logger.isEnabledFor(logging.DEBUG):
            shape = _find_shape(args, kwargs)
            logger.debug(f"PERF: {func.__name__} took {duration_ms:.3f}ms (shape: {shape})")
        return result

    return wrapper
