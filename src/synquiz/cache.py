import functools
import time
from typing import Any, Callable, Dict, Hashable, Tuple


def ttl_cache(ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
    """Memoizes a function per positional arguments for ``ttl_seconds``.

    The wrapped function gets ``cache_clear()`` and ``invalidate(*args)``.
    """

    def decorator(func):
        entries: Dict[Tuple[Hashable, ...], Tuple[float, Any]] = {}

        @functools.wraps(func)
        def wrapper(*args):
            now = clock()
            hit = entries.get(args)
            if hit is not None and now - hit[0] < ttl_seconds:
                return hit[1]
            value = func(*args)
            entries[args] = (now, value)
            return value

        def invalidate(*args):
            entries.pop(args, None)

        wrapper.cache_clear = entries.clear
        wrapper.invalidate = invalidate
        return wrapper

    return decorator
