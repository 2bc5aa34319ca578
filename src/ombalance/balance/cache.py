"""
Caching of balance calculations.

Results are keyed on a hash of the function name, the calculator version and
the serialized input, so a new calculator version invalidates old results.
"""
import asyncio
import hashlib
import inspect
import json
import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

from pydantic import BaseModel

from ombalance.core.types import CalculationCache

logger = logging.getLogger("ombalance.balance.cache")

T = TypeVar("T")
I = TypeVar("I", bound=BaseModel)


def generate_calculation_hash(function_name: str, calculator_version: str, function_input: Any) -> str:
    """
    SHA-256 cache key for a calculation.

    Args:
        function_name: Name of the calculation function
        calculator_version: Version of the calculator
        function_input: Pydantic model or JSON-serializable input

    Returns:
        Hex digest of ``"<name>:<version>:<stable JSON of input>"``
    """
    if isinstance(function_input, BaseModel):
        function_input = function_input.model_dump(mode="json")
    serialized = json.dumps(function_input, sort_keys=True, separators=(",", ":"), default=str)
    data = f"{function_name}:{calculator_version}:{serialized}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


class InMemoryCalculationCache:
    """
    Bounded LRU cache with single-flight computation.

    Concurrent callers asking for the same missing key share one computation.
    Failed computations are not stored and raise for every waiting caller.
    """

    def __init__(self, max_entries: int = 10_000):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, Any]" = OrderedDict()
        self._in_flight: Dict[str, "asyncio.Future[Any]"] = {}
        self.stats = {"hits": 0, "misses": 0, "shared": 0}

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        if key in self._entries:
            self._entries.move_to_end(key)
            self.stats["hits"] += 1
            return self._entries[key]

        pending = self._in_flight.get(key)
        if pending is not None:
            self.stats["shared"] += 1
            # shield so a cancelled waiter doesn't cancel the shared computation
            return await asyncio.shield(pending)

        self.stats["misses"] += 1
        logger.debug(f"Cache miss for {key[:12]}")
        future: "asyncio.Future[Any]" = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            value = await compute()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Retrieved here so an unobserved failure is not reported by asyncio
            future.exception()
            raise
        else:
            self._store(key, value)
            future.set_result(value)
            return value
        finally:
            del self._in_flight[key]

    def _store(self, key: str, value: Any):
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)


class NullCalculationCache:
    """Cache that never stores anything"""

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        return await compute()


def with_calculation_cache(
    func: Callable[[I], Union[T, Awaitable[T]]],
    function_name: str,
    calculator_version: str,
    cache: Optional[CalculationCache] = None
) -> Callable[[I], Awaitable[T]]:
    """
    Wrap a pure calculation in a cache.

    The returned coroutine function looks the input up in the cache and only
    runs ``func`` on a miss. ``func`` may be a plain function or a coroutine
    function; the awaited result is what gets cached.
    """
    cache = cache if cache is not None else NullCalculationCache()

    async def cached(function_input: I) -> T:
        key = generate_calculation_hash(function_name, calculator_version, function_input)

        async def compute() -> T:
            result = func(function_input)
            if inspect.isawaitable(result):
                result = await result
            return result

        return await cache.get_or_compute(key, compute)

    cached.__name__ = getattr(func, "__name__", function_name)
    cached.__doc__ = func.__doc__
    cached.__wrapped__ = func  # type: ignore[attr-defined]
    return cached
