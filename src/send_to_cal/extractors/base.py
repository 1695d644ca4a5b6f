"""Tagged candidate results and aggregation for extraction passes.

Every pass is a generator yielding ``Candidate`` values or ``Skipped``
reasons instead of raising, so one malformed block never costs the other
candidates of the same pass or the passes after it.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Iterator, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_SUGGESTIONS = 5


@dataclass(frozen=True)
class Candidate(Generic[T]):
    value: T


@dataclass(frozen=True)
class Skipped:
    reason: str


Result = Union[Candidate[T], Skipped]
Pass = Callable[[], Iterator[Result]]


def collect(passes: Iterable[tuple[str, Pass]]) -> list:
    """
    Run passes in priority order and gather their candidates.

    Args:
        passes: ``(name, pass)`` pairs; each pass is called with no arguments

    Returns:
        Candidate values in pass order
    """
    values = []
    for name, run in passes:
        try:
            for result in run():
                if isinstance(result, Skipped):
                    logger.debug(f"{name}: skipped {result.reason}")
                else:
                    values.append(result.value)
        except Exception as e:
            logger.warning(f"{name}: pass failed, continuing with the next one: {e}")
    return values


def dedupe(items: Iterable[T], key: Callable[[T], str], limit: int = MAX_SUGGESTIONS) -> list[T]:
    """Keep the first item per key, in order, up to ``limit`` items."""
    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        unique.append(item)
        if len(unique) >= limit:
            break
    return unique
