"""
Amb - Nondeterministic evaluation by replay.

A computation calls choose(options) wherever it wants "one of these".
The driver runs the computation once per branch of the resulting choice
tree, replaying the choices already decided for that branch and
branching at the first undecided choose() call.

    >>> collect(lambda: (choose("ab"), choose([1, 2])))
    [('a', 1), ('a', 2), ('b', 1), ('b', 2)]

Ordering: depth-first, left to right. The first choose() site reached
is the outermost loop.

Determinism: given the same prefix of choices, a computation must reach
the same choose() sites with the same option lists. Side effects that
vary independently of the path desynchronize replay.
"""

from __future__ import annotations
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class AmbUsageError(RuntimeError):
    """choose()/prune() called outside of generate()/collect()."""


class _BranchSignal(BaseException):
    """Unwinds a run that reached an undecided choice point."""

    def __init__(self, option_count: int):
        super().__init__(option_count)
        self.option_count = option_count


class _PruneSignal(BaseException):
    """Unwinds a run that abandoned its branch."""


# =============================================================================
# Run outcomes
# =============================================================================

@dataclass(frozen=True)
class Value:
    """The run completed and produced a result."""
    result: Any


@dataclass(frozen=True)
class Branch:
    """The run needs a decision for a choice point with option_count options."""
    option_count: int


@dataclass(frozen=True)
class Pruned:
    """The run abandoned its branch."""


Outcome = Value | Branch | Pruned


@dataclass
class AmbContext:
    """
    Replay state for a single run of a computation.

    path holds the decided option indices for this branch; cursor is
    the number of choose() calls made so far in the run.
    """
    path: tuple[int, ...] = ()
    cursor: int = 0

    def next_choice(self, options: Sequence[T]) -> T:
        index = self.cursor
        self.cursor += 1
        if index < len(self.path):
            return options[self.path[index]]
        raise _BranchSignal(len(options))


_active: ContextVar[AmbContext | None] = ContextVar("dragspec_amb_context", default=None)


def _current() -> AmbContext:
    ctx = _active.get()
    if ctx is None:
        raise AmbUsageError("choose()/prune() must be called inside generate() or collect()")
    return ctx


# =============================================================================
# Operators (used inside a computation)
# =============================================================================

def choose(options: Sequence[T]) -> T:
    """Nondeterministically pick one of options."""
    if not isinstance(options, Sequence):
        options = list(options)
    return _current().next_choice(options)


def prune() -> None:
    """Abandon the current branch without a result."""
    _current()
    raise _PruneSignal()


def require(condition: bool) -> None:
    """Abandon the current branch unless condition holds."""
    if not condition:
        prune()


# =============================================================================
# Drivers
# =============================================================================

def run_once(computation: Callable[[], R], path: tuple[int, ...]) -> Outcome:
    """
    Run computation once, replaying path.

    Control signals are converted to outcomes here and never leave this
    function. Any other exception propagates.
    """
    ctx = AmbContext(path=path)
    token = _active.set(ctx)
    try:
        result = computation()
    except _BranchSignal as signal:
        return Branch(signal.option_count)
    except _PruneSignal:
        return Pruned()
    finally:
        _active.reset(token)
    return Value(result)


def generate(computation: Callable[[], R]) -> Iterator[R]:
    """
    Lazily yield one result per branch of computation that is not pruned.

    Each call starts a fresh enumeration. Exceptions raised by the
    computation stop the enumeration and propagate unchanged.
    """
    stack: list[tuple[int, ...]] = [()]
    runs = 0
    while stack:
        path = stack.pop()
        runs += 1
        outcome = run_once(computation, path)
        if isinstance(outcome, Value):
            yield outcome.result
        elif isinstance(outcome, Branch):
            # Reversed so that index 0 is explored first.
            for index in reversed(range(outcome.option_count)):
                stack.append(path + (index,))
    logger.debug("amb enumeration finished after %d runs", runs)


def collect(computation: Callable[[], R]) -> list[R]:
    """Eagerly collect every result of computation."""
    return list(generate(computation))
