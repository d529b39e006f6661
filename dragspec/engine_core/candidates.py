"""
Candidate Generation - All the states a drag could lead to.

Authors rarely list destination states by hand. Instead they describe
one nondeterministic edit of the current state ("insert the tile at
any position") and let the amb evaluator enumerate every outcome:

    states = produce_all(state, lambda draft: draft["items"].insert(
        choose_index(len(draft["items"]) + 1), tile))

The base state is never touched: every branch works on its own deep
copy. Output order follows the evaluator (first choice outermost) and
is stable, so tests and snapshots may rely on it.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Callable, Sequence, TypeVar

from .amb import choose, collect, require
from .paths import PathLike, get_at_path, parse_path

S = TypeVar("S")


def produce_all(base: S, recipe: Callable[[S], Any], unique: bool = False) -> list[S]:
    """
    Apply recipe to a fresh copy of base on every branch.

    recipe mutates the draft in place and may call choose()/require().
    If it returns something other than None, that value is the result
    for the branch instead of the draft. With unique, equal results are
    dropped (first occurrence kept).
    """
    def run():
        draft = deepcopy(base)
        returned = recipe(draft)
        return draft if returned is None else returned

    results = collect(run)
    if not unique:
        return results
    distinct: list[S] = []
    for result in results:
        if result not in distinct:
            distinct.append(result)
    return distinct


def choose_index(count: int) -> int:
    """Nondeterministically pick an index in range(count)."""
    return choose(range(count))


def _list_at(draft: Any, path: PathLike) -> list:
    target = get_at_path(draft, parse_path(path))
    if not isinstance(target, list):
        raise TypeError(f"expected a list at {path!r}, found {type(target).__name__}")
    return target


def insertion_states(base: S, list_path: PathLike, item: Any) -> list[S]:
    """item inserted at every position of the list at list_path."""
    def recipe(draft):
        target = _list_at(draft, list_path)
        target.insert(choose_index(len(target) + 1), deepcopy(item))

    return produce_all(base, recipe)


def removal_state(base: S, list_path: PathLike, index: int) -> S:
    """A copy of base with the element at index removed from the list."""
    draft = deepcopy(base)
    del _list_at(draft, list_path)[index]
    return draft


def reorder_states(base: S, list_path: PathLike, index: int, include_identity: bool = True) -> list[S]:
    """
    The element at index taken out and put back at every position.

    include_identity=False leaves out the state where it goes back where
    it came from.
    """
    def recipe(draft):
        target = _list_at(draft, list_path)
        item = target.pop(index)
        position = choose_index(len(target) + 1)
        if not include_identity:
            require(position != index)
        target.insert(position, item)

    return produce_all(base, recipe)


def transfer_states(
    base: S,
    source_path: PathLike,
    index: int,
    target_paths: Sequence[PathLike],
) -> list[S]:
    """
    The element at index of the source list moved to any position of any
    target list (the source itself may be one of the targets).
    """
    targets = [parse_path(p) for p in target_paths]

    def recipe(draft):
        item = _list_at(draft, source_path).pop(index)
        target = _list_at(draft, choose(targets))
        target.insert(choose_index(len(target) + 1), item)

    return produce_all(base, recipe)
