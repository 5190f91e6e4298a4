from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, Sequence, Tuple, TypeVar

from promptcore.schema.taxonomy import is_game_query

Predicate = Callable[[str], bool]
E = TypeVar("E")


@dataclass(frozen=True)
class Trigger(Generic[E]):
    """(predicate, effects) pair; predicates receive the lower-cased query."""

    name: str
    predicate: Predicate
    effects: Tuple[E, ...]


def has_any(*words: str) -> Predicate:
    return lambda q: any(w in q for w in words)


def has_all(*words: str) -> Predicate:
    return lambda q: all(w in q for w in words)


def both(*preds: Predicate) -> Predicate:
    return lambda q: all(p(q) for p in preds)


def lacks(pred: Predicate) -> Predicate:
    return lambda q: not pred(q)


game_topic: Predicate = is_game_query


def fire(
    triggers: Sequence[Trigger[E]],
    query: str,
    *,
    key: Callable[[E], object] = lambda e: e,
) -> List[E]:
    """Effects of every matching trigger, in declaration order, deduplicated."""
    q = (query or "").lower()
    out: List[E] = []
    seen: set = set()
    for trig in triggers:
        if not trig.predicate(q):
            continue
        for effect in trig.effects:
            k = key(effect)
            if k in seen:
                continue
            seen.add(k)
            out.append(effect)
    return out


def fired_names(triggers: Iterable[Trigger], query: str) -> List[str]:
    q = (query or "").lower()
    return [t.name for t in triggers if t.predicate(q)]
