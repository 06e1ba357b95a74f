from typing import Callable, Hashable, Iterable, List, TypeVar

T = TypeVar("T")


def dedupe_by(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Keep the first item for each key, preserving order."""
    seen = set()
    out: List[T] = []
    for it in items:
        k = key(it)
        if k in seen:
            continue
        seen.add(k)
        out.append(it)
    return out
