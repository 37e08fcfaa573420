"""Domain filters deciding which DNS names the planner looks at."""

from __future__ import annotations

import fnmatch
from typing import Iterable, Protocol


class DomainFilterInterface(Protocol):
    """Anything with a ``match(name)`` predicate."""

    def match(self, name: str) -> bool: ...


def _normalise(domain: str) -> str:
    return domain.strip().lower().rstrip(".")


class MatchAllDomainFilter:
    """Filter that accepts every name."""

    def match(self, name: str) -> bool:
        return True


class DomainFilter:
    """Suffix based include/exclude filter.

    A filter entry ``example.com`` matches the apex and every subdomain,
    ``.example.com`` matches subdomains only and entries containing ``*`` are
    treated as shell-style patterns. Exclusions win over inclusions; an empty
    include list includes everything.
    """

    def __init__(self, include: Iterable[str] = (), exclude: Iterable[str] = ()):
        self.include = [_normalise(item) for item in include if item.strip()]
        self.exclude = [_normalise(item) for item in exclude if item.strip()]

    def match(self, name: str) -> bool:
        candidate = _normalise(name)
        if any(_matches(candidate, pattern) for pattern in self.exclude):
            return False
        if not self.include:
            return True
        return any(_matches(candidate, pattern) for pattern in self.include)

    def __repr__(self) -> str:
        return f"DomainFilter(include={self.include!r}, exclude={self.exclude!r})"


def _matches(name: str, pattern: str) -> bool:
    """Return True if name falls under the given filter entry."""
    if "*" in pattern:
        return fnmatch.fnmatch(name, pattern)
    if pattern.startswith("."):
        return name.endswith(pattern)
    return name == pattern or name.endswith(f".{pattern}")
