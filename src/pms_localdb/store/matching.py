"""Match predicates used by the store's search helpers.

Mobile numbers match on a case-sensitive prefix, customer names on a
case-insensitive substring, descriptions and remarks on a case-insensitive
prefix. The policies are kept separate on purpose; callers pick one.
"""

from __future__ import annotations


def prefix_match(candidate: str, partial: str) -> bool:
    return candidate.startswith(partial)


def prefix_match_ci(candidate: str, partial: str) -> bool:
    return candidate.lower().startswith(partial.lower())


def substring_match_ci(candidate: str, partial: str) -> bool:
    return partial.lower() in candidate.lower()
