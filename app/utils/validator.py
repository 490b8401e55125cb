"""
Field-level validation collector.

Checks never raise: each failed check records a message against a field
name so that every problem can be reported in a single response.

Usage:
    v = Validator()
    v.check(movie.title != "", "title", "must be provided")
    if not v.valid():
        return v.errors
"""
from typing import Dict, Iterable


class Validator:
    """Collects field-scoped violations"""

    def __init__(self):
        self.errors: Dict[str, str] = {}

    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        """Record `message` for `key` unless that field already has one."""
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)


def permitted_value(value, *permitted) -> bool:
    """True if `value` is one of `permitted`"""
    return value in permitted


def unique(values: Iterable) -> bool:
    """True if every element of `values` appears once"""
    values = list(values)
    return len(set(values)) == len(values)
