"""Classification of operation results as immediate or pending."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar, Union


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Immediate(Generic[T]):
    """A result that is already available."""
    value: T


@dataclass(frozen=True, slots=True)
class Pending(Generic[T]):
    """A result that settles later (coroutine, task or future)."""
    awaitable: Awaitable[T]


OperationResult = Union[Immediate[Any], Pending[Any]]


def classify_result(value: Any) -> OperationResult:
    """Tag ``value`` as ``Pending`` if it can be awaited, else ``Immediate``."""
    if inspect.isawaitable(value):
        return Pending(value)
    return Immediate(value)
