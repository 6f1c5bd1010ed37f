"""
Result values for rule functions.

Rule checks return ``Ok`` or ``Err`` instead of raising, so callers can
chain several checks before committing any write. Validators that can
report several problems at once carry a list of messages in ``Err``.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, List, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None
    
    @property
    def ok(self) -> bool:
        return True
    
    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E
    
    @property
    def ok(self) -> bool:
        return False
    
    def unwrap(self):
        raise ValueError(f"Called unwrap on Err: {self.error}")


Result = Union[Ok[T], Err[E]]


def collect(errors: List[str]) -> Result:
    """Ok when no messages were accumulated, otherwise Err with all of them."""
    return Ok(True) if not errors else Err(list(errors))
