"""strata value protocol as a Python Abstract Base Class.

A value kept in a Snapshots store must be able to:
    1. report its tick   - an ordering key, older values have smaller ticks
    2. merge with a newer value of its own type, producing the replacement
       value plus an auxiliary "extra" result

The store itself only calls merge(); it never type-checks values, so any
object exposing the two methods can be inserted. Subclassing Layer is the
documented way to state the contract.
"""

from abc import ABC, abstractmethod
from typing import Any, Tuple


class Layer(ABC):
    """A mergeable value with an ordering key."""

    @abstractmethod
    def get_tick(self) -> int:
        """Ordering key of this value."""
        ...

    @abstractmethod
    def merge(self, other: "Layer") -> Tuple["Layer", Any]:
        """Fold the newer value `other` into this one.

        Returns (merged, extra). Both operands are consumed: callers must
        not keep using either after the merge.
        """
        ...
