"""Reference value types for strata stores.

TickLayer keeps only the newest tick of a run, which makes the shape of
the chain easy to read off. SpanLayer aggregates a run of ticks and is the
shape most real histories take (counts, sums, first/last seen).
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from strata.errors import TickOrderError
from strata.protocols import Layer


@dataclass(frozen=True)
class TickLayer(Layer):
    """A bare tick. Merging keeps the newer tick.

    The extra of a merge is the tick that was overwritten.
    """
    tick: int

    def get_tick(self) -> int:
        return self.tick

    def merge(self, other: "TickLayer") -> Tuple["TickLayer", int]:
        if not self.tick < other.tick:
            raise TickOrderError(self.tick, other.tick)
        return TickLayer(other.tick), self.tick

    def to_json(self) -> Dict[str, int]:
        return {"tick": self.tick}

    @classmethod
    def from_json(cls, data: Dict[str, int]) -> "TickLayer":
        return cls(tick=data["tick"])


@dataclass(frozen=True)
class SpanLayer(Layer):
    """Summary of the ticks first..last.

    Merging an older span with a newer one yields the covering span; the
    extra is the newer span as it was before being absorbed.
    """
    first: int
    last: int
    count: int = 1
    total: Any = 0

    @classmethod
    def of(cls, tick: int, amount: Any = 0) -> "SpanLayer":
        """Span covering a single tick."""
        return cls(first=tick, last=tick, count=1, total=amount)

    def get_tick(self) -> int:
        return self.last

    def merge(self, other: "SpanLayer") -> Tuple["SpanLayer", "SpanLayer"]:
        if not self.last < other.first:
            raise TickOrderError(self.last, other.first)
        merged = SpanLayer(
            first=self.first,
            last=other.last,
            count=self.count + other.count,
            total=self.total + other.total,
        )
        return merged, other

    def to_json(self) -> Dict[str, Any]:
        return {
            "first": self.first,
            "last": self.last,
            "count": self.count,
            "total": self.total,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "SpanLayer":
        return cls(
            first=data["first"],
            last=data["last"],
            count=data.get("count", 1),
            total=data.get("total", 0),
        )
