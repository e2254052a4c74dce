"""Core data types for the strata layer chain.

All types are immutable dataclasses. The chain is rebuilt, never edited
in place: a cascade constructs fresh Stratum links and moves the old
values and tails into them.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Union

from strata.errors import InvalidRatioError


# ============================================================
# Chain links
# ============================================================

@dataclass(frozen=True)
class End:
    """Terminal link. Marks the bottom of the chain."""


END = End()


@dataclass(frozen=True)
class Stratum:
    """One retained layer: a value, its saturation counter and the
    remainder of the chain below it.
    """
    value: Any
    counter: int  # in [0, ratio - 1]
    tail: "Chain" = END


Chain = Union[End, Stratum]


def walk(chain: Chain) -> Iterator[Stratum]:
    """Yield every Stratum from the top of the chain to the bottom."""
    link = chain
    while isinstance(link, Stratum):
        yield link
        link = link.tail


# ============================================================
# StoreConfig
# ============================================================

@dataclass(frozen=True)
class StoreConfig:
    """Settings fixed at store construction.

    ratio is the number of values a layer absorbs before its value is
    carried one level down. check_ticks turns on the ordering check
    before every merge.
    """
    ratio: int
    check_ticks: bool = False

    def __post_init__(self):
        # bool is an int subclass; True would silently mean ratio 1
        if isinstance(self.ratio, bool) or not isinstance(self.ratio, int):
            raise InvalidRatioError(self.ratio)
        if self.ratio < 1:
            raise InvalidRatioError(self.ratio)

    @property
    def max_counter(self) -> int:
        return self.ratio - 1

    def to_json(self) -> Dict[str, Any]:
        return {"ratio": self.ratio, "check-ticks": self.check_ticks}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "StoreConfig":
        return cls(ratio=data["ratio"],
                   check_ticks=data.get("check-ticks", False))


# ============================================================
# LayerInfo - read-only view of one layer
# ============================================================

@dataclass(frozen=True)
class LayerInfo:
    """Describes a retained layer without exposing the chain itself."""
    depth: int  # 0 is the most recently touched layer
    counter: int
    tick: int  # tick of the value currently held

    def to_json(self) -> Dict[str, int]:
        return {"depth": self.depth, "counter": self.counter, "tick": self.tick}

    @classmethod
    def from_json(cls, data: Dict[str, int]) -> "LayerInfo":
        return cls(depth=data["depth"], counter=data["counter"],
                   tick=data["tick"])
