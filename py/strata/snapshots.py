"""Snapshots - bounded history of a mergeable value.

The store keeps the most recent state at full resolution and compacts
older state into progressively coarser layers. After n insertions with
ratio r it holds at most ceil(log_r(n + 1)) + 1 layers.

Not thread-safe: callers serialize insert() against each other and
against any outstanding iteration.
"""

import logging
from typing import Any, Iterator, List, Optional

from strata.cascade import cascade
from strata.errors import NullValueError
from strata.types import END, Chain, LayerInfo, StoreConfig, Stratum, walk

logger = logging.getLogger(__name__)


def depth_bound(ratio: int, tick: int) -> int:
    """Upper bound on the layer count after `tick` insertions.

    ceil(log_ratio(tick + 1)) + 1, computed on integers. Ratio 1 carries on
    every insertion, so the chain can hold one layer per insertion.
    """
    if ratio == 1:
        return tick + 1
    k, reach = 0, 1
    while reach < tick + 1:
        reach *= ratio
        k += 1
    return k + 1


class Snapshots:
    """Cascading chain of geometrically decimated layers."""

    def __init__(self, ratio: int, check_ticks: bool = False):
        # StoreConfig raises InvalidRatioError for ratio < 1
        self._config = StoreConfig(ratio=ratio, check_ticks=check_ticks)
        self._tick = 0
        self._layers: Chain = END

    @classmethod
    def from_config(cls, config: StoreConfig) -> "Snapshots":
        return cls(config.ratio, check_ticks=config.check_ticks)

    # -- configuration --

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def ratio(self) -> int:
        return self._config.ratio

    @property
    def tick(self) -> int:
        """Number of insertions performed since construction."""
        return self._tick

    # -- reading --

    def last(self) -> Optional[Any]:
        """Value of the most recently touched layer, or None when empty.

        Unambiguous because insert() refuses None.
        """
        if isinstance(self._layers, Stratum):
            return self._layers.value
        return None

    def iter(self) -> Iterator[Any]:
        """Values of every retained layer, most recent first.

        Each call starts a fresh traversal of the current chain.
        """
        for link in walk(self._layers):
            yield link.value

    def __iter__(self) -> Iterator[Any]:
        return self.iter()

    def __len__(self) -> int:
        return sum(1 for _ in walk(self._layers))

    def layers(self) -> List[LayerInfo]:
        """Depth, counter and value tick of every retained layer."""
        return [LayerInfo(depth=depth, counter=link.counter,
                          tick=link.value.get_tick())
                for depth, link in enumerate(walk(self._layers))]

    def depth_bound(self) -> int:
        return depth_bound(self.ratio, self._tick)

    # -- writing --

    def insert(self, value: Any) -> Optional[Any]:
        """Push `value` onto the history.

        Returns the extra produced by the merge that ended the cascade, or
        None when the insertion created a new deepest layer. A merge that
        itself returns None as its extra cannot be told apart from the
        latter case.

        None itself is not a valid value and raises NullValueError.
        """
        if value is None:
            raise NullValueError()
        layers, extra = cascade(self.ratio, self._layers, value,
                                check_ticks=self._config.check_ticks)
        self._layers = layers
        self._tick += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("insert #%d: %d layers, extra %s", self._tick,
                         len(self), "present" if extra is not None else "none")
        return extra

    def __repr__(self) -> str:
        return (f"Snapshots(ratio={self.ratio}, tick={self._tick}, "
                f"layers={len(self)})")


def create(ratio: int, check_ticks: bool = False) -> Snapshots:
    """Create a Snapshots store. Raises InvalidRatioError if ratio < 1."""
    return Snapshots(ratio, check_ticks=check_ticks)
