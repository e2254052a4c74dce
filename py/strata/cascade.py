"""The carry/merge cascade run by every insertion.

Each layer behaves like one digit of a counter with radix `ratio`. A new
value arriving at a layer is merged into it while the layer's counter is
below ratio - 1. Once the counter is saturated, the new value takes the
layer over with a fresh counter and the value it displaces is carried
one level down, where the same rule applies again. Reaching the terminal
link grows the chain by one layer.

Two renditions share one contract and produce identical chains:

    cascade            - explicit stack of displaced values, used by the
                         store since ratio 1 grows the chain linearly
    cascade_recursive  - direct recursion over the chain
"""

import logging
from typing import Any, List, Optional, Tuple

from strata.errors import InvalidRatioError, InvariantViolation, TickOrderError
from strata.types import End, Stratum, Chain

logger = logging.getLogger(__name__)


def _check_ratio(ratio: int) -> int:
    if isinstance(ratio, bool) or not isinstance(ratio, int) or ratio < 1:
        raise InvalidRatioError(ratio)
    return ratio - 1


def _check_link(link: Any, max_counter: int, depth: int) -> None:
    if not isinstance(link, (End, Stratum)):
        raise InvariantViolation(
            f"chain link at depth {depth} is {type(link).__name__}, "
            f"expected End or Stratum")
    if isinstance(link, Stratum) and not 0 <= link.counter <= max_counter:
        raise InvariantViolation(
            f"counter {link.counter} at depth {depth} "
            f"outside [0, {max_counter}]")


def _merge(older: Any, newer: Any, check_ticks: bool) -> Tuple[Any, Any]:
    if check_ticks:
        left, right = older.get_tick(), newer.get_tick()
        if not left < right:
            raise TickOrderError(left, right)
    return older.merge(newer)


def cascade(ratio: int, chain: Chain, value: Any,
            check_ticks: bool = False) -> Tuple[Chain, Optional[Any]]:
    """Insert `value` on top of `chain`.

    Returns (new_chain, extra). extra is whatever the merge that ended the
    cascade returned, or None when the cascade ran off the bottom of the
    chain and created a new deepest layer.
    """
    max_counter = _check_ratio(ratio)
    # values that take over saturated layers, top first
    pending: List[Any] = []
    carry = value
    link = chain
    depth = 0
    while True:
        _check_link(link, max_counter, depth)
        if isinstance(link, End):
            logger.debug("new layer born at depth %d", depth)
            bottom: Chain = Stratum(value=carry, counter=0, tail=link)
            extra = None
            break
        if link.counter >= max_counter:
            logger.debug("carry from depth %d to depth %d", depth, depth + 1)
            pending.append(carry)
            carry = link.value
            link = link.tail
            depth += 1
            continue
        merged, extra = _merge(link.value, carry, check_ticks)
        bottom = Stratum(value=merged, counter=link.counter + 1, tail=link.tail)
        break

    while pending:
        bottom = Stratum(value=pending.pop(), counter=0, tail=bottom)
    return bottom, extra


def cascade_recursive(ratio: int, chain: Chain, value: Any,
                      check_ticks: bool = False,
                      _depth: int = 0) -> Tuple[Chain, Optional[Any]]:
    """Recursive form of cascade(). Depth equals the number of carries."""
    max_counter = _check_ratio(ratio)
    _check_link(chain, max_counter, _depth)

    if isinstance(chain, End):
        logger.debug("new layer born at depth %d", _depth)
        return Stratum(value=value, counter=0, tail=chain), None

    if chain.counter >= max_counter:
        logger.debug("carry from depth %d to depth %d", _depth, _depth + 1)
        tail, extra = cascade_recursive(ratio, chain.tail, chain.value,
                                        check_ticks, _depth + 1)
        return Stratum(value=value, counter=0, tail=tail), extra

    merged, extra = _merge(chain.value, value, check_ticks)
    return Stratum(value=merged, counter=chain.counter + 1, tail=chain.tail), extra
