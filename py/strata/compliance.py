"""Value-type-agnostic compliance test suite for strata stores.

Any value type meant for a Snapshots store can be checked against the
store's guarantees. Value types provide a fixture dict:

    fixture = {
        "make_value": lambda tick: ...,   # fresh value for tick (1, 2, ...)
        "ratios": [1, 2, 3, 4],           # optional, ratios to exercise
        "insertions": 64,                 # optional, insertions per ratio
    }

Values must merge with a non-None extra, otherwise a merge cannot be
told apart from the birth of a new layer.

Usage with pytest:

    from strata.compliance import run_compliance_tests

    def test_compliance():
        run_compliance_tests(SPAN_FIXTURE)
"""

from typing import Any, Dict, List, Optional, Tuple

from strata.errors import InvalidRatioError
from strata.snapshots import Snapshots, depth_bound


DEFAULT_RATIOS = [1, 2, 3, 4]
DEFAULT_INSERTIONS = 64
HUGE_RATIO = 2 ** 64 - 1


# ============================================================
# Helpers
# ============================================================

def _ratios(fix: Dict[str, Any]) -> List[int]:
    return fix.get("ratios", DEFAULT_RATIOS)


def _insertions(fix: Dict[str, Any]) -> int:
    return fix.get("insertions", DEFAULT_INSERTIONS)


def _fill(fix: Dict[str, Any], ratio: int, n: int) -> Tuple[Snapshots, List[Optional[Any]]]:
    """Insert ticks 1..n into a fresh store, collecting every extra."""
    snaps = Snapshots(ratio)
    extras = [snaps.insert(fix["make_value"](t)) for t in range(1, n + 1)]
    return snaps, extras


def expected_counters(ratio: int, n: int) -> List[int]:
    """Counters of every layer, top first, after n insertions.

    Layer d receives one value per carry out of layer d - 1. Receiving m
    values leaves it at counter (m - 1) mod ratio, and it carries once for
    every ratio values after its first.
    """
    counters = []
    received = n
    while received >= 1:
        counters.append((received - 1) % ratio)
        received = (received - 1) // ratio
    return counters


# ============================================================
# Construction
# ============================================================

def test_rejects_zero_ratio(fix: Dict[str, Any]) -> None:
    """A ratio below 1 never produces a store."""
    for bad in (0, -1):
        try:
            Snapshots(bad)
        except InvalidRatioError:
            continue
        raise AssertionError(f"Snapshots({bad}) should be rejected")


def test_empty_store(fix: Dict[str, Any]) -> None:
    """A new store has no layers and nothing to peek at."""
    for ratio in _ratios(fix):
        snaps = Snapshots(ratio)
        assert snaps.tick == 0
        assert snaps.last() is None
        assert list(snaps.iter()) == []
        assert len(snaps) == 0


# ============================================================
# Insertion
# ============================================================

def test_first_insertion(fix: Dict[str, Any]) -> None:
    """The first insertion yields one layer at counter 0 and no extra."""
    for ratio in _ratios(fix) + [HUGE_RATIO]:
        snaps = Snapshots(ratio)
        value = fix["make_value"](1)
        extra = snaps.insert(value)
        assert extra is None, "first insertion cannot merge"
        assert snaps.last() is value, "peek should return the inserted value"
        assert [info.counter for info in snaps.layers()] == [0]
        assert snaps.tick == 1


def test_tick_counts_insertions(fix: Dict[str, Any]) -> None:
    for ratio in _ratios(fix):
        snaps, _ = _fill(fix, ratio, _insertions(fix))
        assert snaps.tick == _insertions(fix)


def test_peek_is_top_layer(fix: Dict[str, Any]) -> None:
    """last() always equals the first value yielded by iteration."""
    for ratio in _ratios(fix):
        snaps = Snapshots(ratio)
        for t in range(1, _insertions(fix) + 1):
            snaps.insert(fix["make_value"](t))
            assert snaps.last() is next(iter(snaps))


def test_layer_count_bound(fix: Dict[str, Any]) -> None:
    """Layers never exceed ceil(log_ratio(n + 1)) + 1."""
    for ratio in _ratios(fix):
        snaps = Snapshots(ratio)
        for t in range(1, _insertions(fix) + 1):
            snaps.insert(fix["make_value"](t))
            assert len(snaps) <= depth_bound(ratio, t), \
                f"ratio {ratio}: {len(snaps)} layers after {t} insertions"


def test_counter_bound(fix: Dict[str, Any]) -> None:
    """Every counter stays within [0, ratio - 1]."""
    for ratio in _ratios(fix):
        snaps = Snapshots(ratio)
        for t in range(1, _insertions(fix) + 1):
            snaps.insert(fix["make_value"](t))
            for info in snaps.layers():
                assert 0 <= info.counter <= ratio - 1


def test_carry_pattern(fix: Dict[str, Any]) -> None:
    """Each layer absorbs ratio values before carrying one level down."""
    for ratio in _ratios(fix):
        snaps = Snapshots(ratio)
        for t in range(1, _insertions(fix) + 1):
            snaps.insert(fix["make_value"](t))
            counters = [info.counter for info in snaps.layers()]
            assert counters == expected_counters(ratio, t), \
                f"ratio {ratio}, insertion {t}: {counters}"


def test_extra_propagation(fix: Dict[str, Any]) -> None:
    """An extra comes back exactly when the insertion ended in a merge."""
    for ratio in _ratios(fix):
        snaps = Snapshots(ratio)
        for t in range(1, _insertions(fix) + 1):
            before = len(snaps)
            extra = snaps.insert(fix["make_value"](t))
            grew = len(snaps) == before + 1
            assert (extra is None) == grew, \
                f"ratio {ratio}, insertion {t}: extra {extra!r}, grew {grew}"


def test_ratio_one_always_cascades(fix: Dict[str, Any]) -> None:
    """With ratio 1 every insertion adds a layer and nothing merges."""
    snaps, extras = _fill(fix, 1, 16)
    assert extras == [None] * 16
    assert len(snaps) == 16


def test_huge_ratio_never_cascades(fix: Dict[str, Any]) -> None:
    """A ratio far beyond the insertion count keeps a single layer."""
    n = _insertions(fix)
    snaps, extras = _fill(fix, HUGE_RATIO, n)
    assert extras[0] is None
    assert all(extra is not None for extra in extras[1:])
    assert [info.counter for info in snaps.layers()] == [n - 1]


# ============================================================
# Iteration
# ============================================================

def test_iteration_idempotent(fix: Dict[str, Any]) -> None:
    """Two traversals without an insert in between agree."""
    for ratio in _ratios(fix):
        snaps, _ = _fill(fix, ratio, _insertions(fix))
        first = list(snaps.iter())
        second = list(snaps.iter())
        assert len(first) == len(second)
        assert all(a is b for a, b in zip(first, second))


def test_iteration_newest_first(fix: Dict[str, Any]) -> None:
    """Layer ticks strictly decrease from top to bottom."""
    for ratio in _ratios(fix):
        snaps, _ = _fill(fix, ratio, _insertions(fix))
        ticks = [value.get_tick() for value in snaps]
        assert ticks == sorted(ticks, reverse=True)
        assert len(set(ticks)) == len(ticks)


ALL_TESTS = {
    "construction": [
        test_rejects_zero_ratio,
        test_empty_store,
    ],
    "insertion": [
        test_first_insertion,
        test_tick_counts_insertions,
        test_peek_is_top_layer,
        test_layer_count_bound,
        test_counter_bound,
        test_carry_pattern,
        test_extra_propagation,
        test_ratio_one_always_cascades,
        test_huge_ratio_never_cascades,
    ],
    "iteration": [
        test_iteration_idempotent,
        test_iteration_newest_first,
    ],
}


def run_compliance_tests(fixture: Dict[str, Any]) -> None:
    """Run all compliance tests for the given fixture.

    Required fixture keys:
        make_value  - (tick) -> value

    Optional:
        ratios      - list of ratios to exercise (default [1, 2, 3, 4])
        insertions  - insertions per ratio (default 64)
    """
    for group, tests in ALL_TESTS.items():
        for test_fn in tests:
            test_fn(fixture)
