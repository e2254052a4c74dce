"""Tests for the cascade algorithm over raw chains."""

import pytest
from hypothesis import given, settings, strategies as st

from strata.adapters.ticks import SpanLayer, TickLayer
from strata.cascade import cascade, cascade_recursive
from strata.compliance import expected_counters
from strata.errors import InvalidRatioError, InvariantViolation, TickOrderError
from strata.snapshots import Snapshots, depth_bound
from strata.types import END, End, Stratum, walk


def _build(ratio, n, insert=cascade):
    chain, extras = END, []
    for t in range(1, n + 1):
        chain, extra = insert(ratio, chain, TickLayer(t))
        extras.append(extra)
    return chain, extras


def _shape(chain):
    return [(link.value.tick, link.counter) for link in walk(chain)]


# ============================================================
# Branches
# ============================================================

class TestBranches:
    def test_terminal_creates_layer(self):
        chain, extra = cascade(4, END, TickLayer(1))
        assert extra is None
        assert chain == Stratum(value=TickLayer(1), counter=0, tail=END)
        assert chain.tail is END

    def test_unsaturated_merges_and_keeps_tail(self):
        tail = Stratum(value=TickLayer(1), counter=0)
        top = Stratum(value=TickLayer(5), counter=1, tail=tail)
        chain, extra = cascade(4, top, TickLayer(6))
        assert extra == 5
        assert chain.counter == 2
        assert chain.value == TickLayer(6)
        assert chain.tail is tail

    def test_saturated_carries_old_value(self):
        top = Stratum(value=TickLayer(4), counter=3)
        chain, extra = cascade(4, top, TickLayer(5))
        assert extra is None
        assert _shape(chain) == [(5, 0), (4, 0)]

    def test_old_chain_is_not_modified(self):
        chain, _ = _build(3, 7)
        before = _shape(chain)
        cascade(3, chain, TickLayer(8))
        assert _shape(chain) == before

    def test_only_last_merge_is_reported(self):
        # top saturated, second layer has room: the carry merges there
        bottom = Stratum(value=TickLayer(2), counter=0)
        top = Stratum(value=TickLayer(3), counter=1, tail=bottom)
        chain, extra = cascade(2, top, TickLayer(4))
        assert extra == 2
        assert _shape(chain) == [(4, 0), (3, 1)]

    def test_deep_carry_without_merge(self):
        chain, _ = _build(2, 6)
        assert _shape(chain) == [(6, 1), (4, 1)]
        chain, extra = cascade(2, chain, TickLayer(7))
        assert extra is None
        assert _shape(chain) == [(7, 0), (6, 0), (4, 0)]


# ============================================================
# Degenerate ratios and bad input
# ============================================================

class TestRatios:
    def test_ratio_one_stacks_every_value(self):
        chain, extras = _build(1, 5)
        assert extras == [None] * 5
        assert _shape(chain) == [(5, 0), (4, 0), (3, 0), (2, 0), (1, 0)]

    def test_ratio_one_deep_chain(self):
        # deeper than the default recursion limit
        snaps = Snapshots(1)
        for t in range(1, 1501):
            snaps.insert(TickLayer(t))
        assert len(snaps) == 1500
        assert snaps.last() == TickLayer(1500)

    @pytest.mark.parametrize("ratio", [0, -2, True, 2.0])
    def test_bad_ratio(self, ratio):
        with pytest.raises(InvalidRatioError):
            cascade(ratio, END, TickLayer(1))
        with pytest.raises(InvalidRatioError):
            cascade_recursive(ratio, END, TickLayer(1))


class TestInvariants:
    @pytest.mark.parametrize("insert", [cascade, cascade_recursive])
    def test_counter_above_range(self, insert):
        bad = Stratum(value=TickLayer(1), counter=4)
        with pytest.raises(InvariantViolation, match="counter 4 at depth 0"):
            insert(4, bad, TickLayer(2))

    @pytest.mark.parametrize("insert", [cascade, cascade_recursive])
    def test_negative_counter_below_top(self, insert):
        bad = Stratum(value=TickLayer(2), counter=1,
                      tail=Stratum(value=TickLayer(1), counter=-1))
        with pytest.raises(InvariantViolation, match="depth 1"):
            insert(2, bad, TickLayer(3))

    @pytest.mark.parametrize("insert", [cascade, cascade_recursive])
    def test_foreign_link(self, insert):
        bad = Stratum(value=TickLayer(1), counter=0, tail=None)
        with pytest.raises(InvariantViolation, match="NoneType"):
            insert(1, bad, TickLayer(2))

    def test_tick_check(self):
        top = Stratum(value=SpanLayer(first=1, last=4), counter=0)
        with pytest.raises(TickOrderError):
            cascade(4, top, SpanLayer.of(4), check_ticks=True)
        with pytest.raises(TickOrderError):
            cascade_recursive(4, top, SpanLayer.of(3), check_ticks=True)


# ============================================================
# Properties
# ============================================================

ratios = st.integers(min_value=1, max_value=9)
counts = st.integers(min_value=0, max_value=150)


@given(ratio=ratios, n=counts)
def test_recursive_and_iterative_agree(ratio, n):
    chain_a, extras_a = _build(ratio, n, cascade)
    chain_b, extras_b = _build(ratio, n, cascade_recursive)
    assert chain_a == chain_b
    assert extras_a == extras_b


@given(ratio=ratios, n=counts)
def test_layer_count_within_bound(ratio, n):
    chain, _ = _build(ratio, n)
    assert sum(1 for _ in walk(chain)) <= depth_bound(ratio, n)


@given(ratio=ratios, n=counts)
def test_counters_follow_mixed_radix(ratio, n):
    chain, _ = _build(ratio, n)
    assert [link.counter for link in walk(chain)] == expected_counters(ratio, n)


@given(ratio=ratios, n=st.integers(min_value=1, max_value=150))
def test_values_conserved(ratio, n):
    snaps = Snapshots(ratio)
    for t in range(1, n + 1):
        snaps.insert(SpanLayer.of(t, amount=1))
    spans = list(snaps)
    # spans tile 1..n with no gap or overlap, newest first
    assert spans[-1].first == 1
    assert spans[0].last == n
    for newer, older in zip(spans, spans[1:]):
        assert older.last + 1 == newer.first
    assert sum(s.total for s in spans) == n


@settings(max_examples=50)
@given(st.lists(st.integers(min_value=1, max_value=6), min_size=1, max_size=5))
def test_growth_matches_missing_extra(ratio_seq):
    # the chain grows by at most one layer, and only when no merge ran
    for ratio in ratio_seq:
        chain = END
        for t in range(1, 40):
            before = sum(1 for _ in walk(chain))
            chain, extra = cascade(ratio, chain, TickLayer(t))
            after = sum(1 for _ in walk(chain))
            assert after in (before, before + 1)
            assert (extra is None) == (after == before + 1)


def test_end_is_singleton_shape():
    assert End() == END
    assert list(walk(END)) == []
