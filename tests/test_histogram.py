import pytest

from lfsr_entropy.histogram import cycle_histogram, plot_histogram, sorted_buckets, walk
from lfsr_entropy.lfsr import period


def test_walk_returns_to_one():
    states = walk(0xB8)
    assert len(states) == 255
    assert states[-1] == 1
    assert sorted(states) == list(range(1, 256))


def test_walk_rejects_mask_without_msb():
    with pytest.raises(ValueError):
        walk(0x38)


def test_cycle_histogram_counts():
    periods, values, buckets = cycle_histogram()
    assert sorted(periods) == list(range(0x80, 0x100))
    assert sum(periods.values()) == len(values) == buckets.sum()
    assert buckets[0] == 0
    # every walk ends on state 1
    assert buckets[1] == 128
    assert sum(1 for n in periods.values() if n == 255) == 16


def test_sorted_buckets_ascending():
    pairs = sorted_buckets([5, 0, 3, 3])
    assert pairs == [(1, 0), (2, 3), (3, 3), (0, 5)]


def test_plot_histogram_writes_png(tmp_path):
    _, values, _ = cycle_histogram(4)
    out = tmp_path / "histogram.png"
    plot_histogram(values, str(out), bins=16)
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_cycle_histogram_periods_match_register_period():
    periods, _, _ = cycle_histogram()
    assert periods == {mask: period(mask, 8) for mask in range(0x80, 0x100)}
