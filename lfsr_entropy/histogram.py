"""
Cycle histogram of small LFSRs (diagnostic, independent of the search).

Every width-bit mask with the MSB set is walked from state 1 back to 1; the
visited states are counted per value and plotted.
"""

from typing import Dict, List, Tuple

import matplotlib.pyplot as plt
import numpy as np

from . import lfsr

DEFAULT_WIDTH = 8
DEFAULT_PLOT = "histogram.png"
PLOT_INCHES = 8


def walk(mask: int, width: int = DEFAULT_WIDTH) -> List[int]:
    """States visited from 1 until the register is back at 1 (inclusive)."""
    return lfsr.walk(mask, width)


def cycle_histogram(width: int = DEFAULT_WIDTH) -> Tuple[Dict[int, int], List[int], np.ndarray]:
    """
    Walk all MSB-set masks of the given width.
    Returns (period per mask, every visited state in walk order, visits per state value).
    """
    top = 1 << (width - 1)
    periods = {}
    values = []
    buckets = np.zeros(1 << width, dtype=np.int64)
    for mask in range(top, 1 << width):
        states = walk(mask, width)
        periods[mask] = len(states)
        values.extend(states)
        np.add.at(buckets, states, 1)
    return periods, values, buckets


def sorted_buckets(buckets) -> List[Tuple[int, int]]:
    """(value, count) pairs by ascending count; ties keep value order."""
    return sorted(((v, int(c)) for v, c in enumerate(buckets)), key=lambda vc: vc[1])


def plot_histogram(values, path: str = DEFAULT_PLOT, bins: int = 256) -> None:
    """Save a frequency plot of the visited states as a square PNG."""
    plt.figure(figsize=(PLOT_INCHES, PLOT_INCHES))
    plt.hist(values, bins=bins)
    plt.xlabel("State")
    plt.ylabel("Visits")
    plt.title("histogram plot")
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
