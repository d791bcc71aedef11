"""
Entropy and compressibility scores for byte buffers.
"""

import numpy as np

from .compress import get_compressor

DEFAULT_WINDOW = 1024


def entropy_rows(rows) -> np.ndarray:
    """
    Shannon entropy (bits/byte) of each row of a 2-D uint8 array.

    Counts are sorted before summing so a row's value does not depend on
    the order of its bytes. Empty buckets contribute nothing; empty rows give 0.0.
    """
    rows = np.atleast_2d(np.asarray(rows, dtype=np.uint8))
    n_rows, n = rows.shape
    if n == 0:
        return np.zeros(n_rows, dtype=np.float64)
    offsets = (np.arange(n_rows, dtype=np.int64) * 256)[:, None]
    counts = np.bincount((rows + offsets).ravel(), minlength=n_rows * 256).reshape(n_rows, 256)
    counts = np.sort(counts, axis=1)
    p = counts / n
    logp = np.zeros_like(p)
    np.log2(p, out=logp, where=counts > 0)
    return -(p * logp).sum(axis=1)


def entropy(data) -> float:
    """Shannon entropy of a byte sequence, in [0, 8]. Empty input is defined as 0.0."""
    arr = np.frombuffer(bytes(data), dtype=np.uint8)
    return float(entropy_rows(arr[None, :])[0])


def compressed_size(data, compressor: str = "context") -> int:
    """Length in bytes of `data` after the named compressor."""
    return len(get_compressor(compressor)(bytes(data)))
