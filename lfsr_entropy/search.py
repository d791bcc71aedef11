"""
Exhaustive LFSR mask / tap search minimizing the entropy of sample XOR keystream.

For every mask index i (mask = 0x8000 | i) and tap selector j the register is
reset (to 1, or to j), a window-length keystream is XORed into the sample and
the result is scored. Improvements of the best-so-far record are reported
as they happen.
"""

import math
from typing import Callable, Iterable, NamedTuple, Optional

import numpy as np
from tqdm.auto import tqdm

from .compress import get_compressor
from .lfsr import DEFAULT_SEED, keystream_batch, register_states
from .scoring import DEFAULT_WINDOW, entropy, entropy_rows

DEFAULT_BATCH = 1024
MASK_MSB = 0x8000
FULL_RANGE = range(1 << 16)

SEED_POLICIES = ("one", "tap")
SCORE_POLICIES = ("entropy", "compressed")


class Candidate(NamedTuple):
    mask: int
    tap: int
    seed: int
    entropy: float
    bits_saved: float
    compressed_delta: Optional[int] = None


def baseline(sample: bytes, window: int = DEFAULT_WINDOW) -> float:
    """Entropy of the untouched sample window."""
    return entropy(sample[:window])


def skip_repeated_masks(mask_index: int, taps: np.ndarray) -> np.ndarray:
    """Prune hook: indices >= 0x8000 give the same mask as index & 0x7fff."""
    return np.full(taps.shape, mask_index >= MASK_MSB, dtype=bool)


def _batches(values: np.ndarray, size: int):
    for start in range(0, len(values), size):
        yield values[start:start + size]


def search(sample: bytes,
           masks: Iterable[int] = FULL_RANGE,
           taps: Iterable[int] = FULL_RANGE,
           seed_policy: str = "one",
           score_policy: str = "entropy",
           compressor: str = "context",
           window: int = DEFAULT_WINDOW,
           batch_size: int = DEFAULT_BATCH,
           prune: Optional[Callable[[int, np.ndarray], np.ndarray]] = None,
           report: Optional[Callable[[Candidate], None]] = None,
           progress: bool = False) -> Optional[Candidate]:
    """
    Run the nested mask x tap enumeration and return the best record.

    Improvement is strict: entropy < best. With score_policy="compressed" an
    entropy tie also improves the record when the compressed size is strictly
    smaller; compressed sizes are only measured for candidates that are not
    worse than the record. `prune(mask_index, taps)` returns a boolean array
    of pairs to skip. `report` is called with every new record.
    Returns None only when nothing was evaluated.
    """
    if seed_policy not in SEED_POLICIES:
        raise ValueError(f"seed_policy must be one of {SEED_POLICIES}, got {seed_policy!r}")
    if score_policy not in SCORE_POLICIES:
        raise ValueError(f"score_policy must be one of {SCORE_POLICIES}, got {score_policy!r}")
    if window <= 0:
        raise ValueError("window must be positive")
    if len(sample) < window:
        raise ValueError(f"sample has {len(sample)} bytes, window needs {window}")
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    compress = get_compressor(compressor) if score_policy == "compressed" else None
    data = np.frombuffer(bytes(sample[:window]), dtype=np.uint8)
    initial = baseline(sample, window)
    tap_values = np.fromiter(taps, dtype=np.int64)

    best: Optional[Candidate] = None
    best_entropy = math.inf
    best_size = math.inf

    for i in tqdm(masks, disable=not progress, desc="masks"):
        mask = MASK_MSB | i
        # with a fixed seed every tap batch shares one register walk
        shared = register_states(mask, [DEFAULT_SEED], 8 * window) if seed_policy == "one" else None
        for tap_batch in _batches(tap_values, batch_size):
            seeds = tap_batch if seed_policy == "tap" else DEFAULT_SEED
            skipped = prune(i, tap_batch) if prune is not None else None
            if skipped is not None and skipped.all():
                continue

            candidates = np.bitwise_xor(keystream_batch(window, mask, tap_batch, seeds, states=shared), data)
            scores = entropy_rows(candidates)
            live = np.ones(scores.shape, dtype=bool) if skipped is None else ~skipped
            scores[~live] = np.inf

            # entropy record just before each candidate, in enumeration order
            running = np.minimum.accumulate(np.concatenate(([best_entropy], scores)))[:-1]
            if compress is None:
                hits = np.flatnonzero(live & (scores < running))
            else:
                hits = np.flatnonzero(live & (scores <= running))

            for k in hits:
                e = float(scores[k])
                if e > best_entropy:
                    continue
                size = None
                if compress is not None:
                    size = len(compress(candidates[k].tobytes()))
                    if not (e < best_entropy or size < best_size):
                        continue
                    best_size = size
                elif not e < best_entropy:
                    continue
                tap = int(tap_batch[k])
                best_entropy = e
                best = Candidate(
                    mask=mask,
                    tap=tap,
                    seed=tap if seed_policy == "tap" else DEFAULT_SEED,
                    entropy=e,
                    bits_saved=(initial - e) * window,
                    compressed_delta=None if size is None else size - window,
                )
                if report is not None:
                    report(best)
    return best
