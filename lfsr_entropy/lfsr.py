"""
LFSR keystream generator

Implements:
  - Galois-style right-shift LFSR step with a tap mask (8 or 16 bits)
  - Parity of a masked register value as the output bit
  - MSB-first output bytes, 8 steps per byte
  - Vectorized (numpy) keystreams for a batch of tap selectors / seeds

Not cryptographically secure - for randomness experiments.
"""

from typing import Iterable, List, Optional, Tuple

import numpy as np

DEFAULT_WIDTH = 16
DEFAULT_SEED = 1

# parity of every 16-bit value, used as a lookup table by the batch code
PARITY_TABLE = np.array([v.bit_count() & 1 for v in range(1 << 16)], dtype=np.uint8)


def step(state: int, mask: int, width: int = DEFAULT_WIDTH) -> int:
    """Advance the register once: shift right, fold the mask in when the low bit was set."""
    return ((state >> 1) ^ (mask & -(state & 1))) & ((1 << width) - 1)


def parity(x: int) -> int:
    """1 if x has an odd number of set bits, else 0."""
    return x.bit_count() & 1


def build_byte(state: int, mask: int, tap: int) -> Tuple[int, int]:
    """
    Step the 16-bit register 8 times and pack parity(state & tap) after each step.
    The first bit computed lands in the MSB. Returns (byte, new_state).
    """
    b = 0
    for _ in range(8):
        state = step(state, mask)
        b = (b << 1) | parity(state & tap)
    return b, state


def keystream(length: int, mask: int, tap: int, seed: int = DEFAULT_SEED) -> bytes:
    """Produce `length` keystream bytes, threading the register across byte boundaries."""
    out = bytearray(length)
    state = seed
    for i in range(length):
        out[i], state = build_byte(state, mask, tap)
    return bytes(out)


def walk(mask: int, width: int = DEFAULT_WIDTH, start: int = 1) -> List[int]:
    """
    States visited from `start` until the register is back at `start` (inclusive).

    With the mask MSB set the step is a bijection on width-bit values, so the
    walk always terminates (at most 2^width - 1 steps for a non-zero start).
    """
    if not (mask >> (width - 1)) & 1:
        raise ValueError(f"mask 0x{mask:x} must have bit {width - 1} set")
    visited = []
    state = start
    while True:
        state = step(state, mask, width)
        visited.append(state)
        if state == start:
            return visited


def period(mask: int, width: int = DEFAULT_WIDTH, start: int = 1) -> int:
    """Number of steps for the register to come back to `start`."""
    return len(walk(mask, width, start))


def register_states(mask: int, seeds: Iterable[int], steps: int) -> np.ndarray:
    """
    Step one register per seed in parallel.
    Returns a (len(seeds), steps) uint16 array; column t is the state after t + 1 steps.
    """
    st = np.asarray(seeds, dtype=np.uint16).copy()
    m = np.uint16(mask)
    out = np.empty((st.shape[0], steps), dtype=np.uint16)
    for t in range(steps):
        st = (st >> 1) ^ ((st & 1) * m)
        out[:, t] = st
    return out


def keystream_batch(length: int, mask: int, taps, seeds=DEFAULT_SEED,
                    states: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Keystreams for many (tap, seed) pairs under one mask.

    Row k is byte-for-byte keystream(length, mask, taps[k], seeds[k]).
    When every seed is the same the register walk is computed once and broadcast.
    `states` may carry that shared walk, register_states(mask, [seed], 8 * length),
    so callers scanning several tap batches under one mask compute it only once.
    """
    taps = np.asarray(taps, dtype=np.uint16)
    steps = 8 * length
    seeds = np.broadcast_to(np.asarray(seeds, dtype=np.uint16), taps.shape)
    if states is not None:
        if states.shape != (1, steps):
            raise ValueError(f"states must have shape (1, {steps}), got {states.shape}")
    elif taps.size and np.all(seeds == seeds[0]):
        states = register_states(mask, seeds[:1], steps)
    else:
        states = register_states(mask, seeds, steps)
    bits = PARITY_TABLE[states & taps[:, None]]
    # packbits is MSB-first, matching build_byte
    return np.packbits(bits, axis=1)


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """XOR two equal-length byte sequences."""
    if len(a) != len(b):
        raise ValueError(f"length mismatch: {len(a)} != {len(b)}")
    result = np.bitwise_xor(np.frombuffer(a, dtype=np.uint8), np.frombuffer(b, dtype=np.uint8))
    return result.tobytes()
