"""
Reference sample sources: a local binary file, or bits fetched from the
ANU quantum random number generator and packed into bytes.
"""

from pathlib import Path

import numpy as np
import requests

from .scoring import DEFAULT_WINDOW

DEFAULT_DATA = "data/AMillionRandomDigits.bin"
DEFAULT_QUANTUM = "data/quantum.bin"
QRNG_URL = "https://qrng.anu.edu.au/wp-content/plugins/colours-plugin/get_block_binary.php"
DEFAULT_MIN_BITS = 8 * 1024
DEFAULT_TIMEOUT = 30.0


def load_sample(path: str, window: int = DEFAULT_WINDOW) -> bytes:
    """Read the whole sample file; it must hold at least `window` bytes."""
    data = Path(path).read_bytes()
    if len(data) < window:
        raise ValueError(f"{path}: {len(data)} bytes, need at least {window}")
    return data


def pack_bits(text) -> bytes:
    """
    Pack ASCII '0'/'1' characters into bytes, 8 per byte, MSB first.
    Any other character is ignored and an incomplete trailing byte is dropped.
    """
    if isinstance(text, str):
        text = text.encode("ascii", errors="ignore")
    raw = np.frombuffer(bytes(text), dtype=np.uint8)
    bits = raw[(raw == ord("0")) | (raw == ord("1"))] - ord("0")
    bits = bits[: len(bits) - len(bits) % 8]
    return np.packbits(bits).tobytes()


def fetch_bits(url: str = QRNG_URL, min_bits: int = DEFAULT_MIN_BITS,
               timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Request blocks of '0'/'1' text until at least `min_bits` bit characters are collected."""
    collected = bytearray()
    n_bits = 0
    while n_bits < min_bits:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        block = response.content
        n_new = block.count(b"0") + block.count(b"1")
        if n_new == 0:
            raise ValueError(f"{url} returned no bits")
        collected.extend(block)
        n_bits += n_new
        print(f"[*] {n_bits} bits fetched")
    return bytes(collected)


def fetch_sample(path: str = DEFAULT_QUANTUM, url: str = QRNG_URL,
                 min_bits: int = DEFAULT_MIN_BITS, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """Fetch quantum bits, pack them and write the binary sample to `path`."""
    data = pack_bits(fetch_bits(url, min_bits, timeout))
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    return data
