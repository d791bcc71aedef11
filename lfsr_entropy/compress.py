"""
Lossless byte compressors used to measure how structured a buffer is.

  - context: adaptive order-1 context model driving a binary arithmetic coder
  - zlib / bz2 / lzma: standard library codecs, for comparison
"""

import bz2
import lzma
import zlib
from typing import Callable, Dict

PROB_BITS = 12
PROB_ONE = 1 << PROB_BITS
ADAPT_SHIFT = 4
TOP_MASK = 0xFF000000
WORD = 0xFFFFFFFF


def _new_model():
    # one probability per (previous byte, partial byte with leading 1 bit)
    return [[PROB_ONE // 2] * 256 for _ in range(256)]


def _update(table, c0: int, bit: int) -> None:
    if bit:
        table[c0] += (PROB_ONE - table[c0]) >> ADAPT_SHIFT
    else:
        table[c0] -= table[c0] >> ADAPT_SHIFT


def context_compress(data: bytes) -> bytes:
    """Compress `data` with the order-1 context model. Output length is the score."""
    model = _new_model()
    x1, x2 = 0, WORD
    out = bytearray()
    prev = 0
    for byte in data:
        table = model[prev]
        c0 = 1
        for i in range(7, -1, -1):
            bit = (byte >> i) & 1
            xmid = x1 + ((x2 - x1) >> PROB_BITS) * table[c0]
            if bit:
                x2 = xmid
            else:
                x1 = xmid + 1
            _update(table, c0, bit)
            c0 = (c0 << 1) | bit
            # shift out identical leading bytes
            while not (x1 ^ x2) & TOP_MASK:
                out.append(x2 >> 24)
                x1 = (x1 << 8) & WORD
                x2 = ((x2 << 8) & WORD) | 0xFF
        prev = byte
    out.append(x1 >> 24)
    return bytes(out)


def context_decompress(blob: bytes, length: int) -> bytes:
    """Inverse of context_compress; `length` is the number of bytes to decode."""
    model = _new_model()
    x1, x2 = 0, WORD
    pos = 0

    def next_byte() -> int:
        nonlocal pos
        # past the end the encoder's flush is completed with 0xFF
        b = blob[pos] if pos < len(blob) else 0xFF
        pos += 1
        return b

    x = 0
    for _ in range(4):
        x = (x << 8) | next_byte()

    out = bytearray(length)
    prev = 0
    for k in range(length):
        table = model[prev]
        c0 = 1
        for _ in range(8):
            xmid = x1 + ((x2 - x1) >> PROB_BITS) * table[c0]
            bit = 1 if x <= xmid else 0
            if bit:
                x2 = xmid
            else:
                x1 = xmid + 1
            _update(table, c0, bit)
            c0 = (c0 << 1) | bit
            while not (x1 ^ x2) & TOP_MASK:
                x1 = (x1 << 8) & WORD
                x2 = ((x2 << 8) & WORD) | 0xFF
                x = ((x << 8) & WORD) | next_byte()
        out[k] = c0 & 0xFF
        prev = out[k]
    return bytes(out)


COMPRESSORS: Dict[str, Callable[[bytes], bytes]] = {
    "context": context_compress,
    "zlib": lambda data: zlib.compress(data, 9),
    "bz2": lambda data: bz2.compress(data, 9),
    "lzma": lambda data: lzma.compress(data),
}


def get_compressor(name: str) -> Callable[[bytes], bytes]:
    try:
        return COMPRESSORS[name]
    except KeyError:
        raise ValueError(f"Unknown compressor {name!r}, choose from {sorted(COMPRESSORS)}") from None
