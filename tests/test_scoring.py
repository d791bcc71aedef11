import random

import numpy as np
import pytest

from lfsr_entropy.compress import COMPRESSORS, context_compress, context_decompress, get_compressor
from lfsr_entropy.scoring import compressed_size, entropy, entropy_rows


def random_bytes(n, seed=0):
    rng = random.Random(seed)
    return bytes(rng.getrandbits(8) for _ in range(n))


def test_uniform_distribution_is_eight_bits():
    data = bytes(range(256)) * 4
    assert entropy(data) == pytest.approx(8.0, abs=1e-9)


def test_constant_sequence_is_zero():
    assert entropy(bytes(1024)) == 0.0
    assert entropy(b"\x7f" * 10) == 0.0


def test_empty_input_is_zero():
    assert entropy(b"") == 0.0


def test_two_symbols_is_one_bit():
    assert entropy(b"\x00\x01" * 50) == pytest.approx(1.0)


def test_permutation_invariant():
    data = bytearray(random_bytes(1024, seed=3)[:300] * 3)
    shuffled = data[:]
    random.Random(5).shuffle(shuffled)
    assert entropy(data) == entropy(shuffled)


def test_entropy_bounds():
    for seed in range(5):
        e = entropy(random_bytes(1024, seed))
        assert 0.0 <= e <= 8.0


def test_entropy_rows_matches_entropy():
    rows = np.frombuffer(random_bytes(4 * 128, seed=11), dtype=np.uint8).reshape(4, 128)
    values = entropy_rows(rows)
    assert values.shape == (4,)
    for row, value in zip(rows, values):
        assert entropy(row.tobytes()) == value


def test_structured_data_compresses_better():
    noise = random_bytes(1024, seed=1)
    assert compressed_size(bytes(1024)) < compressed_size(noise)
    assert compressed_size(bytes(1024), "zlib") < compressed_size(noise, "zlib")


@pytest.mark.parametrize("data", [b"", b"a", bytes(1024), b"abracadabra" * 40, random_bytes(1024, seed=2)])
def test_context_coder_round_trip(data):
    blob = context_compress(data)
    assert context_decompress(blob, len(data)) == data


def test_compressor_registry():
    assert set(COMPRESSORS) == {"context", "zlib", "bz2", "lzma"}
    with pytest.raises(ValueError):
        get_compressor("paq8")
