"""Search LFSR keystreams whose XOR with a random sample lowers its entropy."""

from .lfsr import build_byte, keystream, keystream_batch, parity, period, step, xor_bytes
from .scoring import compressed_size, entropy, entropy_rows
from .search import Candidate, baseline, search, skip_repeated_masks

__version__ = "0.1.0"
